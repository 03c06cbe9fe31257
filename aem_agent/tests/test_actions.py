"""
Tests for the Action Schema
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from ..errors import MalformedActionError
from ..schemas.actions import (
    CreatePageAction,
    DeletePageAction,
    DoneAction,
    PublishPageAction,
    UpdatePageAction,
    action_payload,
    parse_action,
    parse_action_text,
)
from .conftest import LANDING_TEMPLATE, PAGE_PATH, create_page, delete_page, publish_page, update_page


class TestParseAction:
    """Tests for parse_action"""

    def test_parses_each_variant(self):
        assert isinstance(parse_action(create_page()), CreatePageAction)
        assert isinstance(parse_action(update_page()), UpdatePageAction)
        assert isinstance(parse_action(delete_page()), DeletePageAction)
        assert isinstance(parse_action(publish_page()), PublishPageAction)
        assert isinstance(parse_action({"type": "DONE"}), DoneAction)

    def test_create_page_fields(self):
        action = parse_action(create_page(properties={"description": "Landing"}))

        assert action.parent_path == "/content/okta/marketing"
        assert action.template == LANDING_TEMPLATE
        assert action.properties == {"description": "Landing"}
        assert action.page_path == PAGE_PATH

    def test_unknown_type_rejected(self):
        with pytest.raises(MalformedActionError):
            parse_action({"type": "RENAME_PAGE", "path": PAGE_PATH})

    def test_missing_type_rejected(self):
        with pytest.raises(MalformedActionError):
            parse_action({"path": PAGE_PATH, "properties": {}})

    def test_missing_required_field_rejected(self):
        with pytest.raises(MalformedActionError) as exc_info:
            parse_action({"type": "UPDATE_PAGE", "path": PAGE_PATH})

        assert exc_info.value.problems
        assert any("properties" in problem for problem in exc_info.value.problems)

    def test_soft_delete_must_be_boolean(self):
        with pytest.raises(MalformedActionError):
            parse_action({"type": "DELETE_PAGE", "path": PAGE_PATH, "softDelete": "true"})

    def test_activate_must_be_boolean(self):
        with pytest.raises(MalformedActionError):
            parse_action({"type": "PUBLISH_PAGE", "path": PAGE_PATH, "activate": 1})

    def test_relative_path_rejected(self):
        with pytest.raises(MalformedActionError):
            parse_action(update_page(path="content/okta/page"))

    def test_non_mapping_rejected(self):
        with pytest.raises(MalformedActionError):
            parse_action("DONE")
        with pytest.raises(MalformedActionError):
            parse_action([create_page()])

    def test_schedule_at_parsed(self):
        action = parse_action({**publish_page(), "scheduleAt": "2026-11-01T09:00:00Z"})

        assert isinstance(action.schedule_at, datetime)
        assert action.schedule_at.year == 2026

    def test_existing_action_returned_unchanged(self):
        action = DoneAction(summary="finished")
        assert parse_action(action) is action

    def test_actions_are_frozen(self):
        action = parse_action(update_page())
        with pytest.raises(ValidationError):
            action.path = "/content/okta/other"


class TestParseActionText:
    """Tests for extracting actions from LLM output"""

    def test_plain_json(self):
        action = parse_action_text('{"type": "DONE", "summary": "No work needed"}')
        assert action == DoneAction(summary="No work needed")

    def test_prose_and_code_fence(self):
        text = 'Here is the next action:\n```json\n{"type": "DONE", "summary": "ok"}\n```'
        action = parse_action_text(text)
        assert action.summary == "ok"

    def test_no_json_object(self):
        with pytest.raises(MalformedActionError):
            parse_action_text("I would create a page next.")

    def test_truncated_json(self):
        with pytest.raises(MalformedActionError):
            parse_action_text('{"type": "CREATE_PAGE", "parentPath": ')


class TestActionPayload:
    """Tests for the RPC request body"""

    def test_uses_wire_names_without_type(self):
        payload = action_payload(parse_action(delete_page()))
        assert payload == {"path": PAGE_PATH, "softDelete": True}

    def test_omits_unset_optional_fields(self):
        payload = action_payload(parse_action(create_page()))

        assert payload["parentPath"] == "/content/okta/marketing"
        assert "properties" not in payload
        assert "type" not in payload

    def test_schedule_at_serialized(self):
        payload = action_payload(parse_action({**publish_page(), "scheduleAt": "2026-11-01T09:00:00Z"}))
        assert payload["scheduleAt"].startswith("2026-11-01T09:00:00")
