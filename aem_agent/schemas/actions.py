"""
Action Schema

The closed set of mutation intents the planner may propose. Each variant
is a frozen pydantic model; the wire format uses the camelCase names the
AEM gateway expects, Python code uses snake_case attributes.
"""

import json
from collections.abc import Mapping
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StringConstraints,
    TypeAdapter,
    ValidationError,
)

from ..errors import MalformedActionError

# Absolute JCR content path, e.g. /content/okta/marketing
ContentPath = Annotated[str, StringConstraints(min_length=1, pattern=r"^/")]
NonEmptyStr = Annotated[str, StringConstraints(min_length=1)]

ActionType = Literal["CREATE_PAGE", "UPDATE_PAGE", "DELETE_PAGE", "PUBLISH_PAGE", "DONE"]
MutationType = Literal["CREATE_PAGE", "UPDATE_PAGE"]


class _ActionModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class CreatePageAction(_ActionModel):
    """Create a page below parent_path from an allowed template"""
    type: Literal["CREATE_PAGE"] = "CREATE_PAGE"
    parent_path: ContentPath = Field(alias="parentPath")
    name: NonEmptyStr
    title: NonEmptyStr
    template: NonEmptyStr
    properties: Optional[dict[str, Any]] = None

    @property
    def page_path(self) -> str:
        return f"{self.parent_path.rstrip('/')}/{self.name}"


class UpdatePageAction(_ActionModel):
    """Update page properties"""
    type: Literal["UPDATE_PAGE"] = "UPDATE_PAGE"
    path: ContentPath
    properties: dict[str, Any]


class DeletePageAction(_ActionModel):
    """Delete a page (only soft deletes pass the guard)"""
    type: Literal["DELETE_PAGE"] = "DELETE_PAGE"
    path: ContentPath
    soft_delete: StrictBool = Field(alias="softDelete")


class PublishPageAction(_ActionModel):
    """Activate (publish) a page, optionally scheduled"""
    type: Literal["PUBLISH_PAGE"] = "PUBLISH_PAGE"
    path: ContentPath
    activate: StrictBool
    schedule_at: Optional[datetime] = Field(default=None, alias="scheduleAt")


class DoneAction(_ActionModel):
    """Planner signals the goal is complete"""
    type: Literal["DONE"] = "DONE"
    summary: Optional[str] = None


MutatingAction = Union[CreatePageAction, UpdatePageAction, DeletePageAction, PublishPageAction]
AgentAction = Union[CreatePageAction, UpdatePageAction, DeletePageAction, PublishPageAction, DoneAction]
Action = Annotated[AgentAction, Field(discriminator="type")]

_ACTION_ADAPTER: TypeAdapter = TypeAdapter(Action)
_ACTION_MODELS = (CreatePageAction, UpdatePageAction, DeletePageAction, PublishPageAction, DoneAction)


def _describe_errors(error: ValidationError) -> list[str]:
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "action"
        problems.append(f"{location}: {item['msg']}")
    return problems


def parse_action(payload: Any) -> AgentAction:
    """
    Validate an external proposal into exactly one action variant.

    Args:
        payload: Mapping decoded from planner output (or an action instance)

    Returns:
        The parsed action

    Raises:
        MalformedActionError: unknown type tag, missing field or bad field type
    """
    if isinstance(payload, _ACTION_MODELS):
        return payload

    if not isinstance(payload, Mapping):
        raise MalformedActionError(
            f"Action payload must be an object, got {type(payload).__name__}."
        )

    try:
        return _ACTION_ADAPTER.validate_python(dict(payload))
    except ValidationError as e:
        problems = _describe_errors(e)
        raise MalformedActionError(
            "Malformed action: " + "; ".join(problems),
            problems=problems,
        ) from e


def parse_action_text(text: str) -> AgentAction:
    """
    Parse the first JSON object found in free-form LLM output.

    Leading prose and trailing code fences are tolerated.
    """
    start = text.find("{")
    if start < 0:
        raise MalformedActionError("Planner response did not contain a JSON object.")

    try:
        payload, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise MalformedActionError(f"Planner response was not valid JSON: {e}") from e

    return parse_action(payload)


def action_payload(action: MutatingAction) -> dict[str, Any]:
    """RPC request body for an action (wire names, no type tag)"""
    return action.model_dump(mode="json", by_alias=True, exclude={"type"}, exclude_none=True)


def action_to_dict(action: AgentAction) -> dict[str, Any]:
    """JSON-ready representation including the type tag"""
    return action.model_dump(mode="json", by_alias=True, exclude_none=True)
