"""
Shared fixtures for agent tests
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from ..schemas.policy import PolicyConfig, PublishPolicy
from ..tools.executor import IdempotentExecutor
from ..workflow import AEMAgentWorkflow

LANDING_TEMPLATE = "/conf/okta/settings/wcm/templates/landing-page"
PRESS_TEMPLATE = "/conf/okta/settings/wcm/templates/press-release"
PAGE_PATH = "/content/okta/marketing/zero-trust"


class ScriptedPlanner:
    """Planner that replays a fixed list of proposals, then DONE"""

    def __init__(self, actions: list[Any]):
        self.actions = list(actions)
        self.calls = 0
        self.seen_states: list[dict] = []

    async def plan(self, state: dict) -> Any:
        self.seen_states.append(dict(state))
        if self.calls < len(self.actions):
            action = self.actions[self.calls]
        else:
            action = {"type": "DONE"}
        self.calls += 1
        return action


class FakeGatewayClient:
    """Stands in for AEMGatewayClient; every RPC is an AsyncMock"""

    def __init__(self):
        self.create_page_with_template = AsyncMock(return_value={"path": PAGE_PATH})
        self.update_page_properties = AsyncMock(return_value={"ok": True})
        self.delete_page = AsyncMock(return_value={"deleted": True})
        self.publish_page = AsyncMock(return_value={"status": "activated"})


def create_page(**overrides) -> dict:
    action = {
        "type": "CREATE_PAGE",
        "parentPath": "/content/okta/marketing",
        "name": "zero-trust",
        "title": "Zero Trust",
        "template": LANDING_TEMPLATE,
    }
    action.update(overrides)
    return action


def update_page(path: str = PAGE_PATH, **properties) -> dict:
    return {"type": "UPDATE_PAGE", "path": path, "properties": properties or {"title": "Zero Trust Landing"}}


def publish_page(path: str = PAGE_PATH, activate: bool = True) -> dict:
    return {"type": "PUBLISH_PAGE", "path": path, "activate": activate}


def delete_page(path: str = PAGE_PATH, soft_delete: bool = True) -> dict:
    return {"type": "DELETE_PAGE", "path": path, "softDelete": soft_delete}


@pytest.fixture
def policy() -> PolicyConfig:
    return PolicyConfig(
        allowed_roots=("/content/okta", "/content/my-site"),
        allowed_templates=(LANDING_TEMPLATE, PRESS_TEMPLATE),
        publish_policy=PublishPolicy(require_recent_change=True, max_mutation_gap=2),
    )


@pytest.fixture
def gateway() -> FakeGatewayClient:
    return FakeGatewayClient()


@pytest.fixture
def make_workflow(policy, gateway):
    """Build a workflow around a scripted planner and the fake gateway"""

    def _make(actions: list[Any], **kwargs) -> tuple[AEMAgentWorkflow, ScriptedPlanner]:
        planner = ScriptedPlanner(actions)
        executor = IdempotentExecutor(gateway, kwargs.pop("policy", policy))
        workflow = AEMAgentWorkflow(planner, executor, executor.policy, **kwargs)
        return workflow, planner

    return _make
