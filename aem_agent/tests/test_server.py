"""
Tests for the agent HTTP front end
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from ..api import create_app
from ..errors import MalformedActionError
from ..schemas.state import new_agent_state


def fake_workflow(run=None) -> MagicMock:
    workflow = MagicMock()
    workflow.compile = MagicMock()
    workflow.run = run or AsyncMock(side_effect=lambda goal: {**new_agent_state(goal), "done": True})
    return workflow


@pytest.fixture
def workflow():
    return fake_workflow()


@pytest.fixture
def client(workflow):
    app = create_app(workflow, agent_name="aem_agent", agent_version="1.0.0")
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    """Tests for health endpoints"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["agent_name"] == "aem_agent"

    def test_ready_after_startup(self, client, workflow):
        assert client.get("/ready").status_code == 200
        workflow.compile.assert_called_once()

    def test_not_ready_without_lifespan(self, workflow):
        app = create_app(workflow, agent_name="aem_agent", agent_version="1.0.0")
        assert TestClient(app).get("/ready").status_code == 503


class TestRuns:
    """Tests for POST /agent/runs"""

    def test_run_goal(self, client, workflow):
        response = client.post("/agent/runs", json={"goal": "Create a landing page"})

        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "completed"
        assert body["state"]["goal"] == "Create a landing page"
        assert body["duration_ms"] >= 0
        workflow.run.assert_awaited_once_with("Create a landing page")

    def test_empty_goal_rejected(self, client):
        assert client.post("/agent/runs", json={"goal": ""}).status_code == 422

    def test_planner_failure_is_bad_gateway(self):
        workflow = fake_workflow(AsyncMock(side_effect=MalformedActionError("Unrecognized action", ["type: bad"])))
        app = create_app(workflow, agent_name="aem_agent", agent_version="1.0.0")

        with TestClient(app) as client:
            response = client.post("/agent/runs", json={"goal": "goal"})

        assert response.status_code == 502

    def test_unexpected_failure(self):
        workflow = fake_workflow(AsyncMock(side_effect=RuntimeError("boom")))
        app = create_app(workflow, agent_name="aem_agent", agent_version="1.0.0")

        with TestClient(app) as client:
            assert client.post("/agent/runs", json={"goal": "goal"}).status_code == 500

    def test_timeout(self):
        async def slow_run(goal):
            await asyncio.sleep(5)

        app = create_app(fake_workflow(slow_run), agent_name="aem_agent", agent_version="1.0.0")

        with TestClient(app) as client:
            response = client.post("/agent/runs", json={"goal": "goal", "timeout_seconds": 0.05})

        assert response.status_code == 504


class TestLifecycle:
    """Tests for startup and shutdown hooks"""

    def test_on_shutdown_called(self, workflow):
        on_shutdown = AsyncMock()
        app = create_app(workflow, agent_name="aem_agent", agent_version="1.0.0", on_shutdown=on_shutdown)

        with TestClient(app):
            on_shutdown.assert_not_awaited()

        on_shutdown.assert_awaited_once()
