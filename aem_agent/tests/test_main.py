"""
Tests for the CLI entry point
"""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from .. import main as cli
from ..errors import PlannerError
from ..schemas.actions import parse_action
from ..schemas.state import StepRecord, new_agent_state
from .conftest import create_page

REPO_CONFIG = str(Path(__file__).parents[2] / "config.yaml")


@pytest.fixture(autouse=True)
def no_dotenv(monkeypatch):
    monkeypatch.setattr(cli, "load_dotenv", lambda: None)


def finished_state(goal: str, done: bool = True) -> dict:
    state = new_agent_state(goal)
    state["steps"] = [StepRecord(action=parse_action(create_page()), result={"ok": True}, idempotency_key="key-1")]
    state["iterations"] = 1
    state["done"] = done
    return state


class TestMain:
    """Tests for main()"""

    def test_missing_goal(self, capsys):
        assert cli.main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_missing_config(self, tmp_path, capsys):
        assert cli.main(["--config", str(tmp_path / "absent.yaml"), "Create a page"]) == 1
        assert "Configuration error" in capsys.readouterr().err

    def test_prints_final_state(self, monkeypatch, capsys):
        run_goal = AsyncMock(side_effect=lambda goal, config: finished_state(goal))
        monkeypatch.setattr(cli, "run_goal", run_goal)

        assert cli.main(["--config", REPO_CONFIG, "Create", "a", "landing", "page"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["goal"] == "Create a landing page"
        assert output["outcome"] == "completed"
        assert output["steps"][0]["action"]["type"] == "CREATE_PAGE"
        assert output["steps"][0]["idempotency_key"] == "key-1"

    def test_incomplete_run_exits_zero(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "run_goal", AsyncMock(return_value=finished_state("goal", done=False)))

        assert cli.main(["--config", REPO_CONFIG, "goal"]) == 0
        assert json.loads(capsys.readouterr().out)["outcome"] == "incomplete"

    def test_planner_failure(self, monkeypatch, capsys):
        monkeypatch.setattr(cli, "run_goal", AsyncMock(side_effect=PlannerError("Planner did not return text output.")))

        assert cli.main(["--config", REPO_CONFIG, "goal"]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Planner did not return text output." in captured.err


class TestWiring:
    """Tests for building the workflow from config"""

    def test_build_workflow(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        config = cli.load_config(REPO_CONFIG)
        client = cli.build_client(config)

        workflow = cli.build_workflow(config, client)

        assert workflow.max_steps == config.workflow.max_steps
        assert workflow.executor.client is client
        assert workflow.policy == config.policy
        assert client.max_attempts == 3
