"""Plan Node - ask the planner for one action and run the guard engine"""
from typing import Any
import structlog
from ..chains.planner import Planner
from ..guards import validate_action
from ..schemas.actions import parse_action
from ..schemas.policy import PolicyConfig
from ..schemas.state import MAX_STEPS, AgentState

logger = structlog.get_logger(__name__)


def make_plan_node(planner: Planner, policy: PolicyConfig, max_steps: int = MAX_STEPS):
    """Create the plan node bound to a planner and policy"""

    async def plan_node(state: AgentState) -> dict[str, Any]:
        iterations = state.get("iterations", 0)
        if state.get("done", False) or iterations >= max_steps:
            return {}

        # Planner errors propagate and end the run
        proposal = await planner.plan(state)
        action = parse_action(proposal)
        violations = validate_action(action, policy)

        logger.info(
            "Planned action",
            iteration=iterations + 1,
            action_type=action.type,
            violations=violations,
        )
        return {
            "iterations": iterations + 1,
            "pending_action": action,
            "violations": violations,
        }

    return plan_node
