"""Execute Node - reject, run or finish the pending action"""
from typing import Any
import structlog
from ..schemas.actions import AgentAction, DoneAction
from ..schemas.state import MAX_STEPS, AgentContext, AgentState, StepRecord
from ..tools.executor import ExecutionError, IdempotentExecutor

logger = structlog.get_logger(__name__)

GUARD_FAILED = "Guard validation failed."
DONE_RESULT = {"status": "DONE"}


async def _dispatch(executor: IdempotentExecutor, action: AgentAction, state: AgentState) -> dict[str, Any]:
    steps = state.get("steps", [])

    if isinstance(action, DoneAction):
        logger.info("Goal complete", summary=action.summary, iteration=state.get("iterations", 0))
        return {
            "steps": steps + [StepRecord(action=action, result=DONE_RESULT)],
            "last_result": DONE_RESULT,
            "done": True,
            "violations": [],
        }

    outcome = await executor.execute(
        action,
        state.get("context") or AgentContext(),
        step_number=state.get("iterations", 0),
    )

    if outcome.rejected:
        return {
            "steps": steps + [StepRecord(action=action, violations=outcome.violations)],
            "context": outcome.context,
            "last_result": {"error": "; ".join(outcome.violations)},
            "violations": outcome.violations,
        }

    return {
        "steps": steps + [
            StepRecord(action=action, result=outcome.result, idempotency_key=outcome.idempotency_key)
        ],
        "context": outcome.context,
        "last_result": outcome.result,
        "violations": [],
    }


def make_execute_node(executor: IdempotentExecutor, max_steps: int = MAX_STEPS):
    """Create the execute node bound to an executor"""

    async def execute_node(state: AgentState) -> dict[str, Any]:
        action = state.get("pending_action")
        if state.get("done", False) or state.get("iterations", 0) > max_steps or action is None:
            return {}

        steps = state.get("steps", [])
        guard_violations = state.get("violations") or []

        if guard_violations:
            logger.warning(
                "Guard rejected action",
                action_type=action.type,
                violations=guard_violations,
            )
            return {
                "steps": steps + [StepRecord(action=action, violations=guard_violations)],
                "last_result": {"error": GUARD_FAILED},
                "pending_action": None,
            }

        try:
            update = await _dispatch(executor, action, state)
        except ExecutionError as e:
            violation = f"Execution error: {e}"
            logger.warning(
                "Action execution failed",
                action_type=e.action_type,
                idempotency_key=e.idempotency_key,
                error=str(e),
            )
            update = {
                "steps": steps + [
                    StepRecord(action=action, violations=[violation], idempotency_key=e.idempotency_key)
                ],
                "last_result": {"error": violation},
                "violations": [violation],
            }
        except Exception as e:
            violation = f"Execution error: {e}"
            logger.exception("Unexpected error executing action", action_type=action.type)
            update = {
                "steps": steps + [StepRecord(action=action, violations=[violation])],
                "last_result": {"error": violation},
                "violations": [violation],
            }

        update["pending_action"] = None
        return update

    return execute_node
