"""
LangGraph Agent State Definition

The TypedDict threaded through the plan/execute nodes, plus the step log
entry and mutation-tracking context it carries.
"""

from typing import Any, Literal, Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from .actions import Action, AgentAction, MutationType, action_to_dict

# Hard bound on plan/execute iterations per run
MAX_STEPS = 8


class StepRecord(BaseModel):
    """Append-only log entry for one attempted action"""
    model_config = ConfigDict(frozen=True)

    action: Action
    result: Any = None
    violations: list[str] = Field(default_factory=list)
    idempotency_key: Optional[str] = None

    @property
    def rejected(self) -> bool:
        return bool(self.violations)


class AgentContext(BaseModel):
    """
    Mutation tracking read by the publish gate.

    last_successful_mutation_step is a 1-based step number; None means
    no mutation has succeeded in this run.
    """
    model_config = ConfigDict(frozen=True)

    last_mutation_path: Optional[str] = None
    last_mutation_type: Optional[MutationType] = None
    last_successful_mutation_step: Optional[int] = None


class AgentState(TypedDict, total=False):
    """State for one agent run"""

    # ============== Input ==============
    goal: str                             # Natural language goal, fixed for the run

    # ============== Step Log ==============
    steps: list[StepRecord]               # Append-only history
    last_result: Any                      # Result of the most recent step
    violations: list[str]                 # From the most recent plan/execute pass

    # ============== Loop Control ==============
    iterations: int                       # Plan calls made so far
    done: bool                            # Terminal flag set by DONE
    context: AgentContext                 # Mutation tracking for publish gating
    pending_action: Optional[AgentAction]  # Proposed this iteration, cleared by execute


def new_agent_state(goal: str) -> AgentState:
    """Fresh state for a single invocation"""
    return {
        "goal": goal,
        "steps": [],
        "last_result": None,
        "violations": [],
        "iterations": 0,
        "done": False,
        "context": AgentContext(),
        "pending_action": None,
    }


def run_outcome(state: AgentState) -> Literal["completed", "incomplete"]:
    """A run that exhausts its iterations without DONE is incomplete, not failed"""
    return "completed" if state.get("done", False) else "incomplete"


def serialize_state(state: AgentState) -> dict[str, Any]:
    """JSON-ready view of the final state"""
    steps = []
    for step in state.get("steps", []):
        entry = {"action": action_to_dict(step.action)}
        if step.result is not None:
            entry["result"] = step.result
        if step.violations:
            entry["violations"] = list(step.violations)
        if step.idempotency_key:
            entry["idempotency_key"] = step.idempotency_key
        steps.append(entry)

    pending = state.get("pending_action")
    context = state.get("context") or AgentContext()

    return {
        "goal": state.get("goal", ""),
        "steps": steps,
        "last_result": state.get("last_result"),
        "violations": list(state.get("violations", [])),
        "iterations": state.get("iterations", 0),
        "done": state.get("done", False),
        "context": context.model_dump(mode="json"),
        "pending_action": action_to_dict(pending) if pending is not None else None,
        "outcome": run_outcome(state),
    }
