"""
Guardrail Policy Engine

Pure validation of a proposed action against the static policy. Every
applicable rule runs and violations accumulate. The publish recency rule
needs run history and is checked by the executor instead.
"""

from collections.abc import Iterable

from .schemas.actions import (
    AgentAction,
    CreatePageAction,
    DeletePageAction,
    PublishPageAction,
    UpdatePageAction,
)
from .schemas.policy import PolicyConfig


def under_allowed(path: str, roots: Iterable[str]) -> bool:
    """True if path equals a root or lies below one"""
    return any(path == root or path.startswith(f"{root}/") for root in roots)


def validate_action(action: AgentAction, policy: PolicyConfig) -> list[str]:
    """
    Check an action against the policy.

    Args:
        action: Parsed action proposed by the planner
        policy: Allow-lists and safety rules for this run

    Returns:
        Violation messages; empty means the action may be executed
    """
    violations: list[str] = []

    if isinstance(action, CreatePageAction):
        if not under_allowed(action.parent_path, policy.allowed_roots):
            violations.append(f"Parent path {action.parent_path} is outside of allowed roots.")
        if action.template not in policy.allowed_templates:
            violations.append(f"Template {action.template} is not allowed.")

    if isinstance(action, (UpdatePageAction, DeletePageAction, PublishPageAction)):
        if not under_allowed(action.path, policy.allowed_roots):
            violations.append(f"Path {action.path} is outside of allowed roots.")

    if isinstance(action, DeletePageAction) and not action.soft_delete:
        violations.append("Hard delete prohibited. Use softDelete=true.")

    if isinstance(action, PublishPageAction) and not action.activate:
        violations.append("Publish must request activation (activate=true).")

    return violations
