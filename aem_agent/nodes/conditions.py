"""Conditional Edge Functions"""
from typing import Any, Callable, Literal
from ..schemas.state import MAX_STEPS


def route_after_execute(state: dict[str, Any], max_steps: int = MAX_STEPS) -> Literal["plan", "end"]:
    """End on DONE or once the iteration budget is spent"""
    if state.get("done", False) or state.get("iterations", 0) >= max_steps:
        return "end"
    return "plan"


def make_route_after_execute(max_steps: int = MAX_STEPS) -> Callable[[dict], str]:
    def check_route(state: dict) -> str:
        return route_after_execute(state, max_steps)

    return check_route
