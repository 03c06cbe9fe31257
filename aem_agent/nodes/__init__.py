"""AEM Agent Nodes - plan/execute loop"""
from .plan_node import make_plan_node
from .execute_node import make_execute_node, GUARD_FAILED, DONE_RESULT
from .conditions import route_after_execute, make_route_after_execute

__all__ = [
    "make_plan_node", "make_execute_node", "GUARD_FAILED", "DONE_RESULT",
    "route_after_execute", "make_route_after_execute",
]
