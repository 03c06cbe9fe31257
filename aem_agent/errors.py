"""
Agent Error Taxonomy

Only planner and action-parse failures are allowed to abort a run.
Guard rejections, publish gate failures and RPC errors are recorded
in the step log instead of being raised to the caller.
"""


class AgentError(Exception):
    """Base exception for agent errors"""
    pass


class MalformedActionError(AgentError):
    """Planner output does not parse into a known action"""

    def __init__(self, message: str, problems: list[str] = None):
        super().__init__(message)
        self.problems = problems or []


class PlannerError(AgentError):
    """Planner produced no usable output"""
    pass


class ConfigError(AgentError):
    """Configuration missing or invalid"""
    pass
