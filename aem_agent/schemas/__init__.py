"""
Schemas for the AEM authoring agent.
"""

from .actions import (
    Action,
    AgentAction,
    MutatingAction,
    CreatePageAction,
    UpdatePageAction,
    DeletePageAction,
    PublishPageAction,
    DoneAction,
    parse_action,
    parse_action_text,
    action_payload,
    action_to_dict,
)
from .policy import PolicyConfig, PublishPolicy
from .state import (
    MAX_STEPS,
    AgentContext,
    AgentState,
    StepRecord,
    new_agent_state,
    run_outcome,
    serialize_state,
)

__all__ = [
    # Actions
    "Action",
    "AgentAction",
    "MutatingAction",
    "CreatePageAction",
    "UpdatePageAction",
    "DeletePageAction",
    "PublishPageAction",
    "DoneAction",
    "parse_action",
    "parse_action_text",
    "action_payload",
    "action_to_dict",
    # Policy
    "PolicyConfig",
    "PublishPolicy",
    # State
    "MAX_STEPS",
    "AgentContext",
    "AgentState",
    "StepRecord",
    "new_agent_state",
    "run_outcome",
    "serialize_state",
]
