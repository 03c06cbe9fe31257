"""
Planning Oracle Adapter

Turns the current run state into one proposed action by asking an LLM.
Planner failures are not caught here: a transport error, empty output or
malformed action is fatal to the run.
"""

import json
from typing import Any, Optional, Protocol

import structlog
from langchain_core.messages import HumanMessage, SystemMessage

from ..errors import PlannerError
from ..schemas.actions import AgentAction, parse_action_text
from ..schemas.policy import PolicyConfig
from ..schemas.state import AgentState
from .llm_factory import LLMConfig, get_llm
from .prompts import NO_HISTORY, PLANNER_SYSTEM_PROMPT, PLANNER_USER_PROMPT, POLICY_SECTION

logger = structlog.get_logger(__name__)


class Planner(Protocol):
    """Anything that proposes the next action from the run state"""

    async def plan(self, state: AgentState) -> AgentAction: ...


def format_history(state: AgentState) -> str:
    """One line per step: number, action type, result and violations"""
    steps = state.get("steps", [])
    if not steps:
        return NO_HISTORY

    lines = []
    for index, step in enumerate(steps, start=1):
        result = json.dumps(step.result, default=str) if step.result is not None else "{}"
        violations = "; ".join(step.violations) if step.violations else "none"
        lines.append(f"{index}. {step.action.type} -> result={result}, violations={violations}")
    return "\n".join(lines)


def build_system_prompt(policy: Optional[PolicyConfig] = None) -> str:
    policy_section = ""
    if policy is not None:
        policy_section = POLICY_SECTION.format(
            allowed_roots="\n".join(f"- {root}" for root in policy.allowed_roots),
            allowed_templates="\n".join(f"- {template}" for template in policy.allowed_templates),
        )
    return PLANNER_SYSTEM_PROMPT.format(policy_section=policy_section)


def _response_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if content is None:
        return ""
    if isinstance(content, list):
        # Content blocks (Anthropic / Bedrock)
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return content if isinstance(content, str) else str(content)


class LLMPlanner:
    """Planner backed by a LangChain chat model"""

    def __init__(
        self,
        llm: Any = None,
        policy: Optional[PolicyConfig] = None,
        llm_config: Optional[LLMConfig] = None,
    ):
        """
        Initialize planner.

        Args:
            llm: Chat model exposing ainvoke(); built from llm_config if None
            policy: Policy to describe in the system prompt
            llm_config: LLM settings used when no llm is given
        """
        self.llm = llm if llm is not None else get_llm(llm_config)
        self.policy = policy
        self.system_prompt = build_system_prompt(policy)

    def build_messages(self, state: AgentState) -> list:
        user_prompt = PLANNER_USER_PROMPT.format(
            goal=state.get("goal", ""),
            iterations=state.get("iterations", 0),
            last_result=json.dumps(state.get("last_result") or {}, default=str),
            violations="; ".join(state.get("violations") or []) or "none",
            history=format_history(state),
        )
        return [
            SystemMessage(content=self.system_prompt),
            HumanMessage(content=user_prompt),
        ]

    async def plan(self, state: AgentState) -> AgentAction:
        response = await self.llm.ainvoke(self.build_messages(state))

        text = _response_text(response)
        if not text.strip():
            raise PlannerError("Planner did not return text output.")

        action = parse_action_text(text)
        logger.info(
            "Planner proposed action",
            action_type=action.type,
            iteration=state.get("iterations", 0) + 1,
        )
        return action
