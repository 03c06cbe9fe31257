"""
LLM chains: model factory, prompts and the planning oracle.
"""

from .llm_factory import LLMConfig, get_llm
from .planner import LLMPlanner, Planner, build_system_prompt, format_history

__all__ = [
    "LLMConfig",
    "get_llm",
    "LLMPlanner",
    "Planner",
    "build_system_prompt",
    "format_history",
]
