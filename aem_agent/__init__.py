"""
AEM Authoring Agent

A bounded LangGraph loop that turns a natural-language goal into
guard-checked, idempotent page mutations against an AEM MCP gateway.

Example:
    from aem_agent import AEMAgentWorkflow, IdempotentExecutor, LLMPlanner
    from aem_agent import AEMGatewayClient, load_config

    config = load_config("config.yaml")
    async with AEMGatewayClient(base_url=config.mcp.base_url) as client:
        workflow = AEMAgentWorkflow(
            LLMPlanner(policy=config.policy),
            IdempotentExecutor(client, config.policy),
            config.policy,
        )
        state = await workflow.run("Create a landing page under /content/okta/marketing")
"""

from .workflow import AEMAgentWorkflow, run_agent
from .guards import validate_action, under_allowed
from .errors import AgentError, MalformedActionError, PlannerError, ConfigError
from .chains.planner import LLMPlanner, Planner
from .tools.executor import IdempotentExecutor, ExecutionError
from .tools.mcp_client import AEMGatewayClient, MCPCallError
from .config_loader import load_config, Config
from .schemas import (
    MAX_STEPS,
    AgentState,
    AgentContext,
    StepRecord,
    PolicyConfig,
    PublishPolicy,
    parse_action,
)

__version__ = "1.0.0"

__all__ = [
    "AEMAgentWorkflow",
    "run_agent",
    "validate_action",
    "under_allowed",
    "AgentError",
    "MalformedActionError",
    "PlannerError",
    "ConfigError",
    "LLMPlanner",
    "Planner",
    "IdempotentExecutor",
    "ExecutionError",
    "AEMGatewayClient",
    "MCPCallError",
    "load_config",
    "Config",
    "MAX_STEPS",
    "AgentState",
    "AgentContext",
    "StepRecord",
    "PolicyConfig",
    "PublishPolicy",
    "parse_action",
]
