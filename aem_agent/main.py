"""
AEM Agent CLI Entry Point

    aem-agent [--config PATH] GOAL...

Prints the final agent state as JSON on stdout. Exits 0 whenever the run
finishes (including runs that exhaust their iterations) and 1 on
configuration errors or fatal planner/transport failures.
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

import structlog
from dotenv import load_dotenv

from .chains.llm_factory import LLMConfig
from .chains.planner import LLMPlanner
from .config_loader import Config, RuntimeSettings, load_config
from .errors import ConfigError
from .logging_config import configure_logging
from .schemas.state import AgentState, serialize_state
from .tools.executor import IdempotentExecutor
from .tools.mcp_client import AEMGatewayClient
from .workflow import AEMAgentWorkflow

logger = structlog.get_logger(__name__)


def build_client(config: Config) -> AEMGatewayClient:
    return AEMGatewayClient(
        base_url=config.mcp.base_url,
        timeout=config.mcp.timeout_seconds,
        max_attempts=config.mcp.max_attempts,
    )


def build_workflow(config: Config, client: AEMGatewayClient) -> AEMAgentWorkflow:
    """Wire planner, executor and policy from configuration"""
    planner = LLMPlanner(
        policy=config.policy,
        llm_config=LLMConfig(
            provider=config.llm.provider,
            model=config.llm.model,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_tokens,
        ),
    )
    executor = IdempotentExecutor(client, config.policy)
    return AEMAgentWorkflow(
        planner,
        executor,
        config.policy,
        max_steps=config.workflow.max_steps,
        agent_name=config.agent.name,
    )


async def run_goal(goal: str, config: Config) -> AgentState:
    async with build_client(config) as client:
        workflow = build_workflow(config, client)
        return await workflow.run(goal)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aem-agent",
        description="Run the AEM authoring agent for a natural-language goal.",
    )
    parser.add_argument("goal", nargs="*", help="Goal for the agent, e.g. \"Create a landing page ...\"")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    settings = RuntimeSettings()

    configure_logging(settings.log_level or "INFO", settings.log_format or "json")

    goal = " ".join(args.goal).strip()
    if not goal:
        print('Usage: aem-agent "<goal>"', file=sys.stderr)
        return 1

    try:
        config = load_config(args.config or settings.config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    configure_logging(
        settings.log_level or config.observability.log_level,
        settings.log_format or config.observability.log_format,
    )

    try:
        state = asyncio.run(run_goal(goal, config))
    except Exception as e:
        logger.error("Agent execution failed", error=str(e))
        print(f"Agent execution failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(serialize_state(state), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
