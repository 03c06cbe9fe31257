"""
AEM Authoring Agent Workflow

START -> plan -> execute -> {plan | END}

The graph uses the plain AgentState TypedDict: every channel keeps the
last value written, and nodes emit whole new values (the step log is
rebuilt as a new list each time).
"""

from typing import Any, Optional

import structlog
from langgraph.graph import StateGraph, START, END

from .chains.planner import Planner
from .nodes import make_execute_node, make_plan_node, make_route_after_execute
from .schemas.policy import PolicyConfig
from .schemas.state import MAX_STEPS, AgentState, new_agent_state, run_outcome
from .tools.executor import ContentMutationClient, IdempotentExecutor

logger = structlog.get_logger(__name__)


class AEMAgentWorkflow:
    """
    Bounded plan/validate/execute loop for one goal per run.

    A compiled workflow holds no per-run state, so independent goals can
    run concurrently against the same instance.
    """

    def __init__(
        self,
        planner: Planner,
        executor: IdempotentExecutor,
        policy: PolicyConfig,
        max_steps: int = MAX_STEPS,
        agent_name: str = "aem_agent",
    ):
        """
        Initialize workflow.

        Args:
            planner: Planning oracle proposing one action per iteration
            executor: Idempotent executor for the gateway RPCs
            policy: Guardrail policy for this workflow
            max_steps: Iteration bound (never above MAX_STEPS)
            agent_name: Name used in logs
        """
        if not 0 < max_steps <= MAX_STEPS:
            raise ValueError(f"max_steps must be between 1 and {MAX_STEPS}, got {max_steps}")

        self.planner = planner
        self.executor = executor
        self.policy = policy
        self.max_steps = max_steps
        self.agent_name = agent_name

        self._graph: Optional[StateGraph] = None
        self._compiled = None

    def build_graph(self, graph: StateGraph) -> None:
        graph.add_node("plan", make_plan_node(self.planner, self.policy, self.max_steps))
        graph.add_node("execute", make_execute_node(self.executor, self.max_steps))

        graph.add_edge(START, "plan")
        graph.add_edge("plan", "execute")
        graph.add_conditional_edges(
            "execute",
            make_route_after_execute(self.max_steps),
            {"plan": "plan", "end": END},
        )

    def compile(self) -> Any:
        """Compile the workflow graph (cached)"""
        if self._compiled:
            return self._compiled

        self._graph = StateGraph(AgentState)
        self.build_graph(self._graph)
        self._compiled = self._graph.compile()
        logger.info("Compiled workflow", agent=self.agent_name, max_steps=self.max_steps)
        return self._compiled

    def get_initial_state(self, goal: str) -> AgentState:
        return new_agent_state(goal)

    async def run(self, goal: str) -> AgentState:
        """
        Drive one goal to completion or to the iteration bound.

        Returns:
            Final AgentState; done=False with exhausted iterations means
            the work is incomplete, not failed

        Raises:
            AgentError: the planner failed or proposed a malformed action
        """
        app = self.compile()

        logger.info("Starting agent run", agent=self.agent_name, goal=goal)

        try:
            # Each iteration is two graph steps (plan, execute)
            final_state = await app.ainvoke(
                self.get_initial_state(goal),
                config={"recursion_limit": 2 * self.max_steps + 4},
            )
        except Exception:
            logger.exception("Agent run aborted", agent=self.agent_name, goal=goal)
            raise

        logger.info(
            "Agent run finished",
            agent=self.agent_name,
            outcome=run_outcome(final_state),
            iterations=final_state.get("iterations", 0),
            steps=len(final_state.get("steps", [])),
        )
        return final_state


async def run_agent(
    goal: str,
    planner: Planner,
    client: ContentMutationClient,
    policy: PolicyConfig,
    max_steps: int = MAX_STEPS,
) -> AgentState:
    """Convenience wrapper: build a workflow for one goal and run it"""
    executor = IdempotentExecutor(client, policy)
    workflow = AEMAgentWorkflow(planner, executor, policy, max_steps=max_steps)
    return await workflow.run(goal)
