"""
Idempotent Executor

Runs one admissible action against the AEM gateway with a freshly
generated idempotency key and tracks successful content mutations for
publish gating.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, assert_never
from uuid import uuid4

import structlog

from ..schemas.actions import (
    CreatePageAction,
    DeletePageAction,
    MutatingAction,
    PublishPageAction,
    UpdatePageAction,
)
from ..schemas.policy import PolicyConfig
from ..schemas.state import AgentContext

logger = structlog.get_logger(__name__)

_MUTATING_ACTIONS = (CreatePageAction, UpdatePageAction, DeletePageAction, PublishPageAction)


def new_idempotency_key() -> str:
    """Random 128-bit key, one per logical attempt"""
    return str(uuid4())


class ContentMutationClient(Protocol):
    """Remote RPCs consumed by the executor (see AEMGatewayClient)"""

    async def create_page_with_template(self, action: CreatePageAction, idempotency_key: str) -> Any: ...

    async def update_page_properties(self, action: UpdatePageAction, idempotency_key: str) -> Any: ...

    async def delete_page(self, action: DeletePageAction, idempotency_key: str) -> Any: ...

    async def publish_page(self, action: PublishPageAction, idempotency_key: str) -> Any: ...


class ExecutionError(Exception):
    """The remote call for an action failed"""

    def __init__(self, message: str, action_type: str, idempotency_key: str):
        super().__init__(message)
        self.action_type = action_type
        self.idempotency_key = idempotency_key


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of executing one action"""
    context: AgentContext
    result: Any = None
    violations: list[str] = field(default_factory=list)
    idempotency_key: Optional[str] = None

    @property
    def rejected(self) -> bool:
        return bool(self.violations)


class IdempotentExecutor:
    """
    Dispatches mutating actions to their matching RPC.

    CREATE_PAGE  -> create_page_with_template
    UPDATE_PAGE  -> update_page_properties
    DELETE_PAGE  -> delete_page
    PUBLISH_PAGE -> publish_page (after the publish gate)
    """

    def __init__(
        self,
        client: ContentMutationClient,
        policy: PolicyConfig,
        key_factory: Callable[[], str] = new_idempotency_key,
    ):
        self.client = client
        self.policy = policy
        self.key_factory = key_factory

    def check_publish_gate(self, context: AgentContext, step_number: int) -> list[str]:
        """
        Publish recency rule, evaluated against the context at execute time.

        The gap is inclusive: a mutation at step k allows publishing up to
        step k + max_mutation_gap.
        """
        publish_policy = self.policy.publish_policy
        if not publish_policy.require_recent_change:
            return []

        last_step = context.last_successful_mutation_step
        if context.last_mutation_type not in ("CREATE_PAGE", "UPDATE_PAGE") or last_step is None:
            return ["Cannot publish without prior successful create/update."]

        if step_number - last_step > publish_policy.max_mutation_gap:
            return [
                f"Publish must occur within {publish_policy.max_mutation_gap} steps of last mutation "
                f"(last mutation at step {last_step}, publish at step {step_number})."
            ]

        return []

    async def _invoke(self, action: MutatingAction, idempotency_key: str) -> Any:
        if isinstance(action, CreatePageAction):
            return await self.client.create_page_with_template(action, idempotency_key)
        if isinstance(action, UpdatePageAction):
            return await self.client.update_page_properties(action, idempotency_key)
        if isinstance(action, DeletePageAction):
            return await self.client.delete_page(action, idempotency_key)
        if isinstance(action, PublishPageAction):
            return await self.client.publish_page(action, idempotency_key)
        assert_never(action)

    async def execute(
        self,
        action: MutatingAction,
        context: AgentContext,
        step_number: int,
    ) -> ExecutionOutcome:
        """
        Execute an admissible action.

        Args:
            action: Action that already passed the guard engine
            context: Mutation tracking as of this step
            step_number: 1-based number of the step being executed

        Returns:
            ExecutionOutcome with the RPC result and updated context, or
            with violations if the publish gate rejected the action

        Raises:
            ExecutionError: the RPC failed
        """
        if not isinstance(action, _MUTATING_ACTIONS):
            raise TypeError(f"{getattr(action, 'type', action)!r} is not an executable action")

        if isinstance(action, PublishPageAction):
            violations = self.check_publish_gate(context, step_number)
            if violations:
                logger.warning(
                    "Publish gate rejected action",
                    path=action.path,
                    step=step_number,
                    violations=violations,
                )
                return ExecutionOutcome(context=context, violations=violations)

        idempotency_key = self.key_factory()
        logger.info(
            "Executing action",
            action_type=action.type,
            step=step_number,
            idempotency_key=idempotency_key,
        )

        try:
            result = await self._invoke(action, idempotency_key)
        except Exception as e:
            raise ExecutionError(
                str(e) or type(e).__name__,
                action_type=action.type,
                idempotency_key=idempotency_key,
            ) from e

        if isinstance(action, CreatePageAction):
            context = AgentContext(
                last_mutation_path=action.page_path,
                last_mutation_type=action.type,
                last_successful_mutation_step=step_number,
            )
        elif isinstance(action, UpdatePageAction):
            context = AgentContext(
                last_mutation_path=action.path,
                last_mutation_type=action.type,
                last_successful_mutation_step=step_number,
            )

        return ExecutionOutcome(context=context, result=result, idempotency_key=idempotency_key)
