"""
Tools module for the AEM authoring agent.

Provides:
- AEM gateway client for the remote mutation RPCs
- Idempotent executor with publish gating
"""

from .mcp_client import AEMGatewayClient, MCPCallError
from .executor import (
    ContentMutationClient,
    ExecutionError,
    ExecutionOutcome,
    IdempotentExecutor,
    new_idempotency_key,
)

__all__ = [
    "AEMGatewayClient",
    "MCPCallError",
    "ContentMutationClient",
    "ExecutionError",
    "ExecutionOutcome",
    "IdempotentExecutor",
    "new_idempotency_key",
]
