"""
MCP gateway client for AEM content mutations.
"""

from .client import AEMGatewayClient, MCPCallError

__all__ = ["AEMGatewayClient", "MCPCallError"]
