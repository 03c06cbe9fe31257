"""
AEM Gateway Client

Async HTTP client for the content mutation tools exposed by the AEM MCP
gateway. Every call carries an Idempotency-Key header; transport-level
retries re-send the same key because they belong to the same attempt.
"""

import os
from typing import Any, Optional

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...schemas.actions import (
    CreatePageAction,
    DeletePageAction,
    PublishPageAction,
    UpdatePageAction,
    action_payload,
)

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"


class MCPCallError(Exception):
    """Gateway call failed (HTTP error or transport failure after retries)"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AEMGatewayClient:
    """
    Client for the AEM MCP gateway mutation tools.

    Tools:
    - createPageWithTemplate
    - updatePageProperties
    - deletePage
    - publishPage
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        max_attempts: int = 3,
        retry_wait_seconds: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize gateway client.

        Args:
            base_url: Gateway URL (defaults to MCP_BASE env var)
            timeout: Request timeout in seconds
            max_attempts: Attempts per call for connect errors and timeouts
            retry_wait_seconds: Exponential backoff multiplier
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = (base_url or os.getenv("MCP_BASE", DEFAULT_BASE_URL)).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.retry_wait_seconds = retry_wait_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "AEMGatewayClient":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def call(self, tool: str, data: dict[str, Any], idempotency_key: str) -> Any:
        """
        POST a tool invocation to the gateway.

        Args:
            tool: Gateway tool name
            data: JSON request body
            idempotency_key: Key for this logical attempt

        Returns:
            Decoded JSON response, or None for an empty body
        """
        client = self._get_client()
        url = f"{self.base_url}/{tool}"
        headers = {"Idempotency-Key": idempotency_key}

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.max_attempts),
                wait=wait_exponential(multiplier=self.retry_wait_seconds, max=10),
                retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "Retrying MCP call",
                            tool=tool,
                            attempt=attempt.retry_state.attempt_number,
                            idempotency_key=idempotency_key,
                        )
                    response = await client.post(url, json=data, headers=headers)
        except httpx.TimeoutException as e:
            raise MCPCallError(f"MCP call {tool} timed out: {e}") from e
        except httpx.ConnectError as e:
            raise MCPCallError(f"Cannot connect to MCP gateway at {self.base_url}: {e}") from e

        if not response.is_success:
            raise MCPCallError(
                f"MCP call failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
            )

        logger.debug("MCP call succeeded", tool=tool, status=response.status_code)

        if not response.content:
            return None
        return response.json()

    async def create_page_with_template(self, action: CreatePageAction, idempotency_key: str) -> Any:
        return await self.call("createPageWithTemplate", action_payload(action), idempotency_key)

    async def update_page_properties(self, action: UpdatePageAction, idempotency_key: str) -> Any:
        return await self.call("updatePageProperties", action_payload(action), idempotency_key)

    async def delete_page(self, action: DeletePageAction, idempotency_key: str) -> Any:
        return await self.call("deletePage", action_payload(action), idempotency_key)

    async def publish_page(self, action: PublishPageAction, idempotency_key: str) -> Any:
        return await self.call("publishPage", action_payload(action), idempotency_key)
