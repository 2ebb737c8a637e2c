"""MCP provider for a remote MCP server reachable over HTTP."""

import itertools
import logging
from typing import Any

import httpx

from mcpbridge.config.loader import Settings
from mcpbridge.mcp.errors import McpProtocolError, McpTransportError
from mcpbridge.mcp.jsonrpc import decode_message, encode_message
from mcpbridge.mcp.models import JsonRpcRequest, JsonRpcResponse
from mcpbridge.providers.remote import McpRemoteProvider, unwrap_response
from mcpbridge.utils.http import create_http_client, http_retry

logger = logging.getLogger(__name__)

# Statuses that acknowledge a message without a JSON-RPC body
NO_CONTENT_STATUSES = (202, 204)


def normalize_base_url(url: str) -> str:
    """Strip a trailing ``/mcp`` and trailing slashes from a server URL."""
    url = url.rstrip("/")
    if url.endswith("/mcp"):
        url = url[: -len("/mcp")]
    return url.rstrip("/")


class McpProviderHttp(McpRemoteProvider):
    """
    Remote provider that POSTs one JSON-RPC message per operation to
    ``<base>/mcp``, reusing a pooled httpx client.

    Connection errors and timeouts are retried before surfacing as
    McpTransportError; non-2xx statuses fail immediately.
    """

    def __init__(
        self,
        url: str,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(settings)
        self.base_url = normalize_base_url(url)
        self.endpoint = f"{self.base_url}/mcp"
        self._client = create_http_client(
            timeout=float(self.settings.default_timeout),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._ids = itertools.count(1)

    def __str__(self) -> str:
        return f"McpServer-Http({self.base_url})"

    @http_retry
    async def _post(self, body: str) -> httpx.Response:
        return await self._client.post(self.endpoint, content=body)

    async def _exchange(self, message: JsonRpcRequest) -> str | None:
        """POST a message and return the response body, or None when there is none."""
        if self._client.is_closed:
            raise McpTransportError(f"{self} is closed")

        try:
            response = await self._post(encode_message(message))
        except httpx.HTTPError as e:
            raise McpTransportError(f"HTTP request to {self.endpoint} failed: {e}") from e

        if not response.is_success:
            raise McpTransportError(f"HTTP request to {self.endpoint} failed: {response.status_code}")
        if response.status_code in NO_CONTENT_STATUSES or not response.content.strip():
            return None
        return response.text

    async def _send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        request = JsonRpcRequest(id=next(self._ids), method=method, params=params)
        body = await self._exchange(request)
        if body is None:
            return None

        message = decode_message(body)
        if not isinstance(message, JsonRpcResponse):
            raise McpProtocolError(f"Expected a response to {method}, got {message.method}")
        return unwrap_response(message)

    async def _send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        await self._exchange(JsonRpcRequest(method=method, params=params))

    async def close(self) -> None:
        """Close the pooled HTTP client. Safe to call more than once."""
        if self._client.is_closed:
            return
        try:
            await self._client.aclose()
            logger.info(f"Closed {self}")
        except Exception as e:
            logger.warning(f"Error while closing {self}: {e}")
