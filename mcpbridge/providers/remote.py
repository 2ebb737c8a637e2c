"""Shared client side of the MCP protocol for out-of-process providers."""

import asyncio
import logging
from abc import abstractmethod
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from mcpbridge.config.loader import Settings, get_settings
from mcpbridge.mcp.errors import McpError, McpProtocolError, McpRemoteError
from mcpbridge.mcp.handlers import McpMethod
from mcpbridge.mcp.models import (
    ClientInfo,
    JsonRpcResponse,
    McpCapabilities,
    McpPrompt,
    McpPromptResponse,
    McpResource,
    McpResourceResponse,
    McpResourceTemplate,
    McpToolMetadata,
    McpToolResponse,
    PromptsListResult,
    ResourcesListResult,
    ResourceTemplatesListResult,
    ServerInfo,
    ToolsListResult,
)
from mcpbridge.mcp.provider import McpProvider

logger = logging.getLogger(__name__)

# Version offered by this client in the initialize request
CLIENT_PROTOCOL_VERSION = "2024-11-05"

ModelT = TypeVar("ModelT", bound=BaseModel)


def unwrap_response(response: JsonRpcResponse) -> Any:
    """
    Return the result of a JSON-RPC response.

    Raises:
        McpRemoteError: If the response carries an error object.
        McpProtocolError: If the response has no result.
    """
    if response.error is not None:
        raise McpRemoteError(response.error.message, code=response.error.code)
    if response.result is None:
        raise McpProtocolError("Invalid JSON-RPC response: missing result")
    return response.result


class McpRemoteProvider(McpProvider):
    """Base for providers that reach an MCP server over a transport.

    Subclasses implement ``_send_request`` and ``_send_notification``. This
    class runs the one-time handshake and maps each provider operation onto
    a JSON-RPC round trip, raising only ``McpError`` subclasses.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._initialized = False
        self._init_lock = asyncio.Lock()
        self._capabilities: McpCapabilities | None = None
        self.server_info: ServerInfo | None = None
        self.protocol_version: str | None = None

    @abstractmethod
    async def _send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """Send a request and return its result."""

    @abstractmethod
    async def _send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        """Send a notification; nothing is read back."""

    async def initialize(self) -> None:
        """Perform the initialize handshake, once per provider."""
        if self._initialized:
            return

        async with self._init_lock:
            if self._initialized:
                return

            client_info = ClientInfo(name=self.settings.client_name, version=self.settings.server_version)
            result = await self._request(
                McpMethod.INITIALIZE.value,
                {
                    "protocolVersion": CLIENT_PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": client_info.model_dump(),
                },
            )
            if not isinstance(result, dict):
                raise McpProtocolError(f"Invalid initialize result: {result!r}")

            self._capabilities = self._parse(McpCapabilities, result.get("capabilities") or {})
            if result.get("serverInfo"):
                self.server_info = self._parse(ServerInfo, result["serverInfo"])
            self.protocol_version = result.get("protocolVersion")

            await self._notify(McpMethod.NOTIFICATIONS_INITIALIZED.value)
            self._initialized = True
            logger.info(
                f"Initialized {self} (server: {self.server_info.name if self.server_info else 'unknown'}, "
                f"protocol: {self.protocol_version})"
            )

    async def get_capabilities(self) -> McpCapabilities:
        await self.initialize()
        return self._capabilities or McpCapabilities()

    # -------------------------------------------------------------------------
    # Request helpers
    # -------------------------------------------------------------------------

    async def _request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        try:
            return await self._send_request(method, params)
        except McpError:
            raise
        except Exception as e:
            raise McpProtocolError(f"Error calling {method} on {self}: {e}") from e

    async def _notify(self, method: str, params: dict[str, Any] | None = None) -> None:
        try:
            await self._send_notification(method, params)
        except McpError:
            raise
        except Exception as e:
            raise McpProtocolError(f"Error sending {method} to {self}: {e}") from e

    async def _call(self, method: str, params: dict[str, Any] | None = None) -> Any:
        await self.initialize()
        logger.debug(f"{self} -> {method}")
        return await self._request(method, params)

    @staticmethod
    def _parse(model: type[ModelT], data: Any) -> ModelT:
        if not isinstance(data, dict):
            raise McpProtocolError(f"Expected an object for {model.__name__}, got {type(data).__name__}")
        try:
            return model(**data)
        except ValidationError as e:
            raise McpProtocolError(f"Invalid {model.__name__} from server: {e}") from e

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    async def list_prompts(self) -> list[McpPrompt]:
        result = await self._call(McpMethod.PROMPTS_LIST.value)
        return self._parse(PromptsListResult, result).prompts

    async def get_prompt(self, name: str, args: dict[str, str] | None = None) -> McpPromptResponse:
        result = await self._call(McpMethod.PROMPTS_GET.value, {"name": name, "arguments": args or {}})
        return self._parse(McpPromptResponse, result)

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def list_tools(self) -> list[McpToolMetadata]:
        result = await self._call(McpMethod.TOOLS_LIST.value)
        return self._parse(ToolsListResult, result).tools

    async def get_tool(self, name: str) -> McpToolMetadata | None:
        return next((t for t in await self.list_tools() if t.name == name), None)

    async def call_tool(self, name: str, args: dict[str, Any] | None = None) -> McpToolResponse:
        result = await self._call(McpMethod.TOOLS_CALL.value, {"name": name, "arguments": args or {}})
        return self._parse(McpToolResponse, result)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def list_resources(self) -> list[McpResource]:
        result = await self._call(McpMethod.RESOURCES_LIST.value)
        return self._parse(ResourcesListResult, result).resources

    async def list_resource_templates(self) -> list[McpResourceTemplate]:
        result = await self._call(McpMethod.RESOURCES_TEMPLATES_LIST.value)
        return self._parse(ResourceTemplatesListResult, result).resourceTemplates

    async def read_resource(self, uri: str) -> McpResourceResponse:
        result = await self._call(McpMethod.RESOURCES_READ.value, {"uri": uri})
        return self._parse(McpResourceResponse, result)
