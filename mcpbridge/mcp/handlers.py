"""MCP method handlers for JSON-RPC requests."""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from mcpbridge.config.loader import Settings, get_settings
from mcpbridge.mcp.models import (
    ClientInfo,
    InitializeParams,
    InitializeResult,
    McpCapabilities,
    McpToolResponse,
    PromptGetParams,
    PromptsListResult,
    ResourceReadParams,
    ResourcesListResult,
    ResourceTemplatesListResult,
    ServerInfo,
    ToolCallParams,
    ToolsListResult,
)
from mcpbridge.mcp.provider import (
    McpProvider,
    PromptsCapability,
    ResourcesCapability,
    ToolsCapability,
)

logger = logging.getLogger(__name__)

# MCP protocol versions we support (newest first)
SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
PROTOCOL_VERSION = SUPPORTED_PROTOCOL_VERSIONS[0]

NOTIFICATIONS_PREFIX = "notifications/"


class McpMethod(str, Enum):
    """Every method name the server understands."""

    INITIALIZE = "initialize"
    PING = "ping"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_READ = "resources/read"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    NOTIFICATIONS_CLOSE = "notifications/close"

    @classmethod
    def lookup(cls, method: str | None) -> "McpMethod | None":
        """Return the enum member for a method name, or None if unsupported."""
        if method is None:
            return None
        try:
            return cls(method)
        except ValueError:
            return None


def negotiate_protocol_version(requested: str | None) -> str:
    """Echo the client's version when supported, otherwise offer our latest."""
    if requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested  # type: ignore[return-value]
    return PROTOCOL_VERSION


@dataclass
class SessionState:
    """What we know about the connected client."""

    protocol_version: str | None = None
    client_info: ClientInfo | None = None
    client_capabilities: dict[str, Any] = field(default_factory=dict)
    initialized: bool = False


Handler = Callable[[dict[str, Any]], Awaitable[Any]]


class ProtocolHandler:
    """Routes MCP method names to provider operations.

    ``handle_request`` returns the JSON-ready result for a known method, or
    None when the method is unknown, is a notification, or needs a capability
    the provider does not implement. Exceptions raised by the provider are
    left to the caller, which encodes them as internal errors.
    """

    def __init__(self, provider: McpProvider, settings: Settings | None = None):
        self.provider = provider
        self.session = SessionState()
        self._settings = settings or get_settings()
        self._routes: dict[McpMethod, tuple[type | None, Handler]] = {
            McpMethod.INITIALIZE: (None, self.handle_initialize),
            McpMethod.PING: (None, self.handle_ping),
            McpMethod.PROMPTS_LIST: (PromptsCapability, self.handle_prompts_list),
            McpMethod.PROMPTS_GET: (PromptsCapability, self.handle_prompts_get),
            McpMethod.TOOLS_LIST: (ToolsCapability, self.handle_tools_list),
            McpMethod.TOOLS_CALL: (ToolsCapability, self.handle_tools_call),
            McpMethod.RESOURCES_LIST: (ResourcesCapability, self.handle_resources_list),
            McpMethod.RESOURCES_TEMPLATES_LIST: (
                ResourcesCapability,
                self.handle_resource_templates_list,
            ),
            McpMethod.RESOURCES_READ: (ResourcesCapability, self.handle_resources_read),
            McpMethod.NOTIFICATIONS_INITIALIZED: (None, self.handle_initialized),
            McpMethod.NOTIFICATIONS_CLOSE: (None, self.handle_close),
        }

    async def handle_request(self, method: str | None, params: dict[str, Any] | None) -> Any | None:
        """Dispatch one method call to the provider."""
        mcp_method = McpMethod.lookup(method)
        if mcp_method is None:
            logger.debug(f"Unsupported method: {method}")
            return None

        capability, handler = self._routes[mcp_method]
        if capability is not None and not isinstance(self.provider, capability):
            logger.info(f"Provider {self.provider} does not support {mcp_method.value}")
            return None

        logger.debug(f"Handling {mcp_method.value}")
        return await handler(params or {})

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def handle_initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the initialize request. Repeated calls re-report capabilities."""
        try:
            init_params = InitializeParams(**params)
        except Exception as e:
            logger.warning(f"Invalid initialize params: {e}")
            # Still proceed with defaults
            init_params = InitializeParams()

        version = negotiate_protocol_version(init_params.protocolVersion)
        self.session.protocol_version = version
        self.session.client_info = init_params.clientInfo
        self.session.client_capabilities = init_params.capabilities
        if init_params.clientInfo is not None:
            logger.info(
                f"Initialize from {init_params.clientInfo.name} "
                f"{init_params.clientInfo.version}, protocol {version}"
            )

        capabilities = await self.provider.get_capabilities()
        result = InitializeResult(
            protocolVersion=version,
            capabilities=capabilities or McpCapabilities(),
            serverInfo=ServerInfo(
                name=self._settings.server_name,
                version=self._settings.server_version,
            ),
        )
        return result.model_dump(exclude_none=True)

    async def handle_initialized(self, params: dict[str, Any]) -> None:
        """Handle the notifications/initialized notification (no response)."""
        logger.info("Client confirmed initialization")
        self.session.initialized = True
        return None

    async def handle_close(self, params: dict[str, Any]) -> None:
        """Handle notifications/close. The transport decides whether to stop."""
        logger.info("Client requested close")
        return None

    async def handle_ping(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    # -------------------------------------------------------------------------
    # Prompts
    # -------------------------------------------------------------------------

    async def handle_prompts_list(self, params: dict[str, Any]) -> dict[str, Any]:
        prompts = await self.provider.list_prompts()  # type: ignore[attr-defined]
        return PromptsListResult(prompts=prompts).model_dump(exclude_none=True)

    async def handle_prompts_get(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            request = PromptGetParams(**params)
        except ValidationError as e:
            raise ValueError(f"Invalid params for prompts/get: {e}") from e

        response = await self.provider.get_prompt(request.name, request.string_arguments())  # type: ignore[attr-defined]
        return response.model_dump(exclude_none=True)

    # -------------------------------------------------------------------------
    # Tools
    # -------------------------------------------------------------------------

    async def handle_tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/list request."""
        tools = await self.provider.list_tools()  # type: ignore[attr-defined]
        return ToolsListResult(tools=tools).model_dump(exclude_none=True)

    async def handle_tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        """Handle the tools/call request.

        Bad arguments and failing tools are reported inside a successful
        result with ``isError`` set, never as a protocol error.
        """
        try:
            request = ToolCallParams(**params)
        except ValidationError:
            logger.warning("tools/call without a tool name")
            return McpToolResponse.error("Invalid parameters: 'name' is required").model_dump(exclude_none=True)

        name = request.name
        try:
            arguments = parse_tool_arguments(request.arguments)
        except ValueError as e:
            logger.warning(f"Invalid tools/call arguments for {name}: {e}")
            return McpToolResponse.error(f"Invalid tool arguments: {e}").model_dump(exclude_none=True)

        logger.info(f"Calling tool: {name}")
        result = await self.provider.call_tool(name, arguments)  # type: ignore[attr-defined]
        return result.model_dump(exclude_none=True)

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def handle_resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        resources = await self.provider.list_resources()  # type: ignore[attr-defined]
        return ResourcesListResult(resources=resources).model_dump(exclude_none=True)

    async def handle_resource_templates_list(self, params: dict[str, Any]) -> dict[str, Any]:
        templates = await self.provider.list_resource_templates()  # type: ignore[attr-defined]
        return ResourceTemplatesListResult(resourceTemplates=templates).model_dump(exclude_none=True)

    async def handle_resources_read(self, params: dict[str, Any]) -> dict[str, Any]:
        try:
            request = ResourceReadParams(**params)
        except ValidationError as e:
            raise ValueError(f"Invalid params for resources/read: {e}") from e
        response = await self.provider.read_resource(request.uri)  # type: ignore[attr-defined]
        return response.model_dump(exclude_none=True)


def parse_tool_arguments(raw: Any) -> dict[str, Any]:
    """Coerce a tools/call ``arguments`` value into a dict.

    Accepts a JSON object or a string holding one; anything else raises
    ValueError.
    """
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"arguments are not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"arguments must be a JSON object, got {type(raw).__name__}")
    return raw
