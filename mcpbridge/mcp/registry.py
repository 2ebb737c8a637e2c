"""Tool registry: the tool source behind the embedded provider."""

import importlib
import logging
from typing import Any, Awaitable, Callable

from mcpbridge.mcp.models import McpToolMetadata, ToolErr, ToolOk, ToolOutcome
from mcpbridge.tools.base import get_tool_metadata

logger = logging.getLogger(__name__)

# Type alias for tool handlers; the return value becomes the tool output
ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class ToolDefinition:
    """A registered tool with its metadata and handler."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: ToolHandler,
        output_schema: dict[str, Any] | None = None,
        title: str | None = None,
        version: str | None = None,
    ):
        self.name = name
        self.description = description
        self.input_schema = input_schema
        self.output_schema = output_schema
        self.title = title
        self.version = version
        self.handler = handler

    def to_mcp_tool(self) -> McpToolMetadata:
        """Convert to MCP tool metadata for protocol responses."""
        return McpToolMetadata(
            name=self.name,
            title=self.title or self.name,
            description=self.description,
            inputSchema=self.input_schema,
            outputSchema=self.output_schema,
            annotations={"version": self.version} if self.version else None,
        )


class ToolRegistry:
    """Registry for MCP tools with plugin-style tool set loading.

    Registration replaces the tool dict rather than mutating it, so tools can
    be added while the HTTP server is handling calls.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._tool_sets: set[str] = set()

    def register(
        self,
        name: str,
        description: str,
        input_schema: dict[str, Any],
        handler: ToolHandler,
        output_schema: dict[str, Any] | None = None,
        title: str | None = None,
        version: str | None = None,
    ) -> None:
        """Register a tool with the registry."""
        if name in self._tools:
            logger.warning(f"Tool '{name}' already registered, overwriting")
        tools = dict(self._tools)
        tools[name] = ToolDefinition(
            name=name,
            description=description,
            input_schema=input_schema,
            handler=handler,
            output_schema=output_schema,
            title=title,
            version=version,
        )
        self._tools = tools
        logger.debug(f"Registered tool: {name}")

    def register_function(self, func: ToolHandler) -> None:
        """Register a function decorated with ``@tool``."""
        metadata = get_tool_metadata(func)
        if metadata is None:
            raise ValueError(f"{func!r} is not decorated with @tool")
        self.register(handler=func, **metadata)

    def get(self, name: str) -> ToolDefinition | None:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> list[McpToolMetadata]:
        """List all registered tools as MCP tool metadata."""
        return [tool.to_mcp_tool() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolOutcome:
        """Call a tool by name with the given arguments."""
        tool = self.get(name)
        if tool is None:
            return ToolErr(message=f"Tool with name '{name}' not found")

        try:
            output = await tool.handler(arguments)
            return ToolOk(output=output)
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return ToolErr(message=f"Error executing tool: {e}")

    def load_tool_set(self, tool_set: str) -> bool:
        """
        Load a tool set module and register its tools.

        Tool sets live in mcpbridge/tools/<tool_set>/tools.py and expose a
        register_tools(registry) function.
        """
        if tool_set in self._tool_sets:
            logger.debug(f"Tool set '{tool_set}' already loaded")
            return True

        module_path = f"mcpbridge.tools.{tool_set}.tools"
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            logger.warning(f"Could not import tool set '{tool_set}': {e}")
            return False

        if not hasattr(module, "register_tools"):
            logger.warning(f"Tool set '{tool_set}' has no register_tools function")
            return False

        module.register_tools(self)
        self._tool_sets.add(tool_set)
        logger.info(f"Loaded tool set: {tool_set}")
        return True

    @property
    def tool_count(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)
