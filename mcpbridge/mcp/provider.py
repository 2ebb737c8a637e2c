"""Provider contract: the business logic behind an MCP endpoint.

A provider implements the capability groups it supports. The protocol
handler checks for a capability group before dispatching a method to it,
so a provider that only serves prompts simply does not implement the tool
or resource operations.
"""

from abc import ABC, abstractmethod
from typing import Any, Protocol, runtime_checkable

from mcpbridge.mcp.models import (
    McpCapabilities,
    McpPrompt,
    McpPromptResponse,
    McpResource,
    McpResourceResponse,
    McpResourceTemplate,
    McpToolMetadata,
    McpToolResponse,
)


@runtime_checkable
class PromptsCapability(Protocol):
    async def list_prompts(self) -> list[McpPrompt]: ...

    async def get_prompt(self, name: str, args: dict[str, str] | None = None) -> McpPromptResponse: ...


@runtime_checkable
class ToolsCapability(Protocol):
    async def list_tools(self) -> list[McpToolMetadata]: ...

    async def get_tool(self, name: str) -> McpToolMetadata | None: ...

    async def call_tool(self, name: str, args: dict[str, Any] | None = None) -> McpToolResponse: ...


@runtime_checkable
class ResourcesCapability(Protocol):
    async def list_resources(self) -> list[McpResource]: ...

    async def list_resource_templates(self) -> list[McpResourceTemplate]: ...

    async def read_resource(self, uri: str) -> McpResourceResponse: ...


class McpProvider(ABC):
    """Base class for every provider, whatever its transport."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the provider for use. Safe to call more than once."""

    @abstractmethod
    async def get_capabilities(self) -> McpCapabilities | None:
        """Return the capability areas this provider offers."""

    @abstractmethod
    async def close(self) -> None:
        """Release transport resources. Idempotent and best-effort."""

    async def __aenter__(self) -> "McpProvider":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
