"""MCP provider backed by in-process prompt, tool, and resource libraries."""

import logging
from typing import Any

from mcpbridge.mcp.errors import PromptNotFoundError
from mcpbridge.mcp.models import (
    ChatMessage,
    McpCapabilities,
    McpCapability,
    McpPrompt,
    McpPromptResponse,
    McpResource,
    McpResourceResponse,
    McpResourceTemplate,
    McpToolMetadata,
    McpToolResponse,
    TextContent,
)
from mcpbridge.mcp.provider import McpProvider
from mcpbridge.mcp.registry import ToolRegistry
from mcpbridge.prompts.library import PromptLibrary
from mcpbridge.resources import ResourceLibrary

logger = logging.getLogger(__name__)


class McpProviderEmbedded(McpProvider):
    """Serves prompts, tools, and resources straight from local libraries.

    The libraries are passed in at construction; nothing is looked up
    globally. Every operation is a direct call with no I/O boundary.
    """

    def __init__(
        self,
        prompts: PromptLibrary | None = None,
        tools: ToolRegistry | None = None,
        resources: ResourceLibrary | None = None,
    ):
        self.prompts = prompts if prompts is not None else PromptLibrary()
        self.tools = tools if tools is not None else ToolRegistry()
        self.resources = resources if resources is not None else ResourceLibrary()

    def __str__(self) -> str:
        return "McpServer-Embedded"

    async def initialize(self) -> None:
        pass

    async def get_capabilities(self) -> McpCapabilities:
        return McpCapabilities(
            prompts=McpCapability(listChanged=False),
            tools=McpCapability(listChanged=False) if self.tools.tool_count else None,
            resources=McpCapability(listChanged=False) if self.resources else None,
        )

    # Prompts

    async def list_prompts(self) -> list[McpPrompt]:
        return [prompt.to_mcp_prompt() for prompt in self.prompts.list()]

    async def get_prompt(self, name: str, args: dict[str, str] | None = None) -> McpPromptResponse:
        """Fill a prompt with arguments, returning it as a single user message."""
        prompt = self.prompts.get(name)
        if prompt is None:
            raise PromptNotFoundError(f"Prompt with name '{name}' not found")
        filled = prompt.fill(args or {})
        return McpPromptResponse.from_chat(
            prompt.description or prompt.title,
            [ChatMessage(role="user", content=[TextContent(text=filled)])],
        )

    # Tools

    async def list_tools(self) -> list[McpToolMetadata]:
        return self.tools.list_tools()

    async def get_tool(self, name: str) -> McpToolMetadata | None:
        tool = self.tools.get(name)
        return tool.to_mcp_tool() if tool else None

    async def call_tool(self, name: str, args: dict[str, Any] | None = None) -> McpToolResponse:
        outcome = await self.tools.call_tool(name, args or {})
        return McpToolResponse.from_outcome(outcome)

    # Resources

    async def list_resources(self) -> list[McpResource]:
        return self.resources.list()

    async def list_resource_templates(self) -> list[McpResourceTemplate]:
        return self.resources.list_templates()

    async def read_resource(self, uri: str) -> McpResourceResponse:
        return self.resources.read(uri)

    async def close(self) -> None:
        # Nothing to release for in-process libraries
        logger.debug("Closed embedded provider")
