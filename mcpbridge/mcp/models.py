"""Pydantic models for MCP JSON-RPC 2.0 protocol."""

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# JSON-RPC 2.0 Base Models
# =============================================================================


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object (a notification when ``id`` is None)."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    method: str | None = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None or (self.method or "").startswith("notifications/")

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization that omits absent id and params."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.id is not None:
            data["id"] = self.id
        data["method"] = self.method
        if self.params is not None:
            data["params"] = self.params
        return data


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            data["data"] = self.data
        return data


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Custom serialization to exclude None fields appropriately."""
        data: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            data["error"] = self.error.model_dump()
        else:
            data["result"] = self.result
        return data


# =============================================================================
# MCP Content Types
# =============================================================================


class TextContent(BaseModel):
    """Text content."""

    type: Literal["text"] = "text"
    text: str


class ImageContent(BaseModel):
    """Image content (base64 encoded)."""

    type: Literal["image"] = "image"
    data: str
    mimeType: str = "image/png"


class AudioContent(BaseModel):
    """Audio content (base64 encoded)."""

    type: Literal["audio"] = "audio"
    data: str
    mimeType: str = "audio/wav"


class ResourceLinkContent(BaseModel):
    """A link to a resource the client may read separately."""

    type: Literal["resource_link"] = "resource_link"
    uri: str
    name: str
    title: str | None = None
    description: str | None = None
    mimeType: str | None = None


class McpResourceContents(BaseModel):
    """Contents of a resource, either text or base64 blob."""

    uri: str
    mimeType: str | None = None
    text: str | None = None
    blob: str | None = None


class EmbeddedResourceContent(BaseModel):
    """A resource embedded inline."""

    type: Literal["resource"] = "resource"
    resource: McpResourceContents


McpContent = Annotated[
    Union[TextContent, ImageContent, AudioContent, ResourceLinkContent, EmbeddedResourceContent],
    Field(discriminator="type"),
]


# =============================================================================
# MCP Capability Models
# =============================================================================


class McpCapability(BaseModel):
    """A single capability area, optionally supporting change notifications."""

    listChanged: bool = False


class McpCapabilities(BaseModel):
    """Capability areas a provider offers."""

    prompts: McpCapability | None = None
    tools: McpCapability | None = None
    resources: McpCapability | None = None


# =============================================================================
# MCP Prompt Models
# =============================================================================


class McpPromptArgument(BaseModel):
    name: str
    description: str | None = None
    required: bool = False


class McpPrompt(BaseModel):
    """Prompt metadata as listed by prompts/list."""

    name: str
    title: str | None = None
    description: str | None = None
    arguments: list[McpPromptArgument] = Field(default_factory=list)


class ChatMessage(BaseModel):
    """A chat message made of one or more content parts."""

    role: str = "user"
    content: list[McpContent] = Field(default_factory=list)


class PromptMessage(BaseModel):
    """A prompt message as it appears on the wire (one content object)."""

    role: Literal["user", "assistant"] = "user"
    content: McpContent


class McpPromptResponse(BaseModel):
    """Result of filling a prompt with arguments."""

    description: str | None = None
    messages: list[PromptMessage] = Field(default_factory=list)

    @classmethod
    def from_chat(cls, description: str | None, messages: list[ChatMessage]) -> "McpPromptResponse":
        """Flatten multi-part chat messages into single-content prompt messages."""
        wire: list[PromptMessage] = []
        for message in messages:
            role = message.role.lower() if message.role.lower() in ("user", "assistant") else "user"
            if not message.content:
                wire.append(PromptMessage(role=role, content=TextContent(text="")))
            for part in message.content:
                wire.append(PromptMessage(role=role, content=part))
        return cls(description=description, messages=wire)


# =============================================================================
# MCP Tool Models
# =============================================================================


class McpToolMetadata(BaseModel):
    """MCP tool definition."""

    name: str
    title: str | None = None
    description: str = ""
    inputSchema: dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})
    outputSchema: dict[str, Any] | None = None
    annotations: dict[str, Any] | None = None


class ToolOk(BaseModel):
    """Successful tool execution."""

    output: Any = None


class ToolErr(BaseModel):
    """Failed tool execution, reported to the caller as a business outcome."""

    message: str


ToolOutcome = ToolOk | ToolErr


class McpToolResponse(BaseModel):
    """Result of a tool call."""

    content: list[McpContent] = Field(default_factory=list)
    structuredContent: dict[str, Any] | None = None
    isError: bool = False
    metadata: dict[str, Any] | None = None

    @classmethod
    def error(cls, message: str) -> "McpToolResponse":
        return cls(content=[TextContent(text=message)], isError=True)

    @classmethod
    def from_outcome(cls, outcome: ToolOutcome) -> "McpToolResponse":
        """Convert a tool outcome into the tools/call result payload."""
        if isinstance(outcome, ToolErr):
            return cls.error(outcome.message)
        output = outcome.output
        if isinstance(output, str):
            text = output
        else:
            text = json.dumps(output, ensure_ascii=False)
        return cls(
            content=[TextContent(text=text)],
            structuredContent=output if isinstance(output, dict) else None,
        )

    @property
    def text(self) -> str:
        """Concatenated text of all text content parts."""
        return "\n".join(c.text for c in self.content if isinstance(c, TextContent))


# =============================================================================
# MCP Resource Models
# =============================================================================


class McpResource(BaseModel):
    uri: str
    name: str
    title: str | None = None
    description: str | None = None
    mimeType: str | None = None


class McpResourceTemplate(BaseModel):
    uriTemplate: str
    name: str
    title: str | None = None
    description: str | None = None
    mimeType: str | None = None


class McpResourceResponse(BaseModel):
    """Result of resources/read."""

    contents: list[McpResourceContents] = Field(default_factory=list)


# =============================================================================
# MCP Protocol Models
# =============================================================================


class ClientInfo(BaseModel):
    """Client information sent during initialization."""

    name: str
    version: str


class ServerInfo(BaseModel):
    """Server information returned during initialization."""

    name: str
    version: str


class InitializeParams(BaseModel):
    """Parameters for initialize request."""

    protocolVersion: str | None = None
    capabilities: dict[str, Any] = Field(default_factory=dict)
    clientInfo: ClientInfo | None = None


class InitializeResult(BaseModel):
    """Result of initialize request."""

    protocolVersion: str
    capabilities: McpCapabilities
    serverInfo: ServerInfo


class PromptsListResult(BaseModel):
    prompts: list[McpPrompt]


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class PromptGetParams(BaseModel):
    """Parameters for prompts/get request."""

    name: str
    arguments: dict[str, Any] | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _require_text(value)

    def string_arguments(self) -> dict[str, str]:
        """Template arguments as strings; other values are JSON-encoded."""
        return {
            key: value if isinstance(value, str) else json.dumps(value)
            for key, value in (self.arguments or {}).items()
        }


class ToolsListResult(BaseModel):
    """Result of tools/list request."""

    tools: list[McpToolMetadata]


class ToolCallParams(BaseModel):
    """Parameters for tools/call request.

    ``arguments`` stays raw; it may arrive as an object or a JSON string.
    """

    name: str
    arguments: Any = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _require_text(value)


class ResourcesListResult(BaseModel):
    resources: list[McpResource]


class ResourceTemplatesListResult(BaseModel):
    resourceTemplates: list[McpResourceTemplate]


class ResourceReadParams(BaseModel):
    uri: str

    @field_validator("uri")
    @classmethod
    def uri_not_blank(cls, value: str) -> str:
        return _require_text(value)
