"""MCP (Model Context Protocol) implementation with JSON-RPC 2.0."""

from mcpbridge.mcp.errors import (
    PARSE_ERROR,
    METHOD_NOT_FOUND,
    INTERNAL_ERROR,
    McpError,
    McpProtocolError,
    McpRemoteError,
    McpTransportError,
    PromptNotFoundError,
    ResourceNotFoundError,
)
from mcpbridge.mcp.handlers import McpMethod, ProtocolHandler
from mcpbridge.mcp.jsonrpc import JsonRpcProcessor, decode_message, encode_message
from mcpbridge.mcp.models import (
    JsonRpcRequest,
    JsonRpcResponse,
    JsonRpcError,
    McpCapabilities,
    TextContent,
    McpToolResponse,
)
from mcpbridge.mcp.provider import McpProvider

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "JsonRpcProcessor",
    "McpCapabilities",
    "McpMethod",
    "McpProvider",
    "McpToolResponse",
    "ProtocolHandler",
    "TextContent",
    "decode_message",
    "encode_message",
    "PARSE_ERROR",
    "METHOD_NOT_FOUND",
    "INTERNAL_ERROR",
    "McpError",
    "McpProtocolError",
    "McpRemoteError",
    "McpTransportError",
    "PromptNotFoundError",
    "ResourceNotFoundError",
]
