"""JSON-RPC 2.0 error codes, error payload helpers, and typed MCP exceptions."""

from typing import Any

# Reserved JSON-RPC 2.0 error codes used by this server
PARSE_ERROR = -32700  # Invalid JSON was received
METHOD_NOT_FOUND = -32601  # The method does not exist / is not available
INTERNAL_ERROR = -32603  # Exception raised while executing a known method


def error_message(code: int) -> str:
    """Get the standard message for a JSON-RPC error code."""
    messages = {
        PARSE_ERROR: "Parse error",
        METHOD_NOT_FOUND: "Method not found",
        INTERNAL_ERROR: "Internal error",
    }
    return messages.get(code, "Unknown error")


def make_error_data(code: int, message: str | None = None, data: Any = None) -> dict[str, Any]:
    """Create an error object for JSON-RPC response."""
    error: dict[str, Any] = {
        "code": code,
        "message": message or error_message(code),
    }
    if data is not None:
        error["data"] = data
    return error


# =============================================================================
# Exceptions raised to callers of a provider
# =============================================================================


class McpError(Exception):
    """Base class for failures surfaced by MCP providers."""


class McpTransportError(McpError):
    """The underlying process, stream, or socket failed."""


class McpProtocolError(McpError):
    """The remote side sent something that is not a valid JSON-RPC response."""


class McpRemoteError(McpError):
    """The remote side answered with a JSON-RPC error object."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class PromptNotFoundError(McpError):
    """No prompt is registered under the requested name."""


class ResourceNotFoundError(McpError):
    """No resource is registered under the requested URI."""
