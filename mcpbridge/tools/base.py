"""Decorator for declaring tool functions."""

import functools
from typing import Any, Awaitable, Callable

ToolFunction = Callable[[dict[str, Any]], Awaitable[Any]]


def tool(
    name: str,
    description: str,
    input_schema: dict[str, Any],
    output_schema: dict[str, Any] | None = None,
    version: str | None = "1.0.0",
) -> Callable[[ToolFunction], ToolFunction]:
    """
    Decorator to mark a function as an MCP tool.

    Usage:
        @tool(
            name="echo",
            description="Echoes the input message",
            input_schema={"type": "object", "properties": {"message": {"type": "string"}}},
        )
        async def echo(arguments: dict) -> dict:
            return {"echoed_message": arguments["message"]}

    The returned value becomes the tool output; raising marks the call as
    failed. The decorated function will have _tool_metadata attached.
    """
    def decorator(func: ToolFunction) -> ToolFunction:
        @functools.wraps(func)
        async def wrapper(arguments: dict[str, Any]) -> Any:
            return await func(arguments)

        # Attach metadata for registration
        wrapper._tool_metadata = {  # type: ignore[attr-defined]
            "name": name,
            "description": description,
            "input_schema": input_schema,
            "output_schema": output_schema,
            "version": version,
        }
        return wrapper

    return decorator


def get_tool_metadata(func: Callable) -> dict[str, Any] | None:
    """Get tool metadata from a decorated function."""
    return getattr(func, "_tool_metadata", None)


def one_param_schema(param: str, description: str, required: bool = True) -> dict[str, Any]:
    """JSON schema for an object with a single string property."""
    return {
        "type": "object",
        "properties": {param: {"type": "string", "description": description}},
        "required": [param] if required else [],
    }
