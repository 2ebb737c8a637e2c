"""Stub tools with fixed outputs, useful for exercising MCP clients."""

from typing import Any

from mcpbridge.mcp.registry import ToolRegistry
from mcpbridge.tools.base import one_param_schema, tool


@tool(
    name="echo",
    description="Echoes back the provided message. Use this to test tool argument passing.",
    input_schema=one_param_schema("message", "The message to echo."),
    output_schema=one_param_schema("echoed_message", "The echoed message.", required=False),
)
async def echo_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    """Handle the echo tool call."""
    if "message" not in arguments:
        raise ValueError("'message' argument is required")
    return {"echoed_message": arguments["message"]}


@tool(
    name="test_internet_search",
    description="A fake internet search tool that returns a fixed result.",
    input_schema=one_param_schema("query", "The search query."),
    output_schema={
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "The search query."},
            "num_results": {"type": "integer", "description": "Number of results returned."},
            "results": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "title": {"type": "string", "description": "Title of the result."},
                        "url": {"type": "string", "description": "URL of the result."},
                        "snippet": {"type": "string", "description": "Short description or snippet."},
                    },
                    "required": ["title", "url"],
                },
                "description": "List of search results.",
            },
        },
        "required": ["results"],
    },
)
async def internet_search_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "query": "example query",
        "num_results": 3,
        "results": [
            {
                "title": "Example Domain",
                "url": "https://www.example.com",
                "snippet": "This domain is for use in illustrative examples in documents.",
            },
            {
                "title": "Example - Wikipedia",
                "url": "https://en.wikipedia.org/wiki/Example",
                "snippet": "An example is a representative form or pattern.",
            },
            {
                "title": "Examples - The Free Dictionary",
                "url": "https://www.thefreedictionary.com/examples",
                "snippet": "Examples are used to illustrate or explain something.",
            },
        ],
    }


@tool(
    name="test_sentiment_analysis",
    description="A fake sentiment analysis tool that returns a fixed sentiment.",
    input_schema=one_param_schema("input_text", "The text to analyze."),
    output_schema={
        "type": "object",
        "properties": {
            "input_text": {"type": "string", "description": "The input text that was analyzed."},
            "sentiment": {
                "type": "string",
                "description": "The detected sentiment.",
                "enum": ["positive", "negative", "neutral"],
            },
            "confidence": {
                "type": "number",
                "description": "Confidence score between 0 and 1.",
                "minimum": 0,
                "maximum": 1,
            },
        },
        "required": ["input_text", "sentiment", "confidence"],
    },
)
async def sentiment_analysis_handler(arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "input_text": "I love programming!",
        "sentiment": "positive",
        "confidence": 0.95,
    }


def register_tools(registry: ToolRegistry) -> None:
    """Register all stub tools with the registry."""
    registry.register_function(echo_handler)
    registry.register_function(internet_search_handler)
    registry.register_function(sentiment_analysis_handler)
