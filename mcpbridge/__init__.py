"""Expose and consume MCP prompts, tools, and resources over stdio and HTTP."""

__version__ = "0.1.0"
