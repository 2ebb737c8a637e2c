"""MCP provider implementations: embedded, stdio process, and HTTP remote."""

from mcpbridge.providers.embedded import McpProviderEmbedded
from mcpbridge.providers.http import McpProviderHttp
from mcpbridge.providers.registry import ProviderRegistry
from mcpbridge.providers.stdio import McpProviderStdio

__all__ = [
    "McpProviderEmbedded",
    "McpProviderHttp",
    "McpProviderStdio",
    "ProviderRegistry",
]
