"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from mcpbridge.config.loader import get_settings
from mcpbridge.main import create_app
from mcpbridge.mcp.handlers import ProtocolHandler
from mcpbridge.mcp.jsonrpc import JsonRpcProcessor
from mcpbridge.mcp.registry import ToolRegistry
from mcpbridge.prompts.library import PromptLibrary
from mcpbridge.providers.embedded import McpProviderEmbedded
from mcpbridge.resources import SAMPLE_RESOURCES, ResourceLibrary

ECHO_SERVER = Path(__file__).parent / "fixtures" / "echo_server.py"


@pytest.fixture
def tool_registry():
    """A tool registry with the stub tools loaded."""
    registry = ToolRegistry()
    registry.load_tool_set("stub")
    return registry


@pytest.fixture
def provider(tool_registry):
    """Embedded provider over the bundled prompts, stub tools, and sample resources."""
    return McpProviderEmbedded(
        prompts=PromptLibrary.default(),
        tools=tool_registry,
        resources=ResourceLibrary(SAMPLE_RESOURCES),
    )


@pytest.fixture
def handler(provider):
    return ProtocolHandler(provider)


@pytest.fixture
def processor(handler):
    return JsonRpcProcessor(handler)


@pytest.fixture
def client(provider):
    """Synchronous test client for the HTTP server."""
    return TestClient(create_app(provider))


@pytest.fixture
def settings():
    """Get application settings."""
    return get_settings()


@pytest.fixture
def echo_server_command():
    """Command and args that start the fixture MCP server."""
    return sys.executable, [str(ECHO_SERVER)]


@pytest.fixture
def sample_jsonrpc_request():
    """Sample JSON-RPC request factory."""
    def _make_request(method: str, params: dict = None, id: int = 1):
        return {
            "jsonrpc": "2.0",
            "id": id,
            "method": method,
            "params": params or {},
        }
    return _make_request
