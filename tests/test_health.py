"""Tests for health and info endpoints."""

from fastapi.testclient import TestClient

from mcpbridge.mcp.handlers import PROTOCOL_VERSION


def test_health_endpoint(client: TestClient):
    """Test that health endpoint returns the literal OK."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


def test_root_endpoint(client: TestClient):
    """Test that root endpoint returns server info."""
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "endpoints" in data
    assert data["endpoints"]["health"] == "/health"
    assert data["endpoints"]["mcp"] == "/mcp"
    assert data["provider"] == "McpServer-Embedded"


def test_root_endpoint_has_mcp_version(client: TestClient):
    """Test that root endpoint includes MCP protocol version."""
    data = client.get("/").json()
    assert data["mcp_protocol_version"] == PROTOCOL_VERSION


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_request_id_is_generated(client: TestClient):
    response = client.get("/health")
    assert response.headers["X-Request-ID"]
