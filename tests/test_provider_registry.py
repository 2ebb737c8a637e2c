"""Tests for the provider registry and configuration loading."""

import json
import sys

import pytest
from pydantic import ValidationError

from mcpbridge.config.loader import Settings, load_config_file
from mcpbridge.providers.embedded import McpProviderEmbedded
from mcpbridge.providers.http import McpProviderHttp
from mcpbridge.providers.registry import (
    EmbeddedProviderConfig,
    HttpProviderConfig,
    ProviderRegistry,
    StdioProviderConfig,
    TestProviderConfig,
)

REGISTRY_YAML = """
servers:
  local:
    type: embedded
    description: Local prompts
  remote:
    type: http
    url: http://localhost:9000/mcp
  child:
    type: stdio
    command: {python}
    args: ["-m", "mcpbridge.cli", "serve"]
    env:
      MCP_BRIDGE_LOG_LEVEL: DEBUG
  samples:
    type: test
    includeDefaultTools: false
"""


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / "servers.yaml"
    path.write_text(REGISTRY_YAML.format(python=json.dumps(sys.executable)))
    return path


class TestLoading:
    def test_load_yaml(self, registry_file):
        registry = ProviderRegistry.load_from_file(registry_file)
        assert registry.list_provider_names() == ["local", "remote", "child", "samples"]

        configs = registry.get_configs()
        assert isinstance(configs["local"], EmbeddedProviderConfig)
        assert isinstance(configs["remote"], HttpProviderConfig)
        assert isinstance(configs["child"], StdioProviderConfig)
        assert configs["child"].args == ["-m", "mcpbridge.cli", "serve"]
        assert configs["child"].env == {"MCP_BRIDGE_LOG_LEVEL": "DEBUG"}
        assert isinstance(configs["samples"], TestProviderConfig)
        assert configs["samples"].include_default_tools is False

    def test_load_json(self, tmp_path):
        path = tmp_path / "servers.json"
        path.write_text(json.dumps({"servers": {"remote": {"type": "http", "url": "http://x"}}}))
        assert ProviderRegistry.load_from_file(path).list_provider_names() == ["remote"]

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "servers.toml"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported file format"):
            ProviderRegistry.load_from_file(path)

    def test_unknown_type_is_rejected(self, tmp_path):
        path = tmp_path / "servers.yaml"
        path.write_text("servers:\n  bad:\n    type: carrier-pigeon\n")
        with pytest.raises(ValidationError):
            ProviderRegistry.load_from_file(path)

    def test_config_file_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_config_file(path)


class TestProviders:
    def test_default_registry(self):
        assert ProviderRegistry.default().list_provider_names() == ["embedded", "test"]

    def test_unknown_name_returns_none(self):
        assert ProviderRegistry.default().get_provider("nope") is None

    def test_each_call_builds_a_new_provider(self):
        registry = ProviderRegistry.default()
        assert registry.get_provider("embedded") is not registry.get_provider("embedded")

    @pytest.mark.asyncio
    async def test_embedded_provider(self):
        provider = ProviderRegistry.default().get_provider("embedded")
        assert isinstance(provider, McpProviderEmbedded)
        assert "text-qa/answer" in [p.name for p in await provider.list_prompts()]
        assert len(await provider.list_tools()) == 3
        assert (await provider.get_capabilities()).resources is None

    @pytest.mark.asyncio
    async def test_embedded_prompt_library_from_settings(self, tmp_path):
        path = tmp_path / "prompts.yaml"
        path.write_text("prompts:\n  - id: mine\n    template: Mine\n")
        registry = ProviderRegistry.default(Settings(prompt_library_path=str(path)))

        provider = registry.get_provider("embedded")
        assert [p.name for p in await provider.list_prompts()] == ["mine"]

    @pytest.mark.asyncio
    async def test_test_provider(self):
        provider = ProviderRegistry.default().get_provider("test")
        assert [p.name for p in await provider.list_prompts()] == ["research/outline"]
        assert len(await provider.list_resources()) == 3
        assert len(await provider.list_tools()) == 3

    @pytest.mark.asyncio
    async def test_test_provider_options(self, registry_file):
        provider = ProviderRegistry.load_from_file(registry_file).get_provider("samples")
        assert await provider.list_tools() == []
        capabilities = await provider.get_capabilities()
        assert capabilities.tools is None
        assert capabilities.resources is not None

    @pytest.mark.asyncio
    async def test_http_provider(self, registry_file):
        provider = ProviderRegistry.load_from_file(registry_file).get_provider("remote")
        assert isinstance(provider, McpProviderHttp)
        assert provider.base_url == "http://localhost:9000"
        await provider.close()

    def test_from_settings_without_file_is_default(self):
        assert ProviderRegistry.from_settings(Settings()).list_provider_names() == ["embedded", "test"]

    def test_from_settings_with_file(self, registry_file):
        registry = ProviderRegistry.from_settings(Settings(provider_registry_path=str(registry_file)))
        assert "remote" in registry.list_provider_names()
