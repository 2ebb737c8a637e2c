"""Named provider configurations loaded from YAML or JSON."""

import logging
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from mcpbridge.config.loader import Settings, get_settings, load_config_file
from mcpbridge.mcp.provider import McpProvider
from mcpbridge.mcp.registry import ToolRegistry
from mcpbridge.prompts.library import PromptLibrary
from mcpbridge.providers.embedded import McpProviderEmbedded
from mcpbridge.providers.http import McpProviderHttp
from mcpbridge.providers.stdio import McpProviderStdio
from mcpbridge.resources import SAMPLE_RESOURCES, ResourceLibrary

logger = logging.getLogger(__name__)

# Tool set loaded into embedded and test providers
DEFAULT_TOOL_SET = "stub"

# Prompt category served by the test provider
TEST_PROMPT_CATEGORY = "research"


class _ProviderConfigBase(BaseModel):
    # Registry files may use camelCase keys
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    description: str | None = None


class EmbeddedProviderConfig(_ProviderConfigBase):
    """An in-process provider over the prompt library and stub tools."""

    type: Literal["embedded"] = "embedded"
    prompt_library_path: str | None = Field(default=None, alias="promptLibraryPath")


class StdioProviderConfig(_ProviderConfigBase):
    """An external MCP server started as a child process."""

    type: Literal["stdio"] = "stdio"
    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)


class HttpProviderConfig(_ProviderConfigBase):
    """A remote MCP server reached over HTTP."""

    type: Literal["http"] = "http"
    url: str


class TestProviderConfig(_ProviderConfigBase):
    """An in-process provider with a fixed set of samples."""

    __test__ = False

    type: Literal["test"] = "test"
    include_default_prompts: bool = Field(default=True, alias="includeDefaultPrompts")
    include_default_tools: bool = Field(default=True, alias="includeDefaultTools")
    include_default_resources: bool = Field(default=True, alias="includeDefaultResources")


ProviderConfig = Annotated[
    Union[EmbeddedProviderConfig, StdioProviderConfig, HttpProviderConfig, TestProviderConfig],
    Field(discriminator="type"),
]


class ProviderRegistryConfig(BaseModel):
    servers: dict[str, ProviderConfig] = Field(default_factory=dict)


def _tool_registry(enabled: bool = True) -> ToolRegistry:
    tools = ToolRegistry()
    if enabled:
        tools.load_tool_set(DEFAULT_TOOL_SET)
    return tools


class ProviderRegistry:
    """
    Central place to define and build MCP providers by name.

    ``get_provider`` builds a new provider on every call; the caller owns it
    and is responsible for closing it.
    """

    def __init__(self, configs: dict[str, ProviderConfig], settings: Settings | None = None):
        self._configs = dict(configs)
        self._settings = settings or get_settings()

    @classmethod
    def load_from_file(cls, path: str | Path, settings: Settings | None = None) -> "ProviderRegistry":
        """Load a registry from a .yaml, .yml, or .json file.

        Raises:
            ValueError: If the file extension is not supported.
        """
        data = load_config_file(path)
        config = ProviderRegistryConfig(**data)
        logger.info(f"Loaded {len(config.servers)} provider configs from {path}")
        return cls(config.servers, settings)

    @classmethod
    def default(cls, settings: Settings | None = None) -> "ProviderRegistry":
        """A registry with the built-in ``embedded`` and ``test`` providers."""
        return cls(
            {
                "embedded": EmbeddedProviderConfig(description="Embedded MCP provider with default libraries"),
                "test": TestProviderConfig(description="Test provider with sample prompts and tools"),
            },
            settings,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ProviderRegistry":
        """Load the configured registry file, or fall back to the default registry."""
        settings = settings or get_settings()
        if settings.provider_registry_path:
            return cls.load_from_file(settings.provider_registry_path, settings)
        return cls.default(settings)

    def list_provider_names(self) -> list[str]:
        return list(self._configs)

    def get_configs(self) -> dict[str, ProviderConfig]:
        return dict(self._configs)

    def get_provider(self, name: str) -> McpProvider | None:
        """Build the named provider, or return None if the name is unknown."""
        config = self._configs.get(name)
        if config is None:
            return None
        logger.debug(f"Creating provider '{name}' of type {config.type}")
        return self._create_provider(config)

    def _create_provider(self, config: ProviderConfig) -> McpProvider:
        if isinstance(config, EmbeddedProviderConfig):
            return self._create_embedded(config)
        if isinstance(config, StdioProviderConfig):
            return McpProviderStdio(config.command, config.args, config.env, settings=self._settings)
        if isinstance(config, HttpProviderConfig):
            return McpProviderHttp(config.url, settings=self._settings)
        return self._create_test(config)

    def _create_embedded(self, config: EmbeddedProviderConfig) -> McpProvider:
        path = config.prompt_library_path or self._settings.prompt_library_path
        prompts = PromptLibrary.load_from_path(path) if path else PromptLibrary.default()
        return McpProviderEmbedded(prompts, _tool_registry())

    def _create_test(self, config: TestProviderConfig) -> McpProvider:
        prompts = PromptLibrary()
        if config.include_default_prompts:
            for prompt in PromptLibrary.default().list(category_prefix=TEST_PROMPT_CATEGORY):
                prompts.add(prompt)

        resources = ResourceLibrary(SAMPLE_RESOURCES if config.include_default_resources else [])
        return McpProviderEmbedded(prompts, _tool_registry(config.include_default_tools), resources)
