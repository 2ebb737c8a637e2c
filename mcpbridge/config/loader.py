"""Configuration loading from environment and YAML files."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    # Timeouts (seconds) for the HTTP remote provider
    default_timeout: int = 30

    # Server info
    server_name: str = "mcp-bridge"
    server_version: str = "0.1.0"

    # Host and port
    host: str = "0.0.0.0"
    port: int = 8080

    # Provider selection
    provider: str = "embedded"
    provider_registry_path: str = ""
    prompt_library_path: str = ""

    model_config = SettingsConfigDict(
        env_prefix="MCP_BRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @property
    def client_name(self) -> str:
        """Name reported in clientInfo when this process acts as an MCP client."""
        return f"{self.server_name}-client"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def load_config_file(config_path: str | Path) -> dict[str, Any]:
    """
    Load a configuration mapping from a YAML or JSON file.

    Args:
        config_path: Path to a .yaml, .yml, or .json file.

    Returns:
        Dictionary with configuration data.

    Raises:
        ValueError: If the extension is not supported.
        FileNotFoundError: If the file does not exist.
    """
    config_path = Path(config_path)
    if config_path.suffix not in (".yaml", ".yml", ".json"):
        raise ValueError(f"Unsupported file format: {config_path}. Use .json, .yaml, or .yml")

    # YAML is a superset of JSON, so one loader covers both
    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return config
