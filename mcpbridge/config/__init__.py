"""Configuration loading and management."""

from mcpbridge.config.loader import Settings, get_settings, load_config_file

__all__ = ["Settings", "get_settings", "load_config_file"]
