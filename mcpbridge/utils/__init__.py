"""Utility modules: logging and HTTP client."""

from mcpbridge.utils.logging import setup_logging, get_logger
from mcpbridge.utils.http import create_http_client, http_retry

__all__ = [
    "setup_logging",
    "get_logger",
    "create_http_client",
    "http_retry",
]
