"""HTTP client and retry policy for talking to remote MCP servers."""

import logging

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from mcpbridge.config.loader import get_settings

logger = logging.getLogger(__name__)

# Errors worth another attempt: the request never reached a server that answered
RETRYABLE_ERRORS = (httpx.ConnectError, httpx.TimeoutException)


def create_http_client(
    timeout: float | None = None,
    base_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.AsyncClient:
    """
    Create a pooled async client for JSON-RPC over HTTP.

    Args:
        timeout: Request timeout in seconds. Uses default from settings if None.
        base_url: Optional base URL for all requests.
        transport: Optional transport override, e.g. ``httpx.MockTransport``.
        headers: Extra headers merged over the defaults.

    Returns:
        Configured httpx.AsyncClient instance.
    """
    settings = get_settings()

    if timeout is None:
        timeout = float(settings.default_timeout)

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={
            "User-Agent": f"{settings.client_name}/{settings.server_version}",
            "Accept": "application/json",
            **(headers or {}),
        },
        limits=httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0,
        ),
        transport=transport,
    )


# Retry decorator for JSON-RPC posts
http_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(RETRYABLE_ERRORS),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
