"""FastAPI MCP Server - HTTP entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from mcpbridge import __version__
from mcpbridge.config.loader import get_settings
from mcpbridge.mcp.errors import PARSE_ERROR
from mcpbridge.mcp.handlers import PROTOCOL_VERSION, ProtocolHandler
from mcpbridge.mcp.jsonrpc import JsonRpcProcessor, error_response
from mcpbridge.mcp.provider import McpProvider
from mcpbridge.providers.registry import ProviderRegistry
from mcpbridge.utils.logging import setup_logging, set_request_id, get_logger

logger = logging.getLogger(__name__)


def _attach_provider(app: FastAPI, provider: McpProvider) -> None:
    app.state.provider = provider
    app.state.processor = JsonRpcProcessor(ProtocolHandler(provider))


def _provider_from_settings() -> McpProvider:
    settings = get_settings()
    registry = ProviderRegistry.from_settings(settings)
    provider = registry.get_provider(settings.provider)
    if provider is None:
        raise ValueError(
            f"Unknown provider '{settings.provider}'. "
            f"Available: {', '.join(registry.list_provider_names())}"
        )
    return provider


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    setup_logging()
    log = get_logger("startup")

    settings = get_settings()
    if getattr(app.state, "provider", None) is None:
        _attach_provider(app, _provider_from_settings())
        app.state.owns_provider = True

    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        provider=str(app.state.provider),
    )

    yield

    # Shutdown
    log.info("Shutting down MCP server")
    if app.state.owns_provider:
        try:
            await app.state.provider.close()
        except Exception:
            log.warning("Error closing provider", exc_info=True)


def create_app(provider: McpProvider | None = None, close_provider: bool = False) -> FastAPI:
    """
    Build the HTTP server.

    Args:
        provider: Provider to serve. When omitted, the provider named by
            settings is built from the provider registry at startup.
        close_provider: Close a passed-in provider on shutdown.
    """
    app = FastAPI(
        title="MCP Bridge",
        description="MCP server exposing prompts, tools, and resources over JSON-RPC 2.0",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.provider = None
    app.state.owns_provider = close_provider
    if provider is not None:
        _attach_provider(app, provider)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allow all origins for MCP compatibility
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id_middleware(request: Request, call_next):
        """Add request ID to all requests."""
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # Health and Info Endpoints
    # =========================================================================

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        """Health check endpoint."""
        return "OK"

    @app.get("/")
    async def root(request: Request) -> dict:
        """Root endpoint with server info."""
        settings = get_settings()
        return {
            "name": settings.server_name,
            "version": settings.server_version,
            "description": "MCP server exposing prompts, tools, and resources",
            "provider": str(request.app.state.provider),
            "endpoints": {
                "health": "/health",
                "mcp": "/mcp",
                "docs": "/docs",
            },
            "mcp_protocol_version": PROTOCOL_VERSION,
        }

    # =========================================================================
    # MCP Endpoint
    # =========================================================================

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> Response:
        """
        JSON-RPC endpoint.

        JSON-RPC errors, including parse errors, are returned with HTTP 200.
        Notifications are acknowledged with HTTP 202 and no body.
        """
        processor: JsonRpcProcessor = request.app.state.processor
        body = await request.body()
        if not body.strip():
            return JSONResponse(content=error_response(None, PARSE_ERROR, "Parse error: empty request").model_dump())

        rpc_request, parse_error = processor.parse_request(body)
        if parse_error is not None:
            logger.warning(f"Could not parse request: {parse_error.error.message}")
            return JSONResponse(content=parse_error.model_dump())

        if processor.is_close_request(rpc_request):  # type: ignore[arg-type]
            # The server process outlives any one HTTP client
            logger.info("Received notifications/close over HTTP, ignoring")
            return Response(status_code=202)

        response = await processor.process_request(rpc_request)  # type: ignore[arg-type]
        if response is None:
            return Response(status_code=202)
        return JSONResponse(content=response.model_dump())

    return app


app = create_app()


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "mcpbridge.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
