"""mcp-bridge CLI - inspect and serve MCP providers from the command line.

Example:
    # List prompts from the embedded provider
    mcp-bridge prompts-list

    # Fill a prompt
    mcp-bridge prompts-get text-qa/answer input="42" instruct="What is the meaning of life?"

    # Call a tool on a remote HTTP server
    mcp-bridge -s http://localhost:8080 tools-call echo message=hello

    # Serve the embedded provider over stdio
    mcp-bridge serve --transport stdio
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from mcpbridge.config.loader import Settings, get_settings
from mcpbridge.mcp.errors import McpError
from mcpbridge.mcp.provider import McpProvider
from mcpbridge.mcp.transport_stdio import McpServerStdio
from mcpbridge.providers.http import McpProviderHttp
from mcpbridge.providers.registry import ProviderRegistry
from mcpbridge.utils.logging import setup_logging

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def parse_key_values(pairs: list[str], parse_json: bool = False) -> dict[str, Any]:
    """Parse ``key=value`` arguments.

    With ``parse_json`` set, values that parse as JSON are decoded and all
    others are kept as strings.

    Raises:
        ValueError: If an argument has no ``=``.
    """
    result: dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Expected key=value, got '{pair}'")
        key, value = pair.split("=", 1)
        if parse_json:
            try:
                result[key] = json.loads(value)
            except json.JSONDecodeError:
                result[key] = value
        else:
            result[key] = value
    return result


def resolve_provider(args: argparse.Namespace, settings: Settings) -> McpProvider:
    """Build the provider named by ``--server``: an http(s) URL or a registry name.

    Raises:
        ValueError: If the name is not in the registry.
    """
    server = args.server
    if server.startswith(("http://", "https://")):
        return McpProviderHttp(server, settings=settings)

    if args.registry:
        registry = ProviderRegistry.load_from_file(args.registry, settings)
    else:
        registry = ProviderRegistry.from_settings(settings)

    provider = registry.get_provider(server)
    if provider is None:
        raise ValueError(f"Unknown server '{server}'. Available: {', '.join(registry.list_provider_names())}")
    return provider


def _dump(value: Any) -> Any:
    if isinstance(value, list):
        return [_dump(item) for item in value]
    if hasattr(value, "model_dump"):
        return value.model_dump(exclude_none=True)
    return value


def print_json(value: Any) -> None:
    print(json.dumps(_dump(value), indent=2, ensure_ascii=False))


# =============================================================================
# Commands
# =============================================================================


async def run_command(args: argparse.Namespace, provider: McpProvider) -> Any:
    """Run one inspection command against a provider and return its result."""
    async with provider:
        command = args.command
        if command == "prompts-list":
            return await provider.list_prompts()  # type: ignore[attr-defined]
        if command == "prompts-get":
            arguments = parse_key_values(args.arguments)
            return await provider.get_prompt(args.name, arguments)  # type: ignore[attr-defined]
        if command == "tools-list":
            return await provider.list_tools()  # type: ignore[attr-defined]
        if command == "tools-call":
            arguments = parse_key_values(args.arguments, parse_json=True)
            return await provider.call_tool(args.name, arguments)  # type: ignore[attr-defined]
        if command == "resources-list":
            return await provider.list_resources()  # type: ignore[attr-defined]
        if command == "resources-templates-list":
            return await provider.list_resource_templates()  # type: ignore[attr-defined]
        if command == "resources-read":
            return await provider.read_resource(args.uri)  # type: ignore[attr-defined]
    raise ValueError(f"Unknown command: {args.command}")


def serve(args: argparse.Namespace, provider: McpProvider, settings: Settings) -> int:
    """Serve a provider over stdio or HTTP until stopped."""
    if args.transport == "stdio":
        # stdout carries the protocol
        setup_logging(stream=sys.stderr, log_level=settings.log_level)
        asyncio.run(McpServerStdio(provider).start_server())
        return 0

    import uvicorn

    from mcpbridge.main import create_app

    setup_logging(stream=sys.stderr, log_level=settings.log_level)
    uvicorn.run(
        create_app(provider, close_provider=True),
        host=settings.host,
        port=args.port or settings.port,
    )
    return 0


# =============================================================================
# Main Entry Point
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-bridge",
        description="Inspect and serve MCP prompts, tools, and resources.",
    )
    parser.add_argument(
        "-s",
        "--server",
        default="embedded",
        help="Registry name of the provider, or an http(s) URL of an MCP server (default: embedded)",
    )
    parser.add_argument("-r", "--registry", help="Provider registry file (.yaml, .yml, or .json)")
    parser.add_argument("-p", "--prompt-library", help="Prompt library file or directory for embedded providers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("prompts-list", help="List prompts")
    prompts_get = subparsers.add_parser("prompts-get", help="Fill a prompt with arguments")
    prompts_get.add_argument("name", help="Prompt name")
    prompts_get.add_argument("arguments", nargs="*", metavar="key=value", help="Prompt arguments")

    subparsers.add_parser("tools-list", help="List tools")
    tools_call = subparsers.add_parser("tools-call", help="Call a tool")
    tools_call.add_argument("name", help="Tool name")
    tools_call.add_argument(
        "arguments", nargs="*", metavar="key=value", help="Tool arguments (values parsed as JSON when possible)"
    )

    subparsers.add_parser("resources-list", help="List resources")
    subparsers.add_parser("resources-templates-list", help="List resource templates")
    resources_read = subparsers.add_parser("resources-read", help="Read a resource")
    resources_read.add_argument("uri", help="Resource URI")

    serve_parser = subparsers.add_parser("serve", help="Serve the provider over stdio or HTTP")
    serve_parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    serve_parser.add_argument("--port", type=int, help="HTTP port (default from settings)")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    updates: dict[str, Any] = {}
    if args.verbose:
        updates["log_level"] = "DEBUG"
    if args.prompt_library:
        updates["prompt_library_path"] = args.prompt_library
    settings = get_settings().model_copy(update=updates)

    if args.command != "serve":
        setup_logging(stream=sys.stderr, log_level=settings.log_level)

    try:
        provider = resolve_provider(args, settings)
        if args.command == "serve":
            return serve(args, provider, settings)
        result = asyncio.run(run_command(args, provider))
    except (McpError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print_json(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
