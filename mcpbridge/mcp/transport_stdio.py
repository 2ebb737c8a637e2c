"""STDIO transport for serving MCP.

Reads newline-delimited JSON-RPC messages from an input stream and writes
responses to an output stream. One request is fully handled before the next
line is read. Logging must go to stderr so it cannot corrupt the protocol
stream.
"""

import asyncio
import logging
import sys
from typing import TextIO

from mcpbridge.mcp.handlers import ProtocolHandler
from mcpbridge.mcp.jsonrpc import JsonRpcProcessor
from mcpbridge.mcp.models import JsonRpcResponse
from mcpbridge.mcp.provider import McpProvider

logger = logging.getLogger(__name__)


class StdioServer:
    """Serve one MCP connection over a pair of text streams."""

    def __init__(self, processor: JsonRpcProcessor):
        self.processor = processor

    async def read_message(self, stream: TextIO) -> str | None:
        """Read the next non-blank line.

        Returns:
            Message string (stripped), or None on EOF.
        """
        while True:
            line = await asyncio.to_thread(stream.readline)
            if not line:  # EOF
                return None

            line = line.strip()
            if line:  # Skip empty lines
                return line

    def write_message(self, out: TextIO, response: JsonRpcResponse) -> None:
        out.write(self.processor.serialize_response(response) + "\n")
        out.flush()

    async def serve(self, stream: TextIO | None = None, out: TextIO | None = None) -> None:
        """Run the read loop until EOF or a notifications/close message."""
        stream = stream or sys.stdin
        out = out or sys.stdout
        logger.info("Stdio server listening")

        while True:
            line = await self.read_message(stream)
            if line is None:
                logger.info("Input closed, stopping stdio server")
                return

            request, parse_error = self.processor.parse_request(line)
            if parse_error is not None:
                logger.warning(f"Could not parse message: {parse_error.error.message}")
                self.write_message(out, parse_error)
                continue

            if self.processor.is_close_request(request):  # type: ignore[arg-type]
                logger.info("Received notifications/close, stopping stdio server")
                return

            response = await self.processor.process_request(request)  # type: ignore[arg-type]
            if response is not None:
                self.write_message(out, response)


class McpServerStdio:
    """MCP server over stdio backed by a provider."""

    def __init__(self, provider: McpProvider):
        self.provider = provider
        self.handler = ProtocolHandler(provider)
        self.server = StdioServer(JsonRpcProcessor(self.handler))

    async def start_server(self, stream: TextIO | None = None, out: TextIO | None = None) -> None:
        """Serve until the client disconnects or asks to close, then close the provider."""
        try:
            await self.server.serve(stream, out)
        finally:
            await self.close()

    async def close(self) -> None:
        try:
            await self.provider.close()
        except Exception:
            logger.warning(f"Error closing provider {self.provider}", exc_info=True)
