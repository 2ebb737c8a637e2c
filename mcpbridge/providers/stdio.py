"""MCP provider that launches an external MCP server and talks to it over stdio."""

import asyncio
import logging
from typing import Any

from mcpbridge.config.loader import Settings
from mcpbridge.mcp.errors import McpTransportError
from mcpbridge.mcp.jsonrpc import decode_message, encode_message
from mcpbridge.mcp.models import JsonRpcRequest, JsonRpcResponse
from mcpbridge.providers.process import ProcessHandle, spawn
from mcpbridge.providers.remote import McpRemoteProvider, unwrap_response

logger = logging.getLogger(__name__)


class McpProviderStdio(McpRemoteProvider):
    """
    Remote provider backed by a child process speaking MCP on stdin/stdout.

    The process is started on first use. Only one request is in flight at a
    time; concurrent callers wait on a lock. Responses are matched to
    requests by id, so notifications the server sends in between are
    skipped rather than mistaken for the answer.
    """

    def __init__(
        self,
        command: str,
        args: list[str] | None = None,
        env: dict[str, str] | None = None,
        settings: Settings | None = None,
    ):
        super().__init__(settings)
        self.command = command
        self.args = list(args or [])
        self.env = dict(env or {})
        self._process: ProcessHandle | None = None
        self._lock = asyncio.Lock()
        self._next_id = 0
        self._closed = False

    def __str__(self) -> str:
        return f"McpServer-Stdio({self.command})"

    async def _start_process(self) -> ProcessHandle:
        if self._closed:
            raise McpTransportError(f"{self} is closed")
        if self._process is None:
            self._process = await spawn(self.command, self.args, self.env)
        return self._process

    async def _send_request(self, method: str, params: dict[str, Any] | None = None) -> Any:
        async with self._lock:
            process = await self._start_process()
            self._next_id += 1
            request = JsonRpcRequest(id=self._next_id, method=method, params=params)
            await process.write_line(encode_message(request))
            response = await self._read_response(process, request.id)
        return unwrap_response(response)

    async def _send_notification(self, method: str, params: dict[str, Any] | None = None) -> None:
        async with self._lock:
            process = await self._start_process()
            await process.write_line(encode_message(JsonRpcRequest(method=method, params=params)))

    async def _read_response(self, process: ProcessHandle, request_id: int | str | None) -> JsonRpcResponse:
        """Read lines until the response to ``request_id`` arrives."""
        while True:
            line = await process.read_line()
            if line is None:
                raise McpTransportError(f"No response from {self}: process closed its output")
            if not line.strip():
                continue

            message = decode_message(line)
            if isinstance(message, JsonRpcRequest):
                logger.info(f"Received {message.method} from {self} while waiting for response {request_id}")
                continue
            if message.id is None and message.error is not None:
                logger.warning(f"Received error without an id from {self} while waiting for response {request_id}")
                return message
            if message.id != request_id:
                logger.warning(f"Skipping stale response {message.id} from {self}, waiting for {request_id}")
                continue
            return message

    async def close(self) -> None:
        """Stop the child process. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        process, self._process = self._process, None
        if process is None:
            return

        try:
            process.stdin.close()
            process.kill()
            await process.wait()
            logger.info(f"Closed {self}")
        except Exception as e:
            logger.warning(f"Error while closing {self}: {e}")
