"""Small async wrapper around a child process speaking line-delimited text."""

import asyncio
import logging
import os

from mcpbridge.mcp.errors import McpTransportError

logger = logging.getLogger(__name__)

# Largest single line accepted from the child (asyncio's default is 64 KiB)
LINE_LIMIT = 16 * 1024 * 1024


class ProcessHandle:
    """A running child process with piped stdin and stdout.

    stderr is inherited so the child's diagnostics reach the parent's stderr.
    """

    def __init__(self, process: asyncio.subprocess.Process, command: str):
        self._process = process
        self.command = command

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def stdin(self) -> asyncio.StreamWriter:
        if self._process.stdin is None:
            raise McpTransportError(f"Process '{self.command}' has no stdin pipe")
        return self._process.stdin

    @property
    def stdout(self) -> asyncio.StreamReader:
        if self._process.stdout is None:
            raise McpTransportError(f"Process '{self.command}' has no stdout pipe")
        return self._process.stdout

    async def write_line(self, line: str) -> None:
        """Write one line to the child's stdin and flush it."""
        try:
            self.stdin.write(line.encode("utf-8") + b"\n")
            await self.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise McpTransportError(f"Failed to write to process '{self.command}': {e}") from e

    async def read_line(self) -> str | None:
        """Read one line from the child's stdout, or None at end of stream."""
        try:
            data = await self.stdout.readline()
        except (ValueError, asyncio.LimitOverrunError) as e:
            raise McpTransportError(f"Line from process '{self.command}' too long: {e}") from e
        if not data:
            return None
        return data.decode("utf-8").rstrip("\r\n")

    def kill(self) -> None:
        if self._process.returncode is None:
            try:
                self._process.kill()
            except ProcessLookupError:
                pass

    async def wait(self) -> int:
        return await self._process.wait()


async def spawn(
    command: str,
    args: list[str] | None = None,
    env: dict[str, str] | None = None,
) -> ProcessHandle:
    """
    Start a child process with piped stdin and stdout.

    Args:
        command: Executable to run.
        args: Command-line arguments.
        env: Extra environment variables, layered over the current environment.

    Raises:
        McpTransportError: If the process cannot be started.
    """
    full_env = {**os.environ, **(env or {})}
    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *(args or []),
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            env=full_env,
            limit=LINE_LIMIT,
        )
    except OSError as e:
        raise McpTransportError(f"Failed to start process '{command}': {e}") from e

    logger.info(f"Started process '{command}' (pid {process.pid})")
    return ProcessHandle(process, command)
