"""Tests for the stdio process provider against a real child process."""

import asyncio
import sys
from types import SimpleNamespace

import pytest

from mcpbridge.mcp.errors import McpProtocolError, McpRemoteError, McpTransportError
from mcpbridge.providers.process import ProcessHandle
from mcpbridge.providers.stdio import McpProviderStdio


@pytest.fixture
async def stdio_provider(echo_server_command):
    command, args = echo_server_command
    provider = McpProviderStdio(command, args)
    yield provider
    await provider.close()


class TestHandshake:
    @pytest.mark.asyncio
    async def test_process_starts_lazily(self, echo_server_command):
        command, args = echo_server_command
        provider = McpProviderStdio(command, args)
        assert provider._process is None
        await provider.close()

    @pytest.mark.asyncio
    async def test_capabilities_come_from_server(self, stdio_provider):
        capabilities = await stdio_provider.get_capabilities()
        assert capabilities.prompts is not None
        assert capabilities.tools.listChanged is True
        assert capabilities.resources is None
        assert stdio_provider.server_info.name == "pytest-mcp-echo"
        assert stdio_provider.protocol_version == "2024-11-05"

    @pytest.mark.asyncio
    async def test_handshake_happens_once(self, stdio_provider):
        await stdio_provider.list_tools()
        await stdio_provider.list_prompts()
        await stdio_provider.initialize()

        stats = (await stdio_provider.call_tool("stats")).structuredContent
        assert stats["initialize"] == 1
        assert stats["initialized"] == 1
        assert stats["methods"][:2] == ["initialize", "notifications/initialized"]

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_handshake(self, stdio_provider):
        results = await asyncio.gather(*(stdio_provider.call_tool("echo", {"text": str(i)}) for i in range(5)))
        assert sorted(r.structuredContent["text"] for r in results) == ["0", "1", "2", "3", "4"]

        stats = (await stdio_provider.call_tool("stats")).structuredContent
        assert stats["initialize"] == 1


class TestOperations:
    @pytest.mark.asyncio
    async def test_list_and_get_prompt(self, stdio_provider):
        prompts = await stdio_provider.list_prompts()
        assert [p.name for p in prompts] == ["greet"]

        response = await stdio_provider.get_prompt("greet", {"who": "world"})
        assert response.messages[0].content.text == "Hello, world!"

    @pytest.mark.asyncio
    async def test_get_tool(self, stdio_provider):
        assert (await stdio_provider.get_tool("echo")).name == "echo"
        assert await stdio_provider.get_tool("missing") is None

    @pytest.mark.asyncio
    async def test_interleaved_notification_and_stale_response_are_skipped(self, stdio_provider):
        response = await stdio_provider.call_tool("echo", {"text": "hi"})
        assert response.text == "echo:hi"
        assert response.isError is False

    @pytest.mark.asyncio
    async def test_tool_level_error_is_a_result(self, stdio_provider):
        response = await stdio_provider.call_tool("unknown")
        assert response.isError is True

    @pytest.mark.asyncio
    async def test_resources(self, stdio_provider):
        assert [r.uri for r in await stdio_provider.list_resources()] == ["mem://note"]
        assert [t.uriTemplate for t in await stdio_provider.list_resource_templates()] == ["mem://{name}"]
        assert (await stdio_provider.read_resource("mem://note")).contents[0].text == "remembered"


class TestFailures:
    @pytest.mark.asyncio
    async def test_error_response_raises_remote_error(self, stdio_provider):
        with pytest.raises(McpRemoteError) as excinfo:
            await stdio_provider.call_tool("fail")
        assert str(excinfo.value) == "Tool exploded"
        assert excinfo.value.code == -32603

    @pytest.mark.asyncio
    async def test_error_without_id_raises_remote_error(self, stdio_provider):
        with pytest.raises(McpRemoteError) as excinfo:
            await asyncio.wait_for(stdio_provider.call_tool("null_id_error"), timeout=10)
        assert excinfo.value.code == -32700

        result = await asyncio.wait_for(stdio_provider.call_tool("echo", {"text": "still here"}), timeout=10)
        assert result.text == "echo:still here"

    @pytest.mark.asyncio
    async def test_missing_result_raises_protocol_error(self, stdio_provider):
        with pytest.raises(McpProtocolError):
            await stdio_provider.call_tool("no_result")

    @pytest.mark.asyncio
    async def test_eof_raises_transport_error(self, stdio_provider):
        with pytest.raises(McpTransportError):
            await stdio_provider.call_tool("exit")

    @pytest.mark.asyncio
    async def test_spawn_failure_raises_transport_error(self):
        provider = McpProviderStdio("/nonexistent/mcp-server-binary")
        with pytest.raises(McpTransportError):
            await provider.list_tools()
        await provider.close()

    @pytest.mark.asyncio
    async def test_garbage_output_raises_protocol_error(self):
        provider = McpProviderStdio(
            sys.executable, ["-c", "import sys; sys.stdin.readline(); print('hello there', flush=True)"]
        )
        with pytest.raises(McpProtocolError):
            await provider.initialize()
        await provider.close()


class TestClose:
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, stdio_provider):
        await stdio_provider.list_tools()
        await stdio_provider.close()
        await stdio_provider.close()

    @pytest.mark.asyncio
    async def test_use_after_close_raises_transport_error(self, stdio_provider):
        await stdio_provider.list_tools()
        await stdio_provider.close()
        with pytest.raises(McpTransportError):
            await stdio_provider.call_tool("echo", {"text": "x"})

    @pytest.mark.asyncio
    async def test_async_context_manager(self, echo_server_command):
        command, args = echo_server_command
        async with McpProviderStdio(command, args) as provider:
            assert await provider.get_tool("echo") is not None
        assert provider._process is None


class TestProcessHandle:
    @pytest.mark.asyncio
    async def test_missing_pipes_raise_transport_error(self):
        handle = ProcessHandle(SimpleNamespace(stdin=None, stdout=None, pid=1, returncode=None), "no-pipes")
        with pytest.raises(McpTransportError, match="no stdin pipe"):
            await handle.write_line("{}")
        with pytest.raises(McpTransportError, match="no stdout pipe"):
            await handle.read_line()
