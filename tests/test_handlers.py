"""Tests for MCP method dispatch and the initialize handshake."""

import pytest

from mcpbridge.mcp.handlers import (
    PROTOCOL_VERSION,
    SUPPORTED_PROTOCOL_VERSIONS,
    McpMethod,
    ProtocolHandler,
    negotiate_protocol_version,
    parse_tool_arguments,
)
from mcpbridge.mcp.models import (
    McpCapabilities,
    McpCapability,
    McpPrompt,
    McpPromptResponse,
    PromptGetParams,
    ToolCallParams,
)
from mcpbridge.mcp.provider import McpProvider


class PromptsOnlyProvider(McpProvider):
    """A provider implementing only the prompts capability group."""

    async def initialize(self) -> None:
        pass

    async def get_capabilities(self) -> McpCapabilities:
        return McpCapabilities(prompts=McpCapability())

    async def list_prompts(self) -> list[McpPrompt]:
        return [McpPrompt(name="only")]

    async def get_prompt(self, name, args=None) -> McpPromptResponse:
        return McpPromptResponse(description=name)

    async def close(self) -> None:
        pass


class TestMcpMethod:
    def test_lookup(self):
        assert McpMethod.lookup("tools/call") is McpMethod.TOOLS_CALL
        assert McpMethod.lookup("resources/templates/list") is McpMethod.RESOURCES_TEMPLATES_LIST
        assert McpMethod.lookup("tools/delete") is None
        assert McpMethod.lookup(None) is None


class TestNegotiation:
    @pytest.mark.parametrize("version", SUPPORTED_PROTOCOL_VERSIONS)
    def test_supported_version_is_echoed(self, version):
        assert negotiate_protocol_version(version) == version

    @pytest.mark.parametrize("version", [None, "", "2023-01-01"])
    def test_other_versions_get_latest(self, version):
        assert negotiate_protocol_version(version) == PROTOCOL_VERSION


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_method_returns_none(self, handler: ProtocolHandler):
        assert await handler.handle_request("invalid/method", None) is None
        assert await handler.handle_request(None, None) is None

    @pytest.mark.asyncio
    async def test_missing_capability_returns_none(self):
        handler = ProtocolHandler(PromptsOnlyProvider())
        assert await handler.handle_request("tools/list", {}) is None
        assert await handler.handle_request("resources/read", {"uri": "x"}) is None
        assert (await handler.handle_request("prompts/list", {}))["prompts"] == [{"name": "only", "arguments": []}]

    @pytest.mark.asyncio
    async def test_initialize_records_session(self, handler: ProtocolHandler):
        result = await handler.handle_request(
            "initialize",
            {"protocolVersion": "2025-03-26", "clientInfo": {"name": "tester", "version": "9"}, "capabilities": {"x": {}}},
        )
        assert result["protocolVersion"] == "2025-03-26"
        assert handler.session.protocol_version == "2025-03-26"
        assert handler.session.client_info.name == "tester"
        assert handler.session.client_capabilities == {"x": {}}
        assert handler.session.initialized is False

        await handler.handle_request("notifications/initialized", None)
        assert handler.session.initialized is True

    @pytest.mark.asyncio
    async def test_initialize_tolerates_bad_params(self, handler: ProtocolHandler):
        result = await handler.handle_request("initialize", {"clientInfo": "not an object"})
        assert result["protocolVersion"] == PROTOCOL_VERSION

    @pytest.mark.asyncio
    async def test_requests_before_initialize_are_served(self, handler: ProtocolHandler):
        result = await handler.handle_request("tools/list", None)
        assert len(result["tools"]) == 3

    @pytest.mark.asyncio
    async def test_prompt_arguments_are_stringified(self, handler: ProtocolHandler):
        result = await handler.handle_request(
            "prompts/get", {"name": "text-qa/answer", "arguments": {"input": 42, "instruct": "Why?"}}
        )
        assert "42" in result["messages"][0]["content"]["text"]

    @pytest.mark.asyncio
    async def test_prompts_get_requires_name(self, handler: ProtocolHandler):
        with pytest.raises(ValueError, match="name"):
            await handler.handle_request("prompts/get", {})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params", [{"name": "   "}, {"name": 7}, {"name": "text-qa/answer", "arguments": ["x"]}])
    async def test_prompts_get_rejects_bad_params(self, handler: ProtocolHandler, params):
        with pytest.raises(ValueError, match="Invalid params for prompts/get"):
            await handler.handle_request("prompts/get", params)

    @pytest.mark.asyncio
    async def test_resources_read_requires_uri(self, handler: ProtocolHandler):
        with pytest.raises(ValueError, match="uri"):
            await handler.handle_request("resources/read", {})

    @pytest.mark.asyncio
    async def test_resources_read_rejects_blank_uri(self, handler: ProtocolHandler):
        with pytest.raises(ValueError, match="blank"):
            await handler.handle_request("resources/read", {"uri": " "})

    @pytest.mark.asyncio
    async def test_tools_call_without_name_is_tool_error(self, handler: ProtocolHandler):
        result = await handler.handle_request("tools/call", {"arguments": {}})
        assert result["isError"] is True

    @pytest.mark.asyncio
    async def test_tools_call_with_blank_name_is_tool_error(self, handler: ProtocolHandler):
        result = await handler.handle_request("tools/call", {"name": "  ", "arguments": {"message": "hi"}})
        assert result["isError"] is True
        assert "'name' is required" in result["content"][0]["text"]

    @pytest.mark.asyncio
    async def test_tools_call_with_array_arguments_is_tool_error(self, handler: ProtocolHandler):
        result = await handler.handle_request("tools/call", {"name": "echo", "arguments": [1, 2]})
        assert result["isError"] is True
        assert "Invalid tool arguments" in result["content"][0]["text"]


class TestParamsModels:
    def test_prompt_arguments_as_strings(self):
        params = PromptGetParams(name="p", arguments={"a": "x", "n": 3, "obj": {"k": [1]}})
        assert params.string_arguments() == {"a": "x", "n": "3", "obj": '{"k": [1]}'}

    def test_prompt_arguments_default_to_empty(self):
        assert PromptGetParams(name="p", arguments=None).string_arguments() == {}

    def test_tool_arguments_stay_raw(self):
        assert ToolCallParams(name="echo", arguments='{"message": "hi"}').arguments == '{"message": "hi"}'


class TestParseToolArguments:
    def test_none_is_empty(self):
        assert parse_tool_arguments(None) == {}

    def test_dict_passes_through(self):
        assert parse_tool_arguments({"a": 1}) == {"a": 1}

    def test_json_string(self):
        assert parse_tool_arguments('{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("raw", ["{bad", "[1, 2]", 5, ["a"]])
    def test_invalid_arguments(self, raw):
        with pytest.raises(ValueError):
            parse_tool_arguments(raw)
