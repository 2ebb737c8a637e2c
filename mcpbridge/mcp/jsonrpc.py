"""JSON-RPC 2.0 message encoding, decoding, and processing."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from mcpbridge.mcp.errors import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    McpProtocolError,
    make_error_data,
)
from mcpbridge.mcp.handlers import McpMethod, ProtocolHandler
from mcpbridge.mcp.models import JsonRpcError, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)

JsonRpcMessage = JsonRpcRequest | JsonRpcResponse


# =============================================================================
# Codec
# =============================================================================


def _load_object(raw_data: str | bytes) -> dict[str, Any]:
    if isinstance(raw_data, bytes):
        raw_data = raw_data.decode("utf-8")
    data = json.loads(raw_data)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def _recover_id(data: dict[str, Any]) -> int | str | None:
    request_id = data.get("id")
    if isinstance(request_id, (int, str)) and not isinstance(request_id, bool):
        return request_id
    return None


def parse_request(raw_data: str | bytes) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
    """
    Parse a JSON-RPC request from raw data.

    Returns (request, error_response) tuple. One will be None. A well-formed
    JSON object with an invalid envelope keeps its id in the error response.
    """
    try:
        data = _load_object(raw_data)
    except (ValueError, UnicodeDecodeError) as e:
        return None, error_response(None, PARSE_ERROR, f"Parse error: {e}")

    try:
        return JsonRpcRequest(**data), None
    except (ValidationError, TypeError) as e:
        return None, error_response(_recover_id(data), PARSE_ERROR, f"Parse error: invalid JSON-RPC request: {e}")


def decode_message(raw_data: str | bytes) -> JsonRpcMessage:
    """Decode any JSON-RPC message: request, notification, result, or error.

    Raises:
        McpProtocolError: If the data is not a JSON-RPC message.
    """
    try:
        data = _load_object(raw_data)
        if "method" in data:
            return JsonRpcRequest(**data)
        if "result" in data or "error" in data:
            return JsonRpcResponse(**data)
    except (ValueError, UnicodeDecodeError, ValidationError, TypeError) as e:
        raise McpProtocolError(f"Invalid JSON-RPC message: {e}") from e
    raise McpProtocolError("Invalid JSON-RPC message: no method, result, or error")


def encode_message(message: JsonRpcMessage) -> str:
    """Serialize a JSON-RPC message to a single-line JSON string."""
    return json.dumps(message.model_dump(), ensure_ascii=False)


def result_response(id: int | str | None, result: Any) -> JsonRpcResponse:
    return JsonRpcResponse(id=id, result=result)


def error_response(id: int | str | None, code: int, message: str | None = None) -> JsonRpcResponse:
    return JsonRpcResponse(id=id, error=JsonRpcError(**make_error_data(code, message)))


# =============================================================================
# Processor
# =============================================================================


class JsonRpcProcessor:
    """Turn JSON-RPC messages into responses using a ProtocolHandler.

    Shared by the stdio and HTTP servers; knows nothing about the transport.
    """

    def __init__(self, handler: ProtocolHandler):
        self.handler = handler

    def parse_request(self, raw_data: str | bytes) -> tuple[JsonRpcRequest | None, JsonRpcResponse | None]:
        return parse_request(raw_data)

    @staticmethod
    def is_close_request(request: JsonRpcRequest) -> bool:
        return request.method == McpMethod.NOTIFICATIONS_CLOSE.value

    async def process_request(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """
        Process a validated JSON-RPC request.

        Returns None for notifications, which never get a response.
        """
        is_notification = request.is_notification

        try:
            result = await self.handler.handle_request(request.method, request.params)
        except Exception as e:
            logger.exception(f"Error handling method {request.method}")
            if is_notification:
                return None
            return error_response(request.id, INTERNAL_ERROR, f"Internal error: {str(e) or type(e).__name__}")

        if is_notification:
            return None

        if result is None:
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")
        return result_response(request.id, result)

    async def handle_message(self, raw_data: str | bytes) -> JsonRpcResponse | None:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns a response or None for notifications.
        """
        request, parse_error = self.parse_request(raw_data)

        if parse_error is not None:
            return parse_error

        return await self.process_request(request)  # type: ignore[arg-type]

    def serialize_response(self, response: JsonRpcResponse) -> str:
        """Serialize a JSON-RPC response to JSON string."""
        return encode_message(response)
