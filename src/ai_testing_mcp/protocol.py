"""
JSON-RPC 2.0 method router shared by both transports.

Turns one decoded JSON-RPC message into one response dict. Transports own
framing (lines on stdio, request bodies over HTTP), notification handling
and status codes; everything about method semantics lives here so both
transports answer identically.
"""

import json
import logging
from typing import Any

from ai_testing_mcp.__version__ import __version__
from ai_testing_mcp.dispatcher import Dispatcher
from ai_testing_mcp.models import (
    JSONRPC_VERSION,
    MCP_VERSION,
    Failure,
    JSONRPCErrorCode,
    ToolCallRequest,
)
from ai_testing_mcp.registry import ToolRegistry

logger = logging.getLogger(__name__)

SERVER_NAME = "ai-testing-mcp"

# Session bring-up methods acknowledged with an empty result
ACK_METHODS = frozenset({"initialized", "notifications/initialized", "ping"})


def result_response(message_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": message_id, "result": result}


def error_response(message_id: Any, code: JSONRPCErrorCode, message: str) -> dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": message_id,
        "error": Failure(code, message).to_dict(),
    }


def parse_error_response(detail: str = "") -> dict[str, Any]:
    """Response for a message that is not valid JSON; the id is unknown."""
    message = f"Parse error: {detail}" if detail else "Parse error"
    return error_response(None, JSONRPCErrorCode.PARSE_ERROR, message)


def is_notification(message: Any) -> bool:
    """Return True for a JSON-RPC notification (a request object without an id)."""
    return isinstance(message, dict) and "id" not in message


def is_error_response(response: dict[str, Any]) -> bool:
    return "error" in response


class ProtocolHandler:
    """Routes JSON-RPC methods to registry discovery and tool dispatch.

    Methods:
    - initialize: Protocol version, capabilities and server info
    - initialized, notifications/initialized, ping: Empty acknowledgement
    - tools/list: Descriptors from the registry, in registry order
    - tools/call: Forwarded to the Dispatcher

    Attributes:
        registry: Tool registry advertised by tools/list
        dispatcher: Executes tools/call requests
        logger: Logger instance
    """

    def __init__(
        self,
        registry: ToolRegistry,
        dispatcher: Dispatcher | None = None,
        logger_instance: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.dispatcher = dispatcher or Dispatcher(registry)
        self.logger = logger_instance or logger

    async def handle_raw(self, raw: str | bytes) -> dict[str, Any]:
        """Decode one serialized message and handle it.

        Args:
            raw: Serialized JSON-RPC message.

        Returns:
            Response dict; a PARSE_ERROR response with ``id: null`` if raw is
            not valid JSON.
        """
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            self.logger.error(f"Invalid JSON: {e}")
            return parse_error_response(str(e))
        return await self.handle_message(message)

    async def handle_message(self, message: Any) -> dict[str, Any]:
        """Route a decoded JSON-RPC 2.0 message to its method.

        Args:
            message: Decoded message; anything other than an object with a
                string ``method`` is an invalid request.

        Returns:
            JSON-RPC 2.0 response dict echoing the request id (or null).

        Raises:
            No exceptions - errors returned in JSON-RPC error format.

        Example:
            >>> response = await handler.handle_message({
            ...     'jsonrpc': '2.0',
            ...     'id': 1,
            ...     'method': 'tools/list'
            ... })
            >>> len(response['result']['tools'])
            7
        """
        if not isinstance(message, dict):
            return error_response(
                None, JSONRPCErrorCode.INVALID_REQUEST, "Invalid request: expected a JSON object"
            )

        message_id = message.get("id")
        method = message.get("method")
        if not isinstance(method, str):
            return error_response(
                message_id, JSONRPCErrorCode.INVALID_REQUEST, "Invalid request: missing method"
            )

        if method == "initialize":
            return result_response(
                message_id,
                {
                    "protocolVersion": MCP_VERSION,
                    "capabilities": {"tools": {}},
                    "serverInfo": {"name": SERVER_NAME, "version": __version__},
                },
            )

        elif method in ACK_METHODS:
            return result_response(message_id, {})

        elif method == "tools/list":
            return result_response(
                message_id, {"tools": [d.to_dict() for d in self.registry.list_tools()]}
            )

        elif method == "tools/call":
            params = message.get("params")
            if not isinstance(params, dict):
                return error_response(
                    message_id, JSONRPCErrorCode.INVALID_PARAMS, "tools/call requires params"
                )
            request = ToolCallRequest(message_id, params.get("name"), params.get("arguments"))
            return await self._call_tool(request)

        else:
            return error_response(
                message_id, JSONRPCErrorCode.METHOD_NOT_FOUND, f"Method not found: {method}"
            )

    async def _call_tool(self, request: ToolCallRequest) -> dict[str, Any]:
        envelope = await self.dispatcher.dispatch(request.tool_name, request.arguments)
        if isinstance(envelope, Failure):
            return error_response(request.id, envelope.code, envelope.message)
        return result_response(request.id, envelope.result.to_dict())
