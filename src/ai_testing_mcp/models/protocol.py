"""
Protocol models for JSON-RPC 2.0 tool dispatch.

Defines error codes, tool descriptors, tool results and the envelope that
every dispatch produces. All models are immutable; descriptors are built once
at import time and shared by both transports.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal, TypeAlias

# MCP protocol version advertised by initialize
MCP_VERSION = "2024-11-05"

JSONRPC_VERSION = "2.0"


class JSONRPCErrorCode(Enum):
    """JSON-RPC 2.0 error codes used in error envelopes.

    Standard codes per the JSON-RPC 2.0 specification, plus server-defined
    codes in the reserved -32000..-32099 range.

    Attributes:
        PARSE_ERROR: Invalid JSON received (-32700).
        INVALID_REQUEST: JSON is not a valid request object (-32600).
        METHOD_NOT_FOUND: Method does not exist (-32601).
        INVALID_PARAMS: Tool arguments missing or malformed (-32602).
        INTERNAL_ERROR: Unexpected exception inside a handler (-32603).
        UNAUTHORIZED: Bearer token missing or wrong (-32001).
        UNKNOWN_TOOL: Tool name not present in the registry (-32002).
    """

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    UNAUTHORIZED = -32001
    UNKNOWN_TOOL = -32002


@dataclass(frozen=True)
class ParamSpec:
    """Single named parameter in a tool's input schema.

    Attributes:
        name: Argument name as sent by the caller (camelCase on the wire).
        description: Human-readable description shown during discovery.
        required: Whether the argument must be present.
        type: JSON type tag. All current tools take strings.
    """

    name: str
    description: str
    required: bool = False
    type: Literal["string", "boolean", "integer", "object"] = "string"


@dataclass(frozen=True)
class ToolDescriptor:
    """Discovery metadata for one tool.

    Attributes:
        name: Unique, stable tool identifier.
        description: One-line summary of what the tool does.
        params: Ordered parameter specifications.
    """

    name: str
    description: str
    params: tuple[ParamSpec, ...] = ()

    @property
    def required(self) -> list[str]:
        """Names of required parameters, in declaration order."""
        return [p.name for p in self.params if p.required]

    @property
    def input_schema(self) -> dict[str, Any]:
        """Render the parameters as a JSON Schema object.

        Returns:
            Dict with ``type``, ``properties`` and ``required`` keys, matching
            the ``inputSchema`` shape MCP clients expect.

        Example:
            >>> d = ToolDescriptor("t", "d", (ParamSpec("path", "A path", True),))
            >>> d.input_schema["required"]
            ['path']
        """
        return {
            "type": "object",
            "properties": {
                p.name: {"type": p.type, "description": p.description} for p in self.params
            },
            "required": self.required,
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize for a ``tools/list`` response."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass(frozen=True)
class TextContent:
    """Single text content block of a tool result."""

    text: str
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolCallResult:
    """Successful tool output.

    Always carries exactly one text block. ``is_error`` marks results whose
    payload reports an execution failure (the tool ran, the operation did not
    succeed); the envelope is still a success.
    """

    content: tuple[TextContent, ...]
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolCallResult":
        """Build a result from plain text."""
        return cls(content=(TextContent(text),), is_error=is_error)

    @classmethod
    def json(cls, payload: Any, is_error: bool = False) -> "ToolCallResult":
        """Build a result whose text is the payload as indented JSON."""
        return cls.text(json.dumps(payload, indent=2), is_error=is_error)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"content": [c.to_dict() for c in self.content]}
        if self.is_error:
            result["isError"] = True
        return result


@dataclass(frozen=True)
class ToolCallRequest:
    """Inbound tool call, scoped to a single request.

    Attributes:
        id: Correlation token echoed in the response; None for notifications.
        tool_name: Requested tool, not yet resolved against the registry.
        arguments: Raw argument mapping, not yet validated.
    """

    id: Any
    tool_name: Any
    arguments: Any = field(default=None)


@dataclass(frozen=True)
class Success:
    """Envelope for a dispatch that produced a tool result."""

    result: ToolCallResult


@dataclass(frozen=True)
class Failure:
    """Envelope for a dispatch that could not run the tool."""

    code: JSONRPCErrorCode
    message: str

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Failure envelopes require a message")

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message}


ProtocolEnvelope: TypeAlias = Success | Failure
