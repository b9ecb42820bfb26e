"""
Exception taxonomy for the AI Testing MCP server.

Three kinds of failure reach a caller, and each is reported differently:

- Protocol and dispatch errors (bad JSON, unknown method or tool, invalid
  arguments) become JSON-RPC error envelopes.
- Execution errors (``ToolExecutionError``) mean the tool ran but its
  collaborator failed; they become tool results flagged ``isError``.
- Anything else raised inside a handler is unexpected and is downgraded to an
  INTERNAL_ERROR envelope at the dispatcher boundary.
"""


class AiTestingMCPError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(AiTestingMCPError):
    """Raised when server configuration is invalid or inconsistent."""


class ArgumentValidationError(AiTestingMCPError):
    """Raised when tool arguments do not match the tool's input schema.

    Attributes:
        field: Name of the offending argument, or None when the arguments
            object itself is malformed.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ToolExecutionError(AiTestingMCPError):
    """Raised by a tool handler when its underlying operation fails.

    Examples are a missing source file, an unsupported file type or a path
    outside the configured workspace. The dispatcher reports these as tool
    results rather than protocol errors.
    """
