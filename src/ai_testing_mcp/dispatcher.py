"""
Tool call dispatcher.

Resolves a tool name against the registry, decodes arguments into the tool's
typed record, runs the handler and wraps the outcome in a ProtocolEnvelope.
Every call produces exactly one envelope; no exception escapes ``dispatch``.
"""

import logging
from typing import Any

from ai_testing_mcp.errors import ArgumentValidationError, ToolExecutionError
from ai_testing_mcp.handlers import ToolContext
from ai_testing_mcp.models import (
    Failure,
    JSONRPCErrorCode,
    ProtocolEnvelope,
    Success,
    ToolCallResult,
    decode_arguments,
)
from ai_testing_mcp.registry import ToolRegistry, UnknownTool

logger = logging.getLogger(__name__)


class Dispatcher:
    """Routes tool calls to handlers and classifies their outcomes.

    Outcome mapping:
    - Unknown tool name: Failure(UNKNOWN_TOOL), no handler runs
    - Missing or malformed arguments: Failure(INVALID_PARAMS), no handler runs
    - ToolExecutionError from the handler: Success with an ``isError`` result
    - Any other exception: Failure(INTERNAL_ERROR), logged with traceback

    Attributes:
        registry: Tool registry to resolve names against
        context: Collaborators passed to every handler
        logger: Logger instance
    """

    def __init__(
        self,
        registry: ToolRegistry,
        context: ToolContext | None = None,
        logger_instance: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.context = context or ToolContext()
        self.logger = logger_instance or logger

    async def dispatch(self, tool_name: Any, arguments: Any) -> ProtocolEnvelope:
        """Execute one tool call.

        Args:
            tool_name: Requested tool name, unvalidated.
            arguments: Raw arguments object, unvalidated.

        Returns:
            Success with the tool result, or Failure with a code and a
            non-empty message.

        Example:
            >>> envelope = await dispatcher.dispatch("bogus", {})
            >>> envelope.code
            <JSONRPCErrorCode.UNKNOWN_TOOL: -32002>
        """
        tool = self.registry.resolve(tool_name)
        if isinstance(tool, UnknownTool):
            self.logger.warning(f"Unknown tool requested: {tool.name}")
            return Failure(JSONRPCErrorCode.UNKNOWN_TOOL, f"Unknown tool: {tool.name}")

        binding = self.registry.binding(tool)
        try:
            args = decode_arguments(binding.descriptor, binding.arguments_type, arguments)
        except ArgumentValidationError as e:
            return Failure(JSONRPCErrorCode.INVALID_PARAMS, f"Invalid arguments for {tool}: {e}")

        self.logger.info(f"Calling {tool}")
        try:
            result = await binding.handler(self.context, args)
        except ToolExecutionError as e:
            self.logger.warning(f"{tool} failed: {e}")
            return Success(ToolCallResult.text(f"Error executing {tool}: {e}", is_error=True))
        except Exception as e:
            self.logger.exception(f"Unexpected error in {tool}: {e}")
            return Failure(JSONRPCErrorCode.INTERNAL_ERROR, f"Internal error: {e!s}")

        return Success(result)
