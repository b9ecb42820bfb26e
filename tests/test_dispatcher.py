"""Tests for the tool call dispatcher."""

from typing import Any

import pytest

from ai_testing_mcp.dispatcher import Dispatcher
from ai_testing_mcp.errors import ToolExecutionError
from ai_testing_mcp.handlers import ToolContext
from ai_testing_mcp.models import (
    Failure,
    JSONRPCErrorCode,
    ParamSpec,
    Success,
    SuggestFixesArgs,
    ToolCallResult,
    ToolDescriptor,
)
from ai_testing_mcp.registry import REGISTRY, ToolBinding, ToolName, ToolRegistry
from tests.mock_filesystem import MockFilesystemAdapter


def _registry_with(handler: Any) -> ToolRegistry:
    """Registry holding suggest_fixes bound to a custom handler."""
    descriptor = ToolDescriptor(
        ToolName.SUGGEST_FIXES,
        "Test double",
        (ParamSpec("failureOutput", "Output", required=True),),
    )
    return ToolRegistry((ToolBinding(descriptor, SuggestFixesArgs, handler),))


@pytest.fixture
def dispatcher() -> Dispatcher:
    """Dispatcher over the real registry and an empty in-memory filesystem."""
    return Dispatcher(REGISTRY, ToolContext(fs=MockFilesystemAdapter()))


class TestDispatch:
    """Tests for Dispatcher.dispatch outcome mapping."""

    @pytest.mark.asyncio
    async def test_success(self, dispatcher: Dispatcher) -> None:
        """Verify a successful call yields a Success envelope."""
        envelope = await dispatcher.dispatch(
            "suggest_fixes", {"failureOutput": "SyntaxError: bad"}
        )
        assert isinstance(envelope, Success)
        assert envelope.result.is_error is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("name", "message"),
        [("bogus", "Unknown tool: bogus"), (7, "Unknown tool: 7")],
        ids=["string", "number"],
    )
    async def test_unknown_tool(self, dispatcher: Dispatcher, name: object, message: str) -> None:
        """Verify unknown names yield UNKNOWN_TOOL with the name in the message."""
        envelope = await dispatcher.dispatch(name, {})
        assert envelope == Failure(JSONRPCErrorCode.UNKNOWN_TOOL, message)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "arguments",
        [None, {}, {"projectPath": 1}, "projectPath=."],
        ids=["absent", "missing_field", "wrong_type", "not_object"],
    )
    async def test_invalid_arguments(self, dispatcher: Dispatcher, arguments: object) -> None:
        """Verify malformed arguments yield INVALID_PARAMS naming the tool."""
        envelope = await dispatcher.dispatch("run_tests", arguments)
        assert isinstance(envelope, Failure)
        assert envelope.code is JSONRPCErrorCode.INVALID_PARAMS
        assert envelope.message.startswith("Invalid arguments for run_tests: ")

    @pytest.mark.asyncio
    async def test_handler_not_run_for_invalid_arguments(self) -> None:
        """Verify the handler is skipped when arguments do not validate."""
        calls: list[Any] = []

        async def handler(ctx: ToolContext, args: SuggestFixesArgs) -> ToolCallResult:
            calls.append(args)
            return ToolCallResult.text("ran")

        dispatcher = Dispatcher(_registry_with(handler))
        await dispatcher.dispatch("suggest_fixes", {"failureOutput": None})
        assert calls == []

        await dispatcher.dispatch("suggest_fixes", {"failureOutput": "x"})
        assert calls == [SuggestFixesArgs("x")]

    @pytest.mark.asyncio
    async def test_execution_error_is_error_result(self, dispatcher: Dispatcher) -> None:
        """Verify ToolExecutionError becomes a Success carrying isError."""
        envelope = await dispatcher.dispatch("analyze_codebase", {"projectPath": "/missing"})
        assert isinstance(envelope, Success)
        assert envelope.result.is_error is True
        assert envelope.result.content[0].text.startswith("Error executing analyze_codebase: ")

    @pytest.mark.asyncio
    async def test_custom_execution_error(self) -> None:
        """Verify the error message is carried into the result text."""

        async def handler(ctx: ToolContext, args: SuggestFixesArgs) -> ToolCallResult:
            raise ToolExecutionError("runner unavailable")

        envelope = await Dispatcher(_registry_with(handler)).dispatch(
            "suggest_fixes", {"failureOutput": "x"}
        )
        assert envelope == Success(
            ToolCallResult.text("Error executing suggest_fixes: runner unavailable", is_error=True)
        )

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_internal_error(self) -> None:
        """Verify any other exception is contained as INTERNAL_ERROR."""

        async def handler(ctx: ToolContext, args: SuggestFixesArgs) -> ToolCallResult:
            raise RuntimeError("boom")

        envelope = await Dispatcher(_registry_with(handler)).dispatch(
            "suggest_fixes", {"failureOutput": "x"}
        )
        assert envelope == Failure(JSONRPCErrorCode.INTERNAL_ERROR, "Internal error: boom")
