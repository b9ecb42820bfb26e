"""
Tool Registry.

The closed set of tools the server exposes. Each tool is one ToolBinding:
its descriptor (advertised by ``tools/list``), the argument record its
arguments decode into, and the handler that runs it. Discovery and dispatch
both read the same bindings, so the advertised list and the executable set
cannot drift apart.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

from ai_testing_mcp import handlers
from ai_testing_mcp.handlers import ToolContext
from ai_testing_mcp.models import (
    AnalyzeCodebaseArgs,
    AnalyzeTestResultsArgs,
    GenerateIntegrationTestsArgs,
    GenerateUnitTestsArgs,
    ParamSpec,
    RunTestsArgs,
    SetupTestingFrameworkArgs,
    SuggestFixesArgs,
    ToolCallResult,
    ToolDescriptor,
)

ToolHandler: TypeAlias = Callable[[ToolContext, Any], Awaitable[ToolCallResult]]


class ToolName(StrEnum):
    """Names of every tool the server can run."""

    ANALYZE_CODEBASE = "analyze_codebase"
    GENERATE_UNIT_TESTS = "generate_unit_tests"
    GENERATE_INTEGRATION_TESTS = "generate_integration_tests"
    RUN_TESTS = "run_tests"
    ANALYZE_TEST_RESULTS = "analyze_test_results"
    SUGGEST_FIXES = "suggest_fixes"
    SETUP_TESTING_FRAMEWORK = "setup_testing_framework"


@dataclass(frozen=True)
class UnknownTool:
    """A requested tool name that is not in the registry."""

    name: str


@dataclass(frozen=True)
class ToolBinding:
    """Descriptor, argument record type and handler for one tool."""

    descriptor: ToolDescriptor
    arguments_type: type
    handler: ToolHandler


def _project_path(description: str = "Path to the project directory") -> ParamSpec:
    return ParamSpec("projectPath", description, required=True)


BINDINGS: tuple[ToolBinding, ...] = (
    ToolBinding(
        ToolDescriptor(
            ToolName.ANALYZE_CODEBASE,
            "Analyze project structure and identify testable components",
            (_project_path(),),
        ),
        AnalyzeCodebaseArgs,
        handlers.handle_analyze_codebase,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.GENERATE_UNIT_TESTS,
            "Generate unit tests for specific functions or components",
            (
                ParamSpec("filePath", "Path to the file to test", required=True),
                ParamSpec("functionName", "Specific function to test (optional)"),
                ParamSpec(
                    "testFramework", "Testing framework to use (jest, mocha, pytest, etc.)"
                ),
            ),
        ),
        GenerateUnitTestsArgs,
        handlers.handle_generate_unit_tests,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.GENERATE_INTEGRATION_TESTS,
            "Generate integration tests for API endpoints",
            (
                _project_path(),
                ParamSpec("apiSpec", "API specification or documentation"),
            ),
        ),
        GenerateIntegrationTestsArgs,
        handlers.handle_generate_integration_tests,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.RUN_TESTS,
            "Execute tests and return results",
            (
                _project_path(),
                ParamSpec("testPattern", "Test file pattern or specific test to run"),
                ParamSpec("framework", "Test framework (auto-detected if not specified)"),
            ),
        ),
        RunTestsArgs,
        handlers.handle_run_tests,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.ANALYZE_TEST_RESULTS,
            "Analyze test results and provide insights",
            (
                ParamSpec("testOutput", "Raw test output to analyze", required=True),
                ParamSpec("projectPath", "Path to the project directory"),
            ),
        ),
        AnalyzeTestResultsArgs,
        handlers.handle_analyze_test_results,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.SUGGEST_FIXES,
            "Analyze failing tests and suggest code fixes",
            (
                ParamSpec("failureOutput", "Test failure output", required=True),
                ParamSpec("sourceCode", "Source code that failed"),
                ParamSpec("testCode", "Test code that failed"),
            ),
        ),
        SuggestFixesArgs,
        handlers.handle_suggest_fixes,
    ),
    ToolBinding(
        ToolDescriptor(
            ToolName.SETUP_TESTING_FRAMEWORK,
            "Initialize testing framework in a project",
            (
                _project_path(),
                ParamSpec(
                    "framework",
                    "Testing framework to set up (jest, mocha, pytest, etc.)",
                    required=True,
                ),
                ParamSpec(
                    "language",
                    "Programming language (javascript, python, go, etc.)",
                    required=True,
                ),
            ),
        ),
        SetupTestingFrameworkArgs,
        handlers.handle_setup_testing_framework,
    ),
)


class ToolRegistry:
    """Immutable table of tool bindings, in advertised order.

    Passed explicitly to the dispatcher and to both transports; there is no
    module-level lookup at call time.

    Attributes:
        bindings: Tool name -> binding, in registration order
    """

    def __init__(self, bindings: tuple[ToolBinding, ...]) -> None:
        self.bindings: dict[ToolName, ToolBinding] = {}
        for binding in bindings:
            name = ToolName(binding.descriptor.name)
            if name in self.bindings:
                raise ValueError(f"Duplicate tool binding: {name}")
            self.bindings[name] = binding
        self._descriptors = tuple(b.descriptor for b in self.bindings.values())

    def list_tools(self) -> tuple[ToolDescriptor, ...]:
        """Return every descriptor, in the same order on every call."""
        return self._descriptors

    def resolve(self, name: Any) -> ToolName | UnknownTool:
        """Resolve a requested tool name.

        Args:
            name: Raw ``params.name`` from the request; may be any JSON value.

        Returns:
            The ToolName if registered, otherwise UnknownTool carrying the
            name as text.

        Example:
            >>> REGISTRY.resolve("run_tests")
            <ToolName.RUN_TESTS: 'run_tests'>
            >>> REGISTRY.resolve("bogus")
            UnknownTool(name='bogus')
        """
        if isinstance(name, str):
            try:
                tool = ToolName(name)
            except ValueError:
                return UnknownTool(name)
            if tool in self.bindings:
                return tool
        return UnknownTool(str(name))

    def binding(self, name: ToolName) -> ToolBinding:
        """Look up the binding for a resolved tool name.

        Args:
            name: ToolName returned by ``resolve``.

        Returns:
            The descriptor, argument record type and handler for the tool.

        Raises:
            KeyError: If the tool is not registered here.
        """
        return self.bindings[name]


def build_registry() -> ToolRegistry:
    """Build the registry of all seven tools."""
    return ToolRegistry(BINDINGS)


REGISTRY = build_registry()
