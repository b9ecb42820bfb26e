"""
Base parser protocol for test-runner output.

Defines the interface each framework-specific output parser implements.
Uses Protocol for structural typing (duck typing with type safety).
"""

from abc import abstractmethod
from typing import Protocol

from ai_testing_mcp.models import TestSummary


class TestOutputParser(Protocol):
    """Protocol defining a test-runner output parser.

    One parser exists per supported runner (pytest, jest/vitest, mocha,
    go test). ``analyze_test_results`` and ``run_tests`` try each parser in
    turn and use the first whose ``matches`` returns True.

    Examples:
        ```python
        class PytestOutputParser:
            framework = "pytest"

            def matches(self, output: str) -> bool:
                return "passed" in output and "====" in output

            def parse(self, output: str) -> TestSummary:
                ...
        ```
    """

    framework: str

    @abstractmethod
    def matches(self, output: str) -> bool:
        """Return True if output looks like it came from this runner.

        Args:
            output: Raw stdout/stderr text of a test run.

        Returns:
            True when this parser recognises the output format.
        """
        ...

    @abstractmethod
    def parse(self, output: str) -> TestSummary:
        """Extract pass/fail/skip counts and failing test names.

        Args:
            output: Raw output previously accepted by ``matches``.

        Returns:
            TestSummary with counts, failing test names and coverage if the
            output reports one.

        Example:
            >>> PytestOutputParser().parse("==== 1 failed, 2 passed in 0.1s ====")["failed"]
            1
        """
        ...
