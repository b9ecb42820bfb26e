"""
Result shapes produced by the analysis, runner and insight collaborators.

These are serialized verbatim (camelCase keys) into tool result text, so the
key names are part of the wire contract with the calling agent.
"""

from typing import NotRequired, TypedDict


class CodeAnalysis(TypedDict):
    """Project analysis returned by ``analyze_codebase``.

    Attributes:
        language: Detected primary language, empty string if unknown
        framework: Detected application framework (react, express, ...)
        testFramework: Detected test framework (jest, pytest, ...)
        apiEndpoints: "METHOD /path" strings found in source files
        testableComponents: Source files that are not tests
        existingTests: Files recognised as tests
    """

    language: str
    framework: NotRequired[str]
    testFramework: NotRequired[str]
    apiEndpoints: list[str]
    testableComponents: list[str]
    existingTests: list[str]


class TestSummary(TypedDict):
    """Counts parsed from raw test-runner output.

    Attributes:
        framework: Framework whose output format matched, or "unknown"
        passed: Number of passing tests
        failed: Number of failing tests
        skipped: Number of skipped tests
        total: Sum of the three counts
        failedTests: Names of failing tests, in output order
        coverage: Overall coverage figure (e.g. "87%") if reported
    """

    framework: str
    passed: int
    failed: int
    skipped: int
    total: int
    failedTests: list[str]
    coverage: NotRequired[str]


class TestRunResult(TypedDict):
    """Outcome of ``run_tests``.

    ``success`` is False for any execution failure: non-zero exit, timeout,
    missing runner or a project without source or test files.
    """

    success: bool
    output: str
    errors: NotRequired[str]
    framework: NotRequired[str]
    command: NotRequired[list[str]]
    exitCode: NotRequired[int | None]
    timedOut: NotRequired[bool]
    summary: NotRequired[TestSummary]
    coverage: NotRequired[str]
    suggestions: NotRequired[list[str]]


class FixSuggestion(TypedDict):
    """One suggested fix for a failing test.

    Attributes:
        category: Failure class (assertion, type, import, syntax, ...)
        message: Actionable suggestion text
        location: Function or file the suggestion refers to, if known
    """

    category: str
    message: str
    location: NotRequired[str]
