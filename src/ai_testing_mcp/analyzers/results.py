"""
Test-runner output parsing and insights.

Recognises the summary formats of pytest, jest, vitest, mocha and go test,
and turns raw output into counts, failing test names, coverage and a short
list of human-readable insights.
"""

import re

from ai_testing_mcp.analyzers.base import TestOutputParser
from ai_testing_mcp.models import TestSummary

# Coverage below this percentage produces an insight
COVERAGE_TARGET = 80.0


def _summary(
    framework: str,
    passed: int = 0,
    failed: int = 0,
    skipped: int = 0,
    failed_tests: list[str] | None = None,
    coverage: str | None = None,
) -> TestSummary:
    summary: TestSummary = {
        "framework": framework,
        "passed": passed,
        "failed": failed,
        "skipped": skipped,
        "total": passed + failed + skipped,
        "failedTests": list(dict.fromkeys(failed_tests or [])),
    }
    if coverage is not None:
        summary["coverage"] = coverage
    return summary


def _count(pattern: re.Pattern[str], text: str) -> int:
    """Sum every numeric capture of pattern in text."""
    return sum(int(n) for n in pattern.findall(text))


class PytestOutputParser:
    """Parser for pytest terminal output (``-v`` or default verbosity)."""

    framework = "pytest"

    _SUMMARY_LINE = re.compile(r"^=+ (.*\b(?:passed|failed|error|errors|skipped)\b.*) in [\d.]+s", re.MULTILINE)
    _PASSED = re.compile(r"(\d+) passed")
    _FAILED = re.compile(r"(\d+) (?:failed|errors?)\b")
    _SKIPPED = re.compile(r"(\d+) (?:skipped|xfailed|deselected)")
    _FAILED_SHORT = re.compile(r"^(?:FAILED|ERROR) (\S+::\S+)", re.MULTILINE)
    _FAILED_VERBOSE = re.compile(r"^(\S+::\S+) (?:FAILED|ERROR)", re.MULTILINE)
    _COVERAGE = re.compile(r"^TOTAL\s+.*?(\d+(?:\.\d+)?%)\s*$", re.MULTILINE)

    def matches(self, output: str) -> bool:
        return bool(self._SUMMARY_LINE.search(output)) or "::" in output and "FAILED" in output

    def parse(self, output: str) -> TestSummary:
        lines = self._SUMMARY_LINE.findall(output)
        summary_text = lines[-1] if lines else ""
        coverage = self._COVERAGE.search(output)
        return _summary(
            self.framework,
            passed=_count(self._PASSED, summary_text),
            failed=_count(self._FAILED, summary_text),
            skipped=_count(self._SKIPPED, summary_text),
            failed_tests=self._FAILED_SHORT.findall(output) + self._FAILED_VERBOSE.findall(output),
            coverage=coverage.group(1) if coverage else None,
        )


class JestOutputParser:
    """Parser for jest's ``Tests:`` summary and ``●`` failure headers."""

    framework = "jest"

    _TESTS_LINE = re.compile(r"^Tests:\s+(.*)$", re.MULTILINE)
    _PASSED = re.compile(r"(\d+) passed")
    _FAILED = re.compile(r"(\d+) failed")
    _SKIPPED = re.compile(r"(\d+) (?:skipped|todo|pending)")
    _FAILURE_HEADER = re.compile(r"^\s*● (.+?)\s*$", re.MULTILINE)
    _COVERAGE = re.compile(r"^All files\s*\|\s*([\d.]+)", re.MULTILINE)

    def matches(self, output: str) -> bool:
        return bool(self._TESTS_LINE.search(output))

    def parse(self, output: str) -> TestSummary:
        tests_line = self._TESTS_LINE.findall(output)[-1]
        coverage = self._COVERAGE.search(output)
        failed_tests = [
            name for name in self._FAILURE_HEADER.findall(output) if not name.startswith("Console")
        ]
        return _summary(
            self.framework,
            passed=_count(self._PASSED, tests_line),
            failed=_count(self._FAILED, tests_line),
            skipped=_count(self._SKIPPED, tests_line),
            failed_tests=failed_tests,
            coverage=f"{coverage.group(1)}%" if coverage else None,
        )


class VitestOutputParser:
    """Parser for vitest's ``Tests  1 failed | 4 passed (5)`` summary."""

    framework = "vitest"

    _TESTS_LINE = re.compile(r"^\s*Tests\s{2,}(.*)$", re.MULTILINE)
    _PASSED = re.compile(r"(\d+) passed")
    _FAILED = re.compile(r"(\d+) failed")
    _SKIPPED = re.compile(r"(\d+) (?:skipped|todo)")
    _FAILURE = re.compile(r"^\s*(?:FAIL|×)\s+(.+?)\s*$", re.MULTILINE)
    _COVERAGE = re.compile(r"^All files\s*\|\s*([\d.]+)", re.MULTILINE)

    def matches(self, output: str) -> bool:
        return "Test Files" in output and bool(self._TESTS_LINE.search(output))

    def parse(self, output: str) -> TestSummary:
        tests_line = self._TESTS_LINE.findall(output)[-1]
        coverage = self._COVERAGE.search(output)
        return _summary(
            self.framework,
            passed=_count(self._PASSED, tests_line),
            failed=_count(self._FAILED, tests_line),
            skipped=_count(self._SKIPPED, tests_line),
            failed_tests=self._FAILURE.findall(output),
            coverage=f"{coverage.group(1)}%" if coverage else None,
        )


class MochaOutputParser:
    """Parser for mocha's ``N passing`` / ``N failing`` footer."""

    framework = "mocha"

    _PASSING = re.compile(r"^\s*(\d+) passing", re.MULTILINE)
    _FAILING = re.compile(r"^\s*(\d+) failing", re.MULTILINE)
    _PENDING = re.compile(r"^\s*(\d+) pending", re.MULTILINE)
    _FAILURE = re.compile(r"^\s+\d+\) (.+?):?\s*$", re.MULTILINE)

    def matches(self, output: str) -> bool:
        return bool(self._PASSING.search(output) or self._FAILING.search(output))

    def parse(self, output: str) -> TestSummary:
        return _summary(
            self.framework,
            passed=_count(self._PASSING, output),
            failed=_count(self._FAILING, output),
            skipped=_count(self._PENDING, output),
            failed_tests=self._FAILURE.findall(output),
        )


class GoTestOutputParser:
    """Parser for ``go test -v`` output."""

    framework = "go"

    _RESULT = re.compile(r"^\s*--- (PASS|FAIL|SKIP): (\S+)", re.MULTILINE)
    _COVERAGE = re.compile(r"coverage: (\d+(?:\.\d+)?)% of statements")

    def matches(self, output: str) -> bool:
        return bool(self._RESULT.search(output)) or bool(
            re.search(r"^(?:ok|FAIL)\s+\S+\s+[\d.]+s", output, re.MULTILINE)
        )

    def parse(self, output: str) -> TestSummary:
        passed = failed = skipped = 0
        failed_tests: list[str] = []
        for status, name in self._RESULT.findall(output):
            if status == "PASS":
                passed += 1
            elif status == "FAIL":
                failed += 1
                failed_tests.append(name)
            else:
                skipped += 1
        coverages = self._COVERAGE.findall(output)
        return _summary(
            self.framework,
            passed=passed,
            failed=failed,
            skipped=skipped,
            failed_tests=failed_tests,
            coverage=f"{coverages[-1]}%" if coverages else None,
        )


# Order matters: vitest output also contains a jest-like "Tests" line
OUTPUT_PARSERS: tuple[TestOutputParser, ...] = (
    VitestOutputParser(),
    JestOutputParser(),
    PytestOutputParser(),
    MochaOutputParser(),
    GoTestOutputParser(),
)


def summarize_output(output: str, framework: str | None = None) -> TestSummary:
    """Parse raw test output into a TestSummary.

    When ``framework`` names a known parser that recognises the output, it
    is used first; otherwise every parser is tried in ``OUTPUT_PARSERS``
    order. Unrecognised output yields an all-zero summary with framework
    "unknown".

    Args:
        output: Raw test-runner output.
        framework: Optional framework hint (e.g. from project detection).

    Returns:
        TestSummary for the output.

    Example:
        >>> summarize_output("  3 passing (12ms)\\n  1 failing")["failed"]
        1
    """
    candidates = list(OUTPUT_PARSERS)
    if framework:
        candidates.sort(key=lambda p: p.framework != framework)

    for parser in candidates:
        if parser.matches(output):
            return parser.parse(output)
    return _summary("unknown")


def _coverage_value(coverage: str | None) -> float | None:
    if not coverage:
        return None
    try:
        return float(coverage.rstrip("%"))
    except ValueError:
        return None


def build_insights(summary: TestSummary) -> list[str]:
    """Turn a TestSummary into short, actionable observations.

    Example:
        >>> build_insights(_summary("pytest", passed=4))
        ['All 4 tests passed.']
    """
    insights: list[str] = []
    total = summary["total"]

    if summary["framework"] == "unknown" or total == 0:
        insights.append(
            "No test results were recognised; check that the runner executed "
            "and that test files match its discovery pattern."
        )
        return insights

    failed = summary["failed"]
    if failed == 0:
        insights.append(f"All {summary['passed']} tests passed.")
    else:
        rate = failed / total * 100
        insights.append(f"{failed} of {total} tests failed ({rate:.0f}% failure rate).")
        if summary["failedTests"]:
            shown = ", ".join(summary["failedTests"][:5])
            insights.append(f"Start with: {shown}.")
        if failed == total:
            insights.append(
                "Every test failed, which usually points to a shared setup, "
                "import or configuration problem rather than individual bugs."
            )

    if summary["skipped"]:
        insights.append(
            f"{summary['skipped']} tests were skipped; confirm they are intentionally disabled."
        )

    coverage = _coverage_value(summary.get("coverage"))
    if coverage is not None and coverage < COVERAGE_TARGET:
        insights.append(
            f"Coverage is {coverage:g}%, below the {COVERAGE_TARGET:g}% target; "
            "generate unit tests for untested components."
        )
    return insights
