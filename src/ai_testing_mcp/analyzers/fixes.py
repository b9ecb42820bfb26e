"""
Heuristic fix suggestions for failing tests.

Classifies failure output by error signature and, when the failing source
or test code is supplied, points at the functions involved.
"""

import re
from dataclasses import dataclass
from typing import Any

from ai_testing_mcp.analyzers.patterns import extract_js_functions, extract_python_functions
from ai_testing_mcp.analyzers.results import summarize_output
from ai_testing_mcp.models import FixSuggestion


@dataclass(frozen=True)
class FailureRule:
    """Error signature and the advice given when it appears."""

    category: str
    pattern: re.Pattern[str]
    advice: str


FAILURE_RULES: tuple[FailureRule, ...] = (
    FailureRule(
        "import",
        re.compile(r"ModuleNotFoundError|ImportError|No module named|Cannot find module", re.IGNORECASE),
        "A module could not be imported. Install the missing dependency or fix the "
        "import path relative to the test file.",
    ),
    FailureRule(
        "syntax",
        re.compile(r"SyntaxError|IndentationError|Unexpected token"),
        "The code does not parse. Fix the syntax error at the reported line before "
        "investigating test logic.",
    ),
    FailureRule(
        "type",
        re.compile(
            r"TypeError|NoneType|Cannot read propert(?:y|ies) of (?:undefined|null)|is not a function"
        ),
        "A value has an unexpected type. Check for None/undefined return values and "
        "validate inputs before use.",
    ),
    FailureRule(
        "reference",
        re.compile(r"NameError|ReferenceError|AttributeError|KeyError|is not defined"),
        "A name, attribute or key is missing. Verify the symbol is exported, spelled "
        "correctly and present on the object under test.",
    ),
    FailureRule(
        "assertion",
        re.compile(r"AssertionError|assert |expect\(|Expected|toBe|toEqual"),
        "An assertion failed. Compare the expected and actual values and decide "
        "whether the code or the test expectation is wrong.",
    ),
    FailureRule(
        "timeout",
        re.compile(r"[Tt]imed? ?out|Exceeded timeout|TimeoutError"),
        "The test exceeded its time limit. Await all async work, mock slow I/O, or "
        "raise the timeout for genuinely slow tests.",
    ),
    FailureRule(
        "connection",
        re.compile(r"ECONNREFUSED|ConnectionError|ConnectionRefused|connect ETIMEDOUT"),
        "A network dependency was unreachable. Start the service the test needs or "
        "replace it with a mock.",
    ),
)

_JEST_EXPECTED = re.compile(r"Expected:\s*(.+)\n\s*Received:\s*(.+)")
_PY_ASSERT = re.compile(r"assert (.+?) == (.+?)\s*$", re.MULTILINE)
_MISSING_MODULE = re.compile(r"(?:No module named|Cannot find module) ['\"]?([\w./@-]+)['\"]?")

# Function names appearing in Python tracebacks and JS stack frames
_PY_FRAME = re.compile(r'File "[^"]+", line \d+, in (\w+)')
_JS_FRAME = re.compile(r"^\s*at (?:Object\.)?(\w+) \(", re.MULTILINE)


def _frame_functions(output: str) -> list[str]:
    names = _PY_FRAME.findall(output) + _JS_FRAME.findall(output)
    return [n for n in dict.fromkeys(names) if n not in {"<module>", "Object", "Module"}]


def _value_mismatch(output: str) -> str | None:
    match = _JEST_EXPECTED.search(output)
    if match:
        return f"Expected {match.group(1).strip()} but received {match.group(2).strip()}."
    match = _PY_ASSERT.search(output)
    if match:
        return f"Assertion compared {match.group(1).strip()} with {match.group(2).strip()}."
    return None


def suggest_fixes(
    failure_output: str,
    source_code: str | None = None,
    test_code: str | None = None,
) -> dict[str, Any]:
    """Suggest fixes for a failing test run.

    Every matching rule in ``FAILURE_RULES`` contributes one suggestion.
    Functions named in stack frames that are also defined in
    ``source_code`` are reported as likely fault locations, and TODO
    placeholders in ``test_code`` (as left by generated skeletons) are
    flagged.

    Args:
        failure_output: Raw failure output from the test runner.
        source_code: Source of the code under test, optional.
        test_code: Source of the failing test, optional.

    Returns:
        Dict with ``failingTests`` (names parsed from the output) and
        ``suggestions`` (list of FixSuggestion dicts, never empty).

    Example:
        >>> result = suggest_fixes("ModuleNotFoundError: No module named 'requests'")
        >>> result["suggestions"][0]["category"]
        'import'
    """
    suggestions: list[FixSuggestion] = []

    for rule in FAILURE_RULES:
        if not rule.pattern.search(failure_output):
            continue
        suggestion: FixSuggestion = {"category": rule.category, "message": rule.advice}
        if rule.category == "assertion":
            mismatch = _value_mismatch(failure_output)
            if mismatch:
                suggestion["message"] = f"{mismatch} {rule.advice}"
        elif rule.category == "import":
            module = _MISSING_MODULE.search(failure_output)
            if module:
                suggestion["location"] = module.group(1)
        suggestions.append(suggestion)

    if source_code:
        defined = set(extract_python_functions(source_code, include_private=True))
        defined.update(extract_js_functions(source_code))
        for name in _frame_functions(failure_output):
            if name in defined:
                suggestions.append(
                    {
                        "category": "location",
                        "message": f"The failure passes through {name}(); review its "
                        "handling of the inputs used by the failing test.",
                        "location": name,
                    }
                )

    if test_code and "TODO" in test_code:
        suggestions.append(
            {
                "category": "test",
                "message": "The test still contains TODO placeholders; replace them with "
                "real inputs and assertions.",
            }
        )

    if not suggestions:
        suggestions.append(
            {
                "category": "general",
                "message": "No known failure signature was found. Re-run the failing test "
                "in isolation with verbose output to capture the full error.",
            }
        )

    return {
        "failingTests": summarize_output(failure_output)["failedTests"],
        "suggestions": suggestions,
    }
