"""
AI Testing MCP Analyzers Package.

Regex-based project scanning, test-output parsing and fix heuristics.
Output parsers implement the TestOutputParser protocol.
"""

from ai_testing_mcp.analyzers.base import TestOutputParser
from ai_testing_mcp.analyzers.fixes import suggest_fixes
from ai_testing_mcp.analyzers.project import analyze_project, detect_stack, detect_test_framework
from ai_testing_mcp.analyzers.results import build_insights, summarize_output

__all__ = [
    "TestOutputParser",
    "analyze_project",
    "build_insights",
    "detect_stack",
    "detect_test_framework",
    "suggest_fixes",
    "summarize_output",
]
