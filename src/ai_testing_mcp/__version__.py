"""Version information for ai-testing-mcp."""

__version__ = "1.0.0"
__version_date__ = "2026-10-19"

__title__ = "ai_testing_mcp"
__description__ = (
    "MCP server exposing code analysis, test generation and test execution tools"
)
__url__ = "https://github.com/ai-testing-mcp/ai-testing-mcp"

__author__ = "AI Testing MCP Contributors"

__license__ = "MIT"
__copyright__ = "Copyright 2026 AI Testing MCP Contributors"

__all__ = [
    "__version__",
    "__version_date__",
    "__title__",
    "__description__",
    "__url__",
    "__author__",
    "__license__",
    "__copyright__",
]
