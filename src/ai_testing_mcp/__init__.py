"""
AI Testing MCP Server.

PURPOSE: MCP server exposing code analysis and test tooling to AI agents.
AI CONTEXT: A calling agent discovers seven tools over JSON-RPC 2.0 and invokes
them to analyze a project, generate unit/integration tests, run the test suite
and interpret its output. Both stdio and HTTP transports share one registry.

PACKAGE STRUCTURE:
- registry.py: Tool descriptors and the name -> handler table
- dispatcher.py: Argument validation, handler invocation, envelopes
- protocol.py: JSON-RPC method routing shared by both transports
- transports/: stdio and HTTP (FastAPI) adapters
- handlers.py: One coroutine per tool
- analyzers/, generators/, runner.py, filesystem.py: Tool collaborators
- models/: Protocol, argument, analysis and configuration models

QUICK START:
    # Run over stdio (default)
    python -m ai_testing_mcp.server

    # Run over HTTP
    MCP_TRANSPORT=http PORT=3000 python -m ai_testing_mcp.server

MCP TOOLS:
1. analyze_codebase - Identify language, frameworks, endpoints and tests
2. generate_unit_tests - Generate unit test skeletons for a source file
3. generate_integration_tests - Generate endpoint test skeletons
4. run_tests - Execute the project's test suite
5. analyze_test_results - Summarize raw test output
6. suggest_fixes - Suggest fixes for failing tests
7. setup_testing_framework - Scaffold a testing framework in a project
"""

from ai_testing_mcp.__version__ import (
    __author__,
    __copyright__,
    __description__,
    __license__,
    __title__,
    __url__,
    __version__,
    __version_date__,
)

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
