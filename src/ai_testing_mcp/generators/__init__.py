"""
AI Testing MCP Generators Package.

Template-based generation of unit tests, integration tests and testing
framework scaffolding.
"""

from ai_testing_mcp.generators.integration import generate_integration_tests
from ai_testing_mcp.generators.scaffold import setup_testing_framework
from ai_testing_mcp.generators.unit import generate_unit_tests

__all__ = [
    "generate_integration_tests",
    "generate_unit_tests",
    "setup_testing_framework",
]
