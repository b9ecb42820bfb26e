"""
AI Testing MCP Models.

Core data structures for tool dispatch: protocol envelopes, typed tool
arguments, analysis result shapes and server configuration.
"""

from ai_testing_mcp.models.analysis import (
    CodeAnalysis,
    FixSuggestion,
    TestRunResult,
    TestSummary,
)
from ai_testing_mcp.models.arguments import (
    AnalyzeCodebaseArgs,
    AnalyzeTestResultsArgs,
    GenerateIntegrationTestsArgs,
    GenerateUnitTestsArgs,
    RunTestsArgs,
    SetupTestingFrameworkArgs,
    SuggestFixesArgs,
    ToolArguments,
    decode_arguments,
)
from ai_testing_mcp.models.config import (
    DEFAULT_CONFIG,
    ServerConfig,
)
from ai_testing_mcp.models.protocol import (
    JSONRPC_VERSION,
    MCP_VERSION,
    Failure,
    JSONRPCErrorCode,
    ParamSpec,
    ProtocolEnvelope,
    Success,
    TextContent,
    ToolCallRequest,
    ToolCallResult,
    ToolDescriptor,
)

__all__ = [
    # Protocol models
    "JSONRPC_VERSION",
    "MCP_VERSION",
    "JSONRPCErrorCode",
    "ParamSpec",
    "ToolDescriptor",
    "TextContent",
    "ToolCallRequest",
    "ToolCallResult",
    "Success",
    "Failure",
    "ProtocolEnvelope",
    # Argument records
    "AnalyzeCodebaseArgs",
    "GenerateUnitTestsArgs",
    "GenerateIntegrationTestsArgs",
    "RunTestsArgs",
    "AnalyzeTestResultsArgs",
    "SuggestFixesArgs",
    "SetupTestingFrameworkArgs",
    "ToolArguments",
    "decode_arguments",
    # Analysis shapes
    "CodeAnalysis",
    "FixSuggestion",
    "TestRunResult",
    "TestSummary",
    # Configuration
    "ServerConfig",
    "DEFAULT_CONFIG",
]
