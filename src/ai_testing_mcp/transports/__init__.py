"""
AI Testing MCP Transports.

Two interchangeable adapters over the same ProtocolHandler: newline-delimited
JSON-RPC on stdin/stdout, and JSON-RPC over HTTP POST.
"""

from ai_testing_mcp.transports.http import create_app, serve_http
from ai_testing_mcp.transports.stdio import StdioTransport

__all__ = ["StdioTransport", "create_app", "serve_http"]
