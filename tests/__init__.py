"""Tests for ai-testing-mcp.

Test package containing unit and integration tests for:
- Models (protocol envelopes, argument decoding, configuration)
- Analyzers (pattern scanning, project analysis, output parsing, fixes)
- Generators and the subprocess runner
- Registry, dispatcher and JSON-RPC routing
- stdio and HTTP transports
- Filesystem abstraction (mock and production adapters)
"""
