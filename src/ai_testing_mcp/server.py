"""
AI Testing MCP Server.

JSON-RPC 2.0 MCP server exposing code analysis, test generation, test
execution and test-result insight tools.

Architecture:
    Transport (stdio | HTTP) → ProtocolHandler → Dispatcher → Tool Registry
    → Handler → Collaborators (analyzers, generators, runner, filesystem)

Deployment:
    - VS Code MCP extension / Claude Desktop (stdio)
    - Any HTTP client or hosted deployment (MCP_TRANSPORT=http)
"""

import asyncio
import logging
import signal
import sys

from ai_testing_mcp.__version__ import __version__
from ai_testing_mcp.dispatcher import Dispatcher
from ai_testing_mcp.errors import ConfigurationError
from ai_testing_mcp.filesystem import DefaultFilesystemAdapter, FilesystemAdapter
from ai_testing_mcp.handlers import ToolContext
from ai_testing_mcp.models import ServerConfig
from ai_testing_mcp.protocol import ProtocolHandler
from ai_testing_mcp.registry import REGISTRY, ToolRegistry
from ai_testing_mcp.runner import ProcessRunner
from ai_testing_mcp.transports import StdioTransport, serve_http

# Configure logging; stdout is reserved for protocol traffic
logging.basicConfig(level=logging.INFO, format="%(message)s", stream=sys.stderr)
logger = logging.getLogger(__name__)


def build_handler(
    config: ServerConfig,
    registry: ToolRegistry = REGISTRY,
    fs: FilesystemAdapter | None = None,
    runner: ProcessRunner | None = None,
) -> ProtocolHandler:
    """Wire the registry, dispatcher and collaborators into one handler.

    Both transports receive the handler built here, so they share a single
    registry and dispatcher.

    Args:
        config: Server configuration.
        registry: Tool registry. Defaults to the seven built-in tools.
        fs: Filesystem adapter. Defaults to DefaultFilesystemAdapter.
        runner: Test-runner. Defaults to ProcessRunner.

    Returns:
        ProtocolHandler ready to serve messages.

    Example:
        >>> handler = build_handler(ServerConfig())
        >>> len(handler.registry.list_tools())
        7
    """
    context = ToolContext(
        fs=fs or DefaultFilesystemAdapter(),
        runner=runner or ProcessRunner(),
        config=config,
    )
    return ProtocolHandler(registry, Dispatcher(registry, context))


async def serve(config: ServerConfig) -> int:  # pragma: no cover
    """Run the configured transport until shutdown and return its exit code."""
    handler = build_handler(config)
    if config.transport == "http":
        return await serve_http(handler, config)
    return await StdioTransport(handler).run()


def _raise_keyboard_interrupt(signum: int, frame: object) -> None:
    raise KeyboardInterrupt


def run_server(config: ServerConfig) -> int:  # pragma: no cover
    """Apply the configured log level and serve.

    uvicorn re-raises the shutdown signal once it has stopped, so SIGTERM
    is mapped to KeyboardInterrupt and both signals end with exit code 0.

    Args:
        config: Validated server configuration.

    Returns:
        Exit code: 0 on orderly shutdown, 1 if the HTTP port cannot be bound.
    """
    logging.getLogger().setLevel(config.log_level)
    logger.info(f"Starting AI Testing MCP Server v{__version__} ({config.transport})")
    logger.debug(f"Configuration: {config.to_dict()}")
    signal.signal(signal.SIGTERM, _raise_keyboard_interrupt)
    try:
        return asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Server stopped")
        return 0


def main() -> int:  # pragma: no cover
    """Entry point for the MCP server process.

    Reads configuration from the environment and runs the selected
    transport.

    Returns:
        Exit code: 0 on orderly shutdown, 1 on configuration error or
        bind failure.

    Example:
        >>> # From command line:
        >>> # python -m ai_testing_mcp.server
    """
    try:
        config = ServerConfig.from_env()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    return run_server(config)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
