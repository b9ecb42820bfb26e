"""Command-line interface for ai-testing-mcp.

Runs the server and manages its registration in VS Code.

Commands:
    serve: Run the MCP server (stdio or HTTP)
    install: Configure MCP server in VS Code workspace or globally
    uninstall: Remove MCP server configuration
"""

import argparse
import dataclasses
import json
import sys
from pathlib import Path

from ai_testing_mcp.__version__ import __version__
from ai_testing_mcp.errors import ConfigurationError
from ai_testing_mcp.models import ServerConfig
from ai_testing_mcp.models.config import TRANSPORTS

# Platform constant for cross-platform detection
WINDOWS_PLATFORM = "win32"

# Key of this server's entry in mcp.json
SERVER_KEY = "ai-testing-mcp"


def get_venv_python() -> str:
    """Detect .venv Python executable for MCP server configuration.

    Checks for a .venv directory in the current working directory and
    returns the full path to its Python executable (bin/python on
    Linux/macOS, Scripts/python.exe on Windows). Falls back to
    sys.executable if no .venv is found.

    The venv path is returned without resolving symlinks so that the
    venv's site-packages are used when VS Code spawns the server.

    Returns:
        Full path to Python executable as string.

    Example:
        >>> path = get_venv_python()
        >>> 'python' in path
        True
    """
    venv_dir = Path.cwd() / ".venv"

    if venv_dir.exists():
        if sys.platform == WINDOWS_PLATFORM:
            venv_python = venv_dir / "Scripts" / "python.exe"
        else:
            venv_python = venv_dir / "bin" / "python"

        if venv_python.exists():
            return str(venv_python.absolute())

    return sys.executable


def get_mcp_server_config() -> dict[str, object]:
    """Generate the mcp.json server entry with the detected Python path.

    Uses `-m ai_testing_mcp.server` module execution rather than the entry
    point script so the venv's site-packages are loaded.

    Returns:
        Dict with 'command' (Python path) and 'args' (module invocation).

    Example:
        >>> get_mcp_server_config()['args']
        ['-m', 'ai_testing_mcp.server']
    """
    return {
        "command": get_venv_python(),
        "args": ["-m", "ai_testing_mcp.server"],
    }


def get_vscode_mcp_path(global_install: bool = False, insiders: bool = False) -> Path:
    """Get the path to the MCP configuration file.

    Args:
        global_install: If True, return user-level config path.
                       If False, return workspace .vscode/mcp.json path.
        insiders: If True (with global_install), use Code - Insiders path.
                 Ignored for workspace installs.

    Returns:
        Path to the mcp.json configuration file.

    Example:
        >>> get_vscode_mcp_path(global_install=True, insiders=True)
        PosixPath('/home/user/.config/Code - Insiders/User/mcp.json')
    """
    if global_install:
        code_dir = "Code - Insiders" if insiders else "Code"
        return Path.home() / ".config" / code_dir / "User" / "mcp.json"
    return Path.cwd() / ".vscode" / "mcp.json"


def _location(global_install: bool, insiders: bool) -> str:
    if global_install:
        variant = "Insiders" if insiders else "stable"
        return f"global ({variant})"
    return "workspace"


def _write_config(mcp_path: Path, config: dict[str, object]) -> None:
    with open(mcp_path, "w") as f:
        json.dump(config, f, indent=2)
        f.write("\n")


def install_mcp(global_install: bool = False, insiders: bool = False) -> int:
    """Install MCP server configuration to VS Code.

    Creates or updates mcp.json with the ai-testing-mcp server entry,
    preserving any other servers already configured.

    Args:
        global_install: Install to user-level config instead of workspace.
        insiders: Use VS Code Insiders path (only with global_install).

    Returns:
        Exit code: 0 for success, 1 if the existing file is not valid JSON.
    """
    mcp_path = get_vscode_mcp_path(global_install, insiders)
    mcp_path.parent.mkdir(parents=True, exist_ok=True)

    if mcp_path.exists():
        try:
            with open(mcp_path) as f:
                config = json.load(f)
        except json.JSONDecodeError:
            print(f"Error: Invalid JSON in {mcp_path}", file=sys.stderr)
            return 1
    else:
        config = {"servers": {}}

    config.setdefault("servers", {})
    config["servers"][SERVER_KEY] = get_mcp_server_config()
    _write_config(mcp_path, config)

    print(f"✓ AI Testing MCP server installed ({_location(global_install, insiders)})")
    print(f"  Config: {mcp_path}")
    print()
    print("Reload VS Code window to activate the MCP server.")
    return 0


def uninstall_mcp(global_install: bool = False, insiders: bool = False) -> int:
    """Remove MCP server configuration from VS Code.

    Removes only the ai-testing-mcp entry; other servers are kept.

    Args:
        global_install: Remove from user-level config instead of workspace.
        insiders: Use VS Code Insiders path (only with global_install).

    Returns:
        Exit code: 0 for success (including nothing to remove), 1 if the
        file is not valid JSON.
    """
    mcp_path = get_vscode_mcp_path(global_install, insiders)
    location = _location(global_install, insiders)

    if not mcp_path.exists():
        print(f"No MCP config found at {mcp_path}")
        return 0

    try:
        with open(mcp_path) as f:
            config = json.load(f)
    except json.JSONDecodeError:
        print(f"Error: Invalid JSON in {mcp_path}", file=sys.stderr)
        return 1

    if SERVER_KEY in config.get("servers", {}):
        del config["servers"][SERVER_KEY]
        _write_config(mcp_path, config)
        print(f"✓ AI Testing MCP server removed ({location})")
    else:
        print(f"AI Testing MCP server not found in {location} config")

    return 0


def serve(transport: str | None = None, port: int | None = None, host: str | None = None) -> int:
    """Run the server with environment configuration plus CLI overrides.

    Args:
        transport: "stdio" or "http"; overrides MCP_TRANSPORT.
        port: HTTP port; overrides PORT.
        host: HTTP bind address; overrides HOST.

    Returns:
        Exit code: 0 on orderly shutdown, 1 on configuration error or
        bind failure.
    """
    overrides = {
        key: value
        for key, value in (("transport", transport), ("port", port), ("host", host))
        if value is not None
    }
    try:
        config = dataclasses.replace(ServerConfig.from_env(), **overrides)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # server configures root logging on import
    from ai_testing_mcp.server import run_server

    return run_server(config)


def _add_scope_arguments(parser: argparse.ArgumentParser, verb: str) -> None:
    parser.add_argument(
        "--global",
        "-g",
        dest="global_install",
        action="store_true",
        help=f"{verb} user-level VS Code config instead of workspace",
    )
    parser.add_argument(
        "--insiders",
        "-i",
        dest="insiders",
        action="store_true",
        help="Use VS Code Insiders config path (only with --global)",
    )


def main() -> int:
    """CLI entry point for ai-testing-mcp commands.

    Commands:
        serve: Run the server (--transport, --port, --host)
        install: Add the server to VS Code config
        uninstall: Remove the server from VS Code config

    Returns:
        Exit code: 0 for success, non-zero for failure.

    Raises:
        SystemExit: On --version or argument errors (via argparse).

    Example:
        >>> sys.argv = ['ai-testing-mcp', 'install']
        >>> main()
        0
    """
    parser = argparse.ArgumentParser(
        prog="ai-testing-mcp",
        description="AI Testing MCP Server - Code analysis and test tooling for AI agents",
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the MCP server")
    serve_parser.add_argument(
        "--transport", "-t", choices=TRANSPORTS, help="Transport (default: from MCP_TRANSPORT)"
    )
    serve_parser.add_argument("--port", "-p", type=int, help="HTTP port (default: from PORT)")
    serve_parser.add_argument("--host", help="HTTP bind address (default: from HOST)")

    install_parser = subparsers.add_parser("install", help="Install MCP server configuration")
    _add_scope_arguments(install_parser, "Install to")

    uninstall_parser = subparsers.add_parser("uninstall", help="Remove MCP server configuration")
    _add_scope_arguments(uninstall_parser, "Remove from")

    args = parser.parse_args()

    if args.command == "serve":
        return serve(transport=args.transport, port=args.port, host=args.host)
    elif args.command == "install":
        return install_mcp(global_install=args.global_install, insiders=args.insiders)
    elif args.command == "uninstall":
        return uninstall_mcp(global_install=args.global_install, insiders=args.insiders)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())
