"""
Configuration models for the AI Testing MCP server.

Defines server configuration, defaults and environment parsing.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, TypeAlias

from ai_testing_mcp.errors import ConfigurationError

Transport: TypeAlias = Literal["stdio", "http"]

TRANSPORTS: tuple[str, ...] = ("stdio", "http")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class ServerConfig:
    """Configuration for the tool-dispatch server.

    Attributes:
        transport: Which adapter to start ("stdio" or "http")
        host: HTTP bind address
        port: HTTP port
        auth_token: Bearer token for the HTTP gate, None if not configured
        auth_enabled: Whether the HTTP gate rejects unauthenticated calls
        test_timeout: Wall-clock seconds allowed for a test-runner subprocess
        workspace_root: Directory all path arguments must stay within
        collect_coverage: Add coverage flags to test-runner commands
        max_file_size: Files larger than this (bytes) are not scanned
        log_level: Root logging level name
    """

    transport: Transport = "stdio"
    host: str = "0.0.0.0"
    port: int = 3000
    auth_token: str | None = None
    auth_enabled: bool = False

    # Execution limits
    test_timeout: float = 60.0
    max_file_size: int = 1024 * 1024  # 1MB

    workspace_root: Path | None = None
    collect_coverage: bool = True
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.transport not in TRANSPORTS:
            raise ConfigurationError(
                f"Unknown transport {self.transport!r}; expected one of {TRANSPORTS}"
            )
        if not 0 < self.port < 65536:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if self.test_timeout <= 0:
            raise ConfigurationError("Test timeout must be positive")
        if self.auth_enabled and not self.auth_token:
            raise ConfigurationError(
                "Authentication is enabled but no MCP_API_KEY token is configured"
            )
        if self.log_level not in logging.getLevelNamesMapping():
            raise ConfigurationError(f"Unknown log level: {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build configuration from environment variables.

        Transport selection honours an explicit ``MCP_TRANSPORT``; otherwise
        HTTP is used when ``VERCEL`` is set or ``NODE_ENV`` is "production",
        and stdio in every other case. The auth gate defaults to enabled
        exactly when ``MCP_API_KEY`` is set, and ``MCP_AUTH_ENABLED`` can
        override that either way.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Validated ServerConfig.

        Raises:
            ConfigurationError: If a value cannot be parsed or the resulting
                combination is invalid (e.g. auth enabled without a token).

        Example:
            >>> ServerConfig.from_env({"MCP_TRANSPORT": "http", "PORT": "8080"}).port
            8080
        """
        env = os.environ if environ is None else environ

        transport = env.get("MCP_TRANSPORT", "").strip().lower()
        if not transport:
            deployed = bool(env.get("VERCEL")) or env.get("NODE_ENV") == "production"
            transport = "http" if deployed else "stdio"

        try:
            port = int(env.get("PORT", "3000"))
        except ValueError:
            raise ConfigurationError(f"PORT must be an integer, got {env['PORT']!r}") from None

        try:
            test_timeout = float(env.get("MCP_TEST_TIMEOUT", "60"))
        except ValueError:
            raise ConfigurationError(
                f"MCP_TEST_TIMEOUT must be a number, got {env['MCP_TEST_TIMEOUT']!r}"
            ) from None

        auth_token = env.get("MCP_API_KEY") or None
        raw_auth = env.get("MCP_AUTH_ENABLED")
        auth_enabled = (
            _parse_bool("MCP_AUTH_ENABLED", raw_auth) if raw_auth is not None else bool(auth_token)
        )

        raw_root = env.get("MCP_WORKSPACE_ROOT")
        workspace_root = Path(raw_root).expanduser() if raw_root else None

        return cls(
            transport=transport,  # type: ignore[arg-type]
            host=env.get("HOST", "0.0.0.0"),
            port=port,
            auth_token=auth_token,
            auth_enabled=auth_enabled,
            test_timeout=test_timeout,
            workspace_root=workspace_root,
            collect_coverage=_parse_bool(
                "MCP_COLLECT_COVERAGE", env.get("MCP_COLLECT_COVERAGE", "true")
            ),
            log_level=env.get("MCP_LOG_LEVEL", "INFO").upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary for logging.

        The auth token itself is never included, only whether one is set.

        Returns:
            Dict of all config fields with ``auth_token`` replaced by
            ``auth_token_set``.

        Example:
            >>> "auth_token" in ServerConfig().to_dict()
            False
        """
        return {
            "transport": self.transport,
            "host": self.host,
            "port": self.port,
            "auth_token_set": self.auth_token is not None,
            "auth_enabled": self.auth_enabled,
            "test_timeout": self.test_timeout,
            "max_file_size": self.max_file_size,
            "workspace_root": str(self.workspace_root) if self.workspace_root else None,
            "collect_coverage": self.collect_coverage,
            "log_level": self.log_level,
        }


# Default configuration instance
DEFAULT_CONFIG = ServerConfig()
