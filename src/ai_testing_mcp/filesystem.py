"""
Filesystem abstraction layer for tool handlers.

Provides Protocol-based dependency injection so that project scanning,
test generation and framework scaffolding can be unit tested against an
in-memory filesystem.

Features:
    - Protocol-based interface (structural typing)
    - Production adapter with pathlib/os/json
    - Recursive project walk skipping hidden and dependency directories
    - Workspace boundary validation for user-supplied paths

Usage:
    ```python
    # Production use
    fs = DefaultFilesystemAdapter()
    for path in fs.walk_files(Path('my-project')):
        ...

    # Testing use
    mock_fs = MockFilesystemAdapter()
    mock_fs.files[Path('/p/package.json')] = '{"devDependencies": {"jest": "^29"}}'
    ```
"""

import json
import os
from pathlib import Path
from typing import Protocol, TypeAlias, cast

# Type alias for JSON data structures
JSONValue: TypeAlias = dict[str, "JSONValue"] | list["JSONValue"] | str | int | float | bool | None

# Dependency and tooling directories never scanned, in addition to hidden ones
EXCLUDED_DIRS = frozenset({"node_modules", "__pycache__", "venv", "site-packages", "vendor"})


def is_excluded_dir(name: str) -> bool:
    """Return True if a directory name should be skipped during project walks."""
    return name.startswith(".") or name in EXCLUDED_DIRS


class FilesystemAdapter(Protocol):
    """Protocol defining filesystem operations used by tool handlers.

    Implementations must provide all methods with matching signatures.
    """

    def exists(self, path: Path) -> bool:
        """Check if a file or directory exists at path.

        Args:
            path: Path to check.

        Returns:
            True if path exists, False otherwise.
        """
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if path is an existing directory."""
        ...

    def read_text(self, path: Path) -> str:
        """Read file content as a string.

        Undecodable bytes are replaced rather than raising, because project
        scans read arbitrary files.

        Args:
            path: File to read.

        Returns:
            Complete file content.

        Raises:
            FileNotFoundError: If path does not exist.
            IsADirectoryError: If path is a directory.
        """
        ...

    def read_json(self, path: Path) -> JSONValue:
        """Read and parse a JSON file.

        Args:
            path: JSON file such as package.json.

        Returns:
            Parsed JSON value.

        Raises:
            FileNotFoundError: If path does not exist.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Write text to a file, creating parent directories.

        Args:
            path: Output file path.
            content: Text to write.

        Raises:
            PermissionError: If path is not writable.
        """
        ...

    def file_size(self, path: Path) -> int:
        """Return the size of a file in bytes."""
        ...

    def walk_files(self, root: Path) -> list[Path]:
        """List all regular files under root, recursively.

        Skips hidden directories and dependency directories (see
        ``EXCLUDED_DIRS``). Hidden *files* are still returned. The result is
        sorted so scans are deterministic.

        Args:
            root: Directory to walk.

        Returns:
            Sorted list of file paths.

        Raises:
            FileNotFoundError: If root does not exist.
            NotADirectoryError: If root is not a directory.
        """
        ...

    def resolve(self, path: Path) -> Path:
        """Resolve path to an absolute canonical path."""
        ...

    def validate_path(self, path: Path, workspace: Path) -> Path:
        """Validate a user-provided path stays within workspace bounds.

        Args:
            path: User-provided path, absolute or relative to workspace.
            workspace: Workspace root the path must stay within.

        Returns:
            Resolved absolute path.

        Raises:
            ValueError: If the path escapes the workspace.
        """
        ...


class PathSecurityValidator:
    """Validates paths against workspace boundaries.

    Prevents callers from pointing tools at files outside the configured
    workspace via ``../`` sequences, absolute paths or symlinks.
    """

    @staticmethod
    def validate_workspace_boundary(
        path: Path,
        workspace: Path,
        fs: "FilesystemAdapter | None" = None,
    ) -> Path:
        """Validate path stays within workspace boundaries.

        Relative paths are joined to the workspace; absolute paths are taken
        as-is. The result is resolved (following symlinks) and must lie
        inside the resolved workspace.

        Args:
            path: User-provided path (absolute or relative).
            workspace: Workspace root directory boundary.
            fs: Optional FilesystemAdapter used for resolution.
                If None, uses Path.resolve directly.

        Returns:
            Validated absolute path safe to access.

        Raises:
            ValueError: If path escapes workspace boundaries.

        Example:
            >>> ws = Path('/project')
            >>> PathSecurityValidator.validate_workspace_boundary(Path('../etc'), ws)
            Traceback (most recent call last):
            ...
            ValueError: Path escapes workspace: ../etc -> /etc
        """

        def resolve(p: Path) -> Path:
            return fs.resolve(p) if fs else p.resolve()

        full_path = path if path.is_absolute() else workspace / path
        workspace_resolved = resolve(workspace)
        resolved = resolve(full_path)

        try:
            resolved.relative_to(workspace_resolved)
        except ValueError:
            raise ValueError(f"Path escapes workspace: {path} -> {resolved}") from None

        return resolved


class DefaultFilesystemAdapter:
    """Production filesystem adapter using pathlib and os.walk.

    Stateless; safe to share across concurrent tool calls.

    Example:
        >>> fs = DefaultFilesystemAdapter()
        >>> files = fs.walk_files(Path('.'))
    """

    def __repr__(self) -> str:
        return "DefaultFilesystemAdapter()"

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")

    def read_json(self, path: Path) -> JSONValue:
        with open(path, encoding="utf-8") as f:
            return cast(JSONValue, json.load(f))

    def write_text(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def file_size(self, path: Path) -> int:
        return path.stat().st_size

    def walk_files(self, root: Path) -> list[Path]:
        """List regular files under root, skipping excluded directories.

        Uses os.walk with in-place pruning so excluded trees (notably
        node_modules) are never descended into.

        Args:
            root: Directory to walk.

        Returns:
            Sorted list of file paths.

        Raises:
            FileNotFoundError: If root does not exist.
            NotADirectoryError: If root is not a directory.

        Example:
            >>> fs.walk_files(Path('project'))
            [PosixPath('project/package.json'), PosixPath('project/src/app.js')]
        """
        if not root.exists():
            raise FileNotFoundError(f"No such directory: {root}")
        if not root.is_dir():
            raise NotADirectoryError(f"Not a directory: {root}")

        files: list[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = [d for d in dirnames if not is_excluded_dir(d)]
            base = Path(dirpath)
            for name in filenames:
                candidate = base / name
                if candidate.is_file():
                    files.append(candidate)
        return sorted(files)

    def resolve(self, path: Path) -> Path:
        return path.resolve()

    def validate_path(self, path: Path, workspace: Path) -> Path:
        return PathSecurityValidator.validate_workspace_boundary(path, workspace, self)
