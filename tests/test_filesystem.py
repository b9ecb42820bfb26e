"""Tests for filesystem abstraction."""

from pathlib import Path

import pytest

from ai_testing_mcp.filesystem import (
    DefaultFilesystemAdapter,
    PathSecurityValidator,
    is_excluded_dir,
)
from tests.mock_filesystem import MockFilesystemAdapter


@pytest.mark.parametrize(
    ("name", "excluded"),
    [
        ("node_modules", True),
        (".git", True),
        ("__pycache__", True),
        ("venv", True),
        ("src", False),
        ("tests", False),
    ],
    ids=["node_modules", "hidden", "pycache", "venv", "src", "tests"],
)
def test_is_excluded_dir(name: str, excluded: bool) -> None:
    """Verify hidden and dependency directories are excluded from walks."""
    assert is_excluded_dir(name) is excluded


class TestMockFilesystemAdapter:
    """Tests for MockFilesystemAdapter."""

    def test_directories_implied_by_files(self) -> None:
        """Verify parents of stored files count as directories."""
        mock = MockFilesystemAdapter()
        mock.add_files("/app", {"src/index.js": ""})
        assert mock.is_dir(Path("/app/src"))
        assert mock.exists(Path("/app"))
        assert not mock.is_dir(Path("/app/src/index.js"))

    @pytest.mark.parametrize(
        ("path", "exception"),
        [(Path("/app/src"), IsADirectoryError), (Path("/app/missing.js"), FileNotFoundError)],
        ids=["directory", "missing"],
    )
    def test_read_text_errors(self, path: Path, exception: type[Exception]) -> None:
        """Verify reads of directories and missing files raise."""
        mock = MockFilesystemAdapter()
        mock.add_files("/app", {"src/index.js": ""})
        with pytest.raises(exception):
            mock.read_text(path)

    def test_walk_skips_excluded_directories(self) -> None:
        """Verify walks skip dependency directories but keep hidden files."""
        mock = MockFilesystemAdapter()
        root = mock.add_files(
            "/app",
            {
                "src/index.js": "",
                ".env": "",
                "node_modules/x/index.js": "",
                ".git/config": "",
            },
        )
        assert mock.walk_files(root) == [Path("/app/.env"), Path("/app/src/index.js")]

    @pytest.mark.parametrize(
        ("path", "exception"),
        [(Path("/app/index.js"), NotADirectoryError), (Path("/other"), FileNotFoundError)],
        ids=["file", "missing"],
    )
    def test_walk_errors(self, path: Path, exception: type[Exception]) -> None:
        """Verify walking a file or missing root raises like the real adapter."""
        mock = MockFilesystemAdapter()
        mock.add_files("/app", {"index.js": ""})
        with pytest.raises(exception):
            mock.walk_files(path)

    def test_write_records_and_sizes(self) -> None:
        """Verify writes are recorded and sizes count UTF-8 bytes."""
        mock = MockFilesystemAdapter()
        mock.write_text(Path("/app/tests/a.test.js"), "✓")
        assert mock.writes == [Path("/app/tests/a.test.js")]
        assert mock.is_dir(Path("/app/tests"))
        assert mock.file_size(Path("/app/tests/a.test.js")) == 3

    def test_resolve_relative_to_workspace(self) -> None:
        """Verify relative paths resolve under the mock workspace."""
        mock = MockFilesystemAdapter(workspace=Path("/ws"))
        assert mock.resolve(Path("a/../b")) == Path("/ws/b")

    def test_repr(self) -> None:
        """Verify __repr__ shows class name and state counts."""
        mock = MockFilesystemAdapter()
        mock.add_files("/app", {"a.py": ""})
        assert repr(mock) == "MockFilesystemAdapter(files=1, dirs=1)"


class TestDefaultFilesystemAdapter:
    """Tests for DefaultFilesystemAdapter against a temporary directory."""

    def test_default_repr(self) -> None:
        """Verify DefaultFilesystemAdapter has correct repr."""
        assert repr(DefaultFilesystemAdapter()) == "DefaultFilesystemAdapter()"

    def test_walk_files(self, tmp_path: Path) -> None:
        """Verify walks are sorted and prune excluded directories."""
        for relative in ("b.py", "a/index.js", ".env", "node_modules/dep/index.js", ".git/HEAD"):
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("")

        files = DefaultFilesystemAdapter().walk_files(tmp_path)

        assert files == [tmp_path / ".env", tmp_path / "a" / "index.js", tmp_path / "b.py"]

    def test_walk_errors(self, tmp_path: Path) -> None:
        """Verify walking a missing root or a file raises."""
        fs = DefaultFilesystemAdapter()
        (tmp_path / "file.txt").write_text("")
        with pytest.raises(FileNotFoundError):
            fs.walk_files(tmp_path / "missing")
        with pytest.raises(NotADirectoryError):
            fs.walk_files(tmp_path / "file.txt")

    def test_read_text_replaces_undecodable_bytes(self, tmp_path: Path) -> None:
        """Verify invalid UTF-8 is replaced instead of raising."""
        path = tmp_path / "binary.js"
        path.write_bytes(b"ok\xff")
        assert DefaultFilesystemAdapter().read_text(path) == "ok\ufffd"

    def test_write_creates_parents(self, tmp_path: Path) -> None:
        """Verify write_text creates missing parent directories."""
        fs = DefaultFilesystemAdapter()
        path = tmp_path / "tests" / "unit" / "test_x.py"
        fs.write_text(path, "def test_x(): pass\n")
        assert fs.read_text(path) == "def test_x(): pass\n"
        assert fs.file_size(path) == 19

    def test_read_json(self, tmp_path: Path) -> None:
        """Verify JSON files are parsed."""
        path = tmp_path / "package.json"
        path.write_text('{"devDependencies": {"jest": "^29"}}')
        assert DefaultFilesystemAdapter().read_json(path) == {"devDependencies": {"jest": "^29"}}

    def test_symlink_escape_rejected(self, tmp_path: Path) -> None:
        """Verify a real symlink leaving the workspace is rejected."""
        workspace = tmp_path / "ws"
        outside = tmp_path / "outside"
        workspace.mkdir()
        outside.mkdir()
        (workspace / "link").symlink_to(outside, target_is_directory=True)

        fs = DefaultFilesystemAdapter()
        with pytest.raises(ValueError, match="escapes workspace"):
            fs.validate_path(Path("link/secret.txt"), workspace)
        assert fs.validate_path(Path("src"), workspace) == workspace.resolve() / "src"


class TestPathSecurityValidator:
    """Tests for PathSecurityValidator."""

    def test_absolute_path_inside_workspace(self) -> None:
        """Verify absolute paths inside the workspace are accepted."""
        result = PathSecurityValidator.validate_workspace_boundary(
            Path("/project/file.txt"), Path("/project")
        )
        assert result == Path("/project/file.txt")

    def test_path_traversal_blocked(self) -> None:
        """Verify ../ sequences cannot leave the workspace."""
        with pytest.raises(ValueError, match="escapes workspace"):
            PathSecurityValidator.validate_workspace_boundary(
                Path("../../../etc/passwd"), Path("/project")
            )

    @pytest.mark.parametrize(
        ("target", "should_raise"),
        [(Path("/workspace/real"), False), (Path("/etc"), True)],
        ids=["inside", "escapes_workspace"],
    )
    def test_symlink_validation_via_adapter(self, target: Path, should_raise: bool) -> None:
        """Verify symlink targets are checked against the workspace."""
        mock = MockFilesystemAdapter()
        workspace = Path("/workspace")
        mock.symlinks[workspace / "link"] = target

        if should_raise:
            with pytest.raises(ValueError, match="escapes workspace"):
                mock.validate_path(Path("link/file.txt"), workspace)
        else:
            result = mock.validate_path(Path("link/file.txt"), workspace)
            assert result == Path("/workspace/real/file.txt")
