"""Tests for tool handlers against an in-memory filesystem and a fake runner."""

import json
from pathlib import Path
from typing import Any

import pytest

from ai_testing_mcp import handlers
from ai_testing_mcp.errors import ToolExecutionError
from ai_testing_mcp.handlers import ToolContext
from ai_testing_mcp.models import (
    AnalyzeCodebaseArgs,
    AnalyzeTestResultsArgs,
    GenerateIntegrationTestsArgs,
    GenerateUnitTestsArgs,
    RunTestsArgs,
    ServerConfig,
    SetupTestingFrameworkArgs,
    SuggestFixesArgs,
    ToolCallResult,
)
from ai_testing_mcp.runner import ProcessResult
from tests.mock_filesystem import MockFilesystemAdapter

JEST_PROJECT = {
    "package.json": '{"devDependencies": {"jest": "29"}}',
    "src/sum.js": "function sum(a, b) { return a + b; }\nmodule.exports = { sum };\n",
    "src/sum.test.js": "test('sum', () => {});\n",
}

JEST_PASSING = "PASS src/sum.test.js\nTests:       2 passed, 2 total\n"

PYTEST_FAILING = """\
FAILED tests/test_calc.py::test_divide - ZeroDivisionError
TOTAL            20      5    75%
==================== 1 failed, 3 passed in 0.12s ====================
"""


class FakeRunner:
    """Records run() calls and returns a canned result or raises."""

    def __init__(
        self, result: ProcessResult | None = None, error: Exception | None = None
    ) -> None:
        self.result = result or ProcessResult(0, "", "")
        self.error = error
        self.calls: list[tuple[list[str], Path, float]] = []

    async def run(self, command: list[str], cwd: Path, timeout: float) -> ProcessResult:
        self.calls.append((command, cwd, timeout))
        if self.error:
            raise self.error
        return self.result


def _context(
    fs: MockFilesystemAdapter, runner: FakeRunner | None = None, **config: Any
) -> ToolContext:
    return ToolContext(fs=fs, runner=runner or FakeRunner(), config=ServerConfig(**config))


def _payload(result: ToolCallResult) -> Any:
    return json.loads(result.content[0].text)


class TestAnalyzeCodebase:
    """Tests for handle_analyze_codebase."""

    @pytest.mark.asyncio
    async def test_returns_analysis_json(self) -> None:
        """Verify the analysis is returned as a JSON text result."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", JEST_PROJECT)

        result = await handlers.handle_analyze_codebase(_context(fs), AnalyzeCodebaseArgs("/proj"))

        analysis = _payload(result)
        assert result.is_error is False
        assert analysis["language"] == "javascript"
        assert analysis["testFramework"] == "jest"
        assert analysis["testableComponents"] == ["/proj/src/sum.js"]

    @pytest.mark.asyncio
    async def test_missing_project(self) -> None:
        """Verify a missing directory is an execution error."""
        with pytest.raises(ToolExecutionError, match="does not exist or is not a directory"):
            await handlers.handle_analyze_codebase(
                _context(MockFilesystemAdapter()), AnalyzeCodebaseArgs("/nope")
            )


class TestGenerateUnitTests:
    """Tests for handle_generate_unit_tests."""

    @pytest.mark.asyncio
    async def test_generates_for_file(self) -> None:
        """Verify the file is read and skeletons are generated."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"calc.py": "def add(a, b):\n    return a + b\n"})

        result = await handlers.handle_generate_unit_tests(
            _context(fs), GenerateUnitTestsArgs("/proj/calc.py")
        )

        assert "from calc import add" in result.content[0].text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/proj/missing.py", "/proj"], ids=["missing", "directory"])
    async def test_file_not_found(self, path: str) -> None:
        """Verify missing files and directories are rejected."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"calc.py": ""})
        with pytest.raises(ToolExecutionError, match="File not found"):
            await handlers.handle_generate_unit_tests(_context(fs), GenerateUnitTestsArgs(path))

    @pytest.mark.asyncio
    async def test_file_too_large(self) -> None:
        """Verify files over the configured size are not read."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"big.py": "def f(): pass\n" * 10})
        with pytest.raises(ToolExecutionError, match="File too large"):
            await handlers.handle_generate_unit_tests(
                _context(fs, max_file_size=16), GenerateUnitTestsArgs("/proj/big.py")
            )

    @pytest.mark.asyncio
    async def test_read_errors_become_execution_errors(self) -> None:
        """Verify OS errors while reading surface as ToolExecutionError."""

        class UnreadableFilesystem(MockFilesystemAdapter):
            def read_text(self, path: Path) -> str:
                raise PermissionError(f"Permission denied: {path}")

            def file_size(self, path: Path) -> int:
                return 1

        fs = UnreadableFilesystem()
        fs.add_files("/proj", {"calc.py": "def add(): pass\n"})
        with pytest.raises(ToolExecutionError, match="Permission denied"):
            await handlers.handle_generate_unit_tests(
                _context(fs), GenerateUnitTestsArgs("/proj/calc.py")
            )


class TestGenerateIntegrationTests:
    """Tests for handle_generate_integration_tests."""

    @pytest.mark.asyncio
    async def test_scanned_and_specified_endpoints(self) -> None:
        """Verify project endpoints and apiSpec endpoints are both covered."""
        fs = MockFilesystemAdapter()
        fs.add_files(
            "/api",
            {"requirements.txt": "flask\n", "app.py": "@app.route('/health')\ndef health(): pass\n"},
        )

        result = await handlers.handle_generate_integration_tests(
            _context(fs), GenerateIntegrationTestsArgs("/api", "Also POST /orders")
        )

        code = result.content[0].text
        assert "def test_get_health_responds():" in code
        assert "def test_post_orders_responds():" in code

    @pytest.mark.asyncio
    async def test_unknown_language_defaults_to_javascript(self) -> None:
        """Verify projects without a manifest get supertest tests."""
        fs = MockFilesystemAdapter()
        fs.add_files("/api", {"server.js": "app.get('/ping', h);\n"})

        result = await handlers.handle_generate_integration_tests(
            _context(fs), GenerateIntegrationTestsArgs("/api")
        )

        assert "request(app).get('/ping')" in result.content[0].text


class TestRunTests:
    """Tests for handle_run_tests."""

    @pytest.mark.asyncio
    async def test_missing_project_is_failed_run(self) -> None:
        """Verify a missing directory yields success false rather than an error."""
        runner = FakeRunner()
        result = await handlers.handle_run_tests(
            _context(MockFilesystemAdapter(), runner), RunTestsArgs("/nope")
        )
        payload = _payload(result)
        assert payload["success"] is False
        assert "does not exist" in payload["errors"]
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_project_without_sources(self) -> None:
        """Verify an empty project reports success false without running anything."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"README.md": "# docs"})
        runner = FakeRunner()

        payload = _payload(
            await handlers.handle_run_tests(_context(fs, runner), RunTestsArgs("/proj"))
        )

        assert payload == {
            "success": False,
            "output": "",
            "errors": "No source or test files found in /proj",
        }
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_detected_framework_passing_run(self) -> None:
        """Verify framework detection, command, cwd, timeout and summary."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", JEST_PROJECT)
        runner = FakeRunner(ProcessResult(0, JEST_PASSING, ""))

        payload = _payload(
            await handlers.handle_run_tests(
                _context(fs, runner, test_timeout=12.0), RunTestsArgs("/proj")
            )
        )

        assert payload["success"] is True
        assert payload["framework"] == "jest"
        assert payload["command"] == ["npx", "jest", "--verbose", "--coverage"]
        assert payload["exitCode"] == 0
        assert payload["timedOut"] is False
        assert payload["summary"]["passed"] == 2
        assert payload["suggestions"] == ["All 2 tests passed."]
        assert runner.calls == [(payload["command"], Path("/proj"), 12.0)]

    @pytest.mark.asyncio
    async def test_failing_run_with_explicit_framework(self) -> None:
        """Verify a non-zero exit is reported with parsed failures and coverage."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"calc.py": "", "tests/test_calc.py": ""})
        runner = FakeRunner(ProcessResult(1, PYTEST_FAILING, ""))

        payload = _payload(
            await handlers.handle_run_tests(
                _context(fs, runner, collect_coverage=False),
                RunTestsArgs("/proj", "tests/test_calc.py", "pytest"),
            )
        )

        assert payload["success"] is False
        assert payload["command"][-2:] == ["tests/test_calc.py", "-v"]
        assert payload["summary"]["failed"] == 1
        assert payload["summary"]["failedTests"] == ["tests/test_calc.py::test_divide"]
        assert payload["coverage"] == "75%"

    @pytest.mark.asyncio
    async def test_timed_out_run(self) -> None:
        """Verify a timeout is reported as a failed run."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", JEST_PROJECT)
        runner = FakeRunner(ProcessResult(-9, "", "Test run timed out", timed_out=True))

        payload = _payload(await handlers.handle_run_tests(_context(fs, runner), RunTestsArgs("/proj")))

        assert payload["success"] is False
        assert payload["timedOut"] is True
        assert payload["errors"] == "Test run timed out"

    @pytest.mark.asyncio
    async def test_runner_not_installed(self) -> None:
        """Verify a runner that cannot start is a failed run carrying the command."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", JEST_PROJECT)
        runner = FakeRunner(error=ToolExecutionError("Failed to start npx: not found"))

        payload = _payload(await handlers.handle_run_tests(_context(fs, runner), RunTestsArgs("/proj")))

        assert payload["success"] is False
        assert payload["errors"] == "Failed to start npx: not found"
        assert payload["framework"] == "jest"
        assert payload["command"][0] == "npx"

    @pytest.mark.asyncio
    async def test_unsupported_framework(self) -> None:
        """Verify an unsupported framework argument is a failed run."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", JEST_PROJECT)
        runner = FakeRunner()

        payload = _payload(
            await handlers.handle_run_tests(
                _context(fs, runner), RunTestsArgs("/proj", framework="jasmine")
            )
        )

        assert payload["success"] is False
        assert payload["errors"] == "Unsupported test framework: jasmine"
        assert "command" not in payload
        assert runner.calls == []


class TestWorkspaceBoundary:
    """Tests for ToolContext.resolve_path with a workspace root."""

    @pytest.mark.asyncio
    async def test_relative_path_inside_workspace(self) -> None:
        """Verify relative paths resolve against the workspace root."""
        fs = MockFilesystemAdapter()
        fs.add_files("/workspace/proj", JEST_PROJECT)
        ctx = _context(fs, workspace_root=Path("/workspace"))

        result = await handlers.handle_analyze_codebase(ctx, AnalyzeCodebaseArgs("proj"))

        assert _payload(result)["language"] == "javascript"

    @pytest.mark.parametrize(
        "raw", ["../etc", "/etc/passwd", "proj/../../etc"], ids=["dotdot", "absolute", "nested"]
    )
    def test_escape_rejected(self, raw: str) -> None:
        """Verify paths outside the workspace raise ToolExecutionError."""
        ctx = _context(MockFilesystemAdapter(), workspace_root=Path("/workspace"))
        with pytest.raises(ToolExecutionError, match="Path escapes workspace"):
            ctx.resolve_path(raw)

    def test_symlink_escape_rejected(self) -> None:
        """Verify a symlink pointing outside the workspace is rejected."""
        fs = MockFilesystemAdapter()
        fs.symlinks[Path("/workspace/link")] = Path("/etc")
        ctx = _context(fs, workspace_root=Path("/workspace"))
        with pytest.raises(ToolExecutionError, match="Path escapes workspace"):
            ctx.resolve_path("link/passwd")

    @pytest.mark.asyncio
    async def test_run_tests_escape_raises(self) -> None:
        """Verify run_tests raises rather than reporting a failed run for an escape."""
        ctx = _context(MockFilesystemAdapter(), workspace_root=Path("/workspace"))
        with pytest.raises(ToolExecutionError):
            await handlers.handle_run_tests(ctx, RunTestsArgs("/tmp"))


class TestAnalyzeTestResults:
    """Tests for handle_analyze_test_results."""

    AMBIGUOUS = "Tests:       2 passed, 2 total\n\n  2 passing (4ms)\n"

    @pytest.mark.asyncio
    async def test_project_framework_used_as_hint(self) -> None:
        """Verify the project's test framework guides parsing."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {"package.json": '{"devDependencies": {"mocha": "10"}}'})

        payload = _payload(
            await handlers.handle_analyze_test_results(
                _context(fs), AnalyzeTestResultsArgs(self.AMBIGUOUS, "/proj")
            )
        )

        assert payload["summary"]["framework"] == "mocha"
        assert payload["insights"] == ["All 2 tests passed."]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_path", [None, "/missing"], ids=["none", "missing"])
    async def test_without_usable_project(self, project_path: str | None) -> None:
        """Verify parsing falls back to output detection alone."""
        payload = _payload(
            await handlers.handle_analyze_test_results(
                _context(MockFilesystemAdapter()),
                AnalyzeTestResultsArgs(self.AMBIGUOUS, project_path),
            )
        )
        assert payload["summary"]["framework"] == "jest"


class TestSuggestFixesHandler:
    """Tests for handle_suggest_fixes."""

    @pytest.mark.asyncio
    async def test_returns_suggestions(self) -> None:
        """Verify suggestions are returned as JSON."""
        payload = _payload(
            await handlers.handle_suggest_fixes(
                _context(MockFilesystemAdapter()),
                SuggestFixesArgs("ReferenceError: total is not defined"),
            )
        )
        assert payload["suggestions"][0]["category"] == "reference"


class TestSetupTestingFrameworkHandler:
    """Tests for handle_setup_testing_framework."""

    @pytest.mark.asyncio
    async def test_scaffolds_project(self) -> None:
        """Verify the scaffold report is returned and files are written."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {})

        payload = _payload(
            await handlers.handle_setup_testing_framework(
                _context(fs), SetupTestingFrameworkArgs("/proj", "mocha", "javascript")
            )
        )

        assert payload["created"] == [".mocharc.json", "test/example.spec.js"]
        assert Path("/proj/test/example.spec.js") in fs.files

    @pytest.mark.asyncio
    async def test_unsupported_combination(self) -> None:
        """Verify unsupported combinations raise ToolExecutionError."""
        fs = MockFilesystemAdapter()
        fs.add_files("/proj", {})
        with pytest.raises(ToolExecutionError, match="Unsupported framework"):
            await handlers.handle_setup_testing_framework(
                _context(fs), SetupTestingFrameworkArgs("/proj", "rspec", "ruby")
            )
