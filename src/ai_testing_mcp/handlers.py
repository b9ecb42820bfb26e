"""
Tool handlers.

One coroutine per tool. Each takes the shared ToolContext and its typed
argument record and returns a ToolCallResult. Collaborator failures (missing
files, unsupported frameworks, paths outside the workspace) are raised as
ToolExecutionError; the dispatcher turns them into ``isError`` results.

``run_tests`` is the exception: a failing, timed-out or unrunnable test
suite is an outcome, not an error, so it always returns a TestRunResult
payload with ``success: false`` instead of raising.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

from ai_testing_mcp.analyzers import (
    analyze_project,
    build_insights,
    detect_test_framework,
    suggest_fixes,
    summarize_output,
)
from ai_testing_mcp.analyzers.patterns import SOURCE_EXTENSIONS, extract_spec_endpoints
from ai_testing_mcp.errors import ToolExecutionError
from ai_testing_mcp.filesystem import DefaultFilesystemAdapter, FilesystemAdapter
from ai_testing_mcp.generators import (
    generate_integration_tests,
    generate_unit_tests,
    setup_testing_framework,
)
from ai_testing_mcp.models import (
    DEFAULT_CONFIG,
    AnalyzeCodebaseArgs,
    AnalyzeTestResultsArgs,
    GenerateIntegrationTestsArgs,
    GenerateUnitTestsArgs,
    RunTestsArgs,
    ServerConfig,
    SetupTestingFrameworkArgs,
    SuggestFixesArgs,
    TestRunResult,
    ToolCallResult,
)
from ai_testing_mcp.runner import ProcessRunner, build_test_command

logger = logging.getLogger(__name__)


@dataclass
class ToolContext:
    """Collaborators shared by every handler.

    Attributes:
        fs: Filesystem adapter (in-memory in tests)
        runner: Subprocess runner for test suites
        config: Server configuration
        logger: Logger instance
    """

    fs: FilesystemAdapter = field(default_factory=DefaultFilesystemAdapter)
    runner: ProcessRunner = field(default_factory=ProcessRunner)
    config: ServerConfig = DEFAULT_CONFIG
    logger: logging.Logger = logger

    def resolve_path(self, raw: str) -> Path:
        """Resolve a user-supplied path, enforcing the workspace boundary.

        Without a configured workspace root the path is resolved as given
        (relative to the server's working directory).

        Args:
            raw: Path argument from the tool call.

        Returns:
            Absolute resolved path.

        Raises:
            ToolExecutionError: If the path escapes the workspace root.
        """
        path = Path(raw).expanduser()
        workspace = self.config.workspace_root
        if workspace is None:
            return self.fs.resolve(path)
        try:
            return self.fs.validate_path(path, workspace)
        except ValueError as e:
            raise ToolExecutionError(str(e)) from e


T = TypeVar("T")


async def _blocking(func: Callable[..., T], *args: Any) -> T:
    """Run blocking filesystem work in a thread, mapping I/O errors."""
    try:
        return await asyncio.to_thread(func, *args)
    except (OSError, UnicodeDecodeError) as e:
        raise ToolExecutionError(str(e)) from e


def _require_dir(ctx: ToolContext, path: Path) -> None:
    if not ctx.fs.is_dir(path):
        raise ToolExecutionError(f"Project path does not exist or is not a directory: {path}")


async def handle_analyze_codebase(ctx: ToolContext, args: AnalyzeCodebaseArgs) -> ToolCallResult:
    root = ctx.resolve_path(args.project_path)
    _require_dir(ctx, root)
    analysis = await _blocking(analyze_project, ctx.fs, root, ctx.config.max_file_size)
    return ToolCallResult.json(analysis)


async def handle_generate_unit_tests(
    ctx: ToolContext, args: GenerateUnitTestsArgs
) -> ToolCallResult:
    """Generate unit test skeletons for one source file.

    Raises:
        ToolExecutionError: If the file is missing, too large, or of an
            unsupported type.
    """
    path = ctx.resolve_path(args.file_path)
    if not ctx.fs.exists(path) or ctx.fs.is_dir(path):
        raise ToolExecutionError(f"File not found: {path}")
    size = await _blocking(ctx.fs.file_size, path)
    if size > ctx.config.max_file_size:
        raise ToolExecutionError(
            f"File too large ({size} bytes, max {ctx.config.max_file_size}): {path}"
        )

    source = await _blocking(ctx.fs.read_text, path)
    return ToolCallResult.text(
        generate_unit_tests(source, str(path), args.function_name, args.test_framework)
    )


async def handle_generate_integration_tests(
    ctx: ToolContext, args: GenerateIntegrationTestsArgs
) -> ToolCallResult:
    """Generate integration tests from scanned and specified endpoints.

    Endpoints found in the project come first, followed by any extra
    "METHOD /path" entries in ``apiSpec``.
    """
    root = ctx.resolve_path(args.project_path)
    _require_dir(ctx, root)
    analysis = await _blocking(analyze_project, ctx.fs, root, ctx.config.max_file_size)

    endpoints = list(analysis["apiEndpoints"])
    if args.api_spec:
        endpoints.extend(extract_spec_endpoints(args.api_spec))

    language = analysis["language"] or "javascript"
    return ToolCallResult.text(generate_integration_tests(endpoints, language))


def _run_failure(
    errors: str, framework: str | None = None, command: list[str] | None = None
) -> ToolCallResult:
    result: TestRunResult = {"success": False, "output": "", "errors": errors}
    if framework:
        result["framework"] = framework
    if command:
        result["command"] = command
    return ToolCallResult.json(result)


async def handle_run_tests(ctx: ToolContext, args: RunTestsArgs) -> ToolCallResult:
    """Run a project's test suite and report the outcome.

    The framework is auto-detected when not given. Every execution outcome,
    including a non-zero exit, a timeout, a runner that cannot be started
    and a project with nothing to test, is returned as a TestRunResult
    payload; success is decided by exit code 0.

    Raises:
        ToolExecutionError: Only if the path escapes the workspace root.
    """
    root = ctx.resolve_path(args.project_path)
    if not ctx.fs.is_dir(root):
        return _run_failure(f"Project path does not exist or is not a directory: {root}")

    try:
        files = await _blocking(ctx.fs.walk_files, root)
    except ToolExecutionError as e:
        return _run_failure(str(e))
    if not any(path.suffix in SOURCE_EXTENSIONS for path in files):
        return _run_failure(f"No source or test files found in {root}")

    framework = args.framework or await asyncio.to_thread(detect_test_framework, ctx.fs, root)
    try:
        command = build_test_command(framework, args.test_pattern, ctx.config.collect_coverage)
    except ToolExecutionError as e:
        return _run_failure(str(e), framework)
    try:
        process = await ctx.runner.run(command, root, ctx.config.test_timeout)
    except ToolExecutionError as e:
        ctx.logger.warning(f"run_tests could not start {framework}: {e}")
        return _run_failure(str(e), framework, command)

    summary = summarize_output(f"{process.stdout}\n{process.stderr}", framework)
    result: TestRunResult = {
        "success": process.succeeded,
        "output": process.stdout,
        "errors": process.stderr,
        "framework": framework,
        "command": command,
        "exitCode": process.exit_code,
        "timedOut": process.timed_out,
        "summary": summary,
        "suggestions": build_insights(summary),
    }
    if "coverage" in summary:
        result["coverage"] = summary["coverage"]

    ctx.logger.info(
        f"run_tests {framework} in {root}: exit={process.exit_code} "
        f"passed={summary['passed']} failed={summary['failed']}"
    )
    return ToolCallResult.json(result)


async def handle_analyze_test_results(
    ctx: ToolContext, args: AnalyzeTestResultsArgs
) -> ToolCallResult:
    framework = None
    if args.project_path:
        root = ctx.resolve_path(args.project_path)
        if ctx.fs.is_dir(root):
            framework = await asyncio.to_thread(detect_test_framework, ctx.fs, root)

    summary = summarize_output(args.test_output, framework)
    return ToolCallResult.json({"summary": summary, "insights": build_insights(summary)})


async def handle_suggest_fixes(ctx: ToolContext, args: SuggestFixesArgs) -> ToolCallResult:
    return ToolCallResult.json(
        suggest_fixes(args.failure_output, args.source_code, args.test_code)
    )


async def handle_setup_testing_framework(
    ctx: ToolContext, args: SetupTestingFrameworkArgs
) -> ToolCallResult:
    """Scaffold a testing framework; existing files are left untouched."""
    root = ctx.resolve_path(args.project_path)
    report = await _blocking(
        setup_testing_framework, ctx.fs, root, args.framework, args.language
    )
    return ToolCallResult.json(report)
