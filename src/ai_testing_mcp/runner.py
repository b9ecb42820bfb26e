"""
Subprocess runner for test suites.

Runs a command without a shell under a wall-clock timeout. A process that
outlives its timeout is killed and reaped before the call returns, so no
test run can leave a child process behind.
"""

import asyncio
import logging
import os
import signal
import sys
from dataclasses import dataclass
from pathlib import Path

from ai_testing_mcp.errors import ToolExecutionError

logger = logging.getLogger(__name__)

SUPPORTED_FRAMEWORKS = ("jest", "mocha", "vitest", "pytest", "go")

# Output captured per stream is truncated beyond this many characters
MAX_OUTPUT_CHARS = 200_000

_POSIX = os.name == "posix"


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a finished (or killed) subprocess.

    Attributes:
        exit_code: Process return code; None only if it could not be reaped
        stdout: Decoded standard output
        stderr: Decoded standard error
        timed_out: True if the process was killed at the timeout
    """

    exit_code: int | None
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return not self.timed_out and self.exit_code == 0


def build_test_command(
    framework: str, test_pattern: str | None = None, coverage: bool = True
) -> list[str]:
    """Build the argv that runs a framework's test suite.

    Args:
        framework: One of ``SUPPORTED_FRAMEWORKS``.
        test_pattern: Optional file pattern or test selector, appended as a
            single argument (never shell-interpreted).
        coverage: Whether to add the framework's coverage flag.

    Returns:
        Command argument list.

    Raises:
        ToolExecutionError: If the framework is not supported.

    Example:
        >>> build_test_command("go", "./pkg/...", coverage=False)
        ['go', 'test', './pkg/...', '-v']
    """
    pattern = [test_pattern] if test_pattern else []

    if framework == "jest":
        return ["npx", "jest", *pattern, "--verbose", *(["--coverage"] if coverage else [])]
    if framework == "mocha":
        return ["npx", "mocha", *pattern, "--reporter", "spec"]
    if framework == "vitest":
        return ["npx", "vitest", "run", *pattern, *(["--coverage"] if coverage else [])]
    if framework == "pytest":
        return [sys.executable, "-m", "pytest", *pattern, "-v", *(["--cov=."] if coverage else [])]
    if framework == "go":
        return ["go", "test", *pattern, "-v", *(["-cover"] if coverage else [])]

    raise ToolExecutionError(f"Unsupported test framework: {framework}")


def _decode(data: bytes) -> str:
    text = data.decode("utf-8", errors="replace")
    if len(text) > MAX_OUTPUT_CHARS:
        return text[:MAX_OUTPUT_CHARS] + "\n... [output truncated]"
    return text


class ProcessRunner:
    """Runs commands as asyncio subprocesses with a timeout.

    Each call owns its own process handle; the runner keeps no state and is
    safe to share between concurrent tool calls.

    Attributes:
        kill_grace: Seconds to wait for a killed process to be reaped.
        logger: Logger instance.
    """

    def __init__(
        self, kill_grace: float = 5.0, logger_instance: logging.Logger | None = None
    ) -> None:
        self.kill_grace = kill_grace
        self.logger = logger_instance or logger

    async def run(self, command: list[str], cwd: Path, timeout: float) -> ProcessResult:
        """Run a command to completion or until the timeout elapses.

        Args:
            command: Program and arguments; executed directly, no shell.
            cwd: Working directory for the process.
            timeout: Wall-clock limit in seconds.

        Returns:
            ProcessResult. On timeout, ``timed_out`` is True and whatever
            output was produced before the kill is not available.

        Raises:
            ToolExecutionError: If the program cannot be started (not
                installed, not executable, bad working directory).

        Example:
            >>> result = await ProcessRunner().run(["go", "test"], Path("svc"), 60)
            >>> result.succeeded
            True
        """
        self.logger.info(f"Running {' '.join(command)} in {cwd} (timeout {timeout}s)")
        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                # own process group so runner grandchildren (npx -> node) die too
                start_new_session=_POSIX,
            )
        except OSError as e:
            raise ToolExecutionError(f"Failed to start {command[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except TimeoutError:
            await self._kill(process)
            self.logger.warning(f"{command[0]} exceeded {timeout}s timeout; process killed")
            return ProcessResult(
                exit_code=process.returncode,
                stdout="",
                stderr=f"Test run timed out after {timeout:g} seconds and was terminated",
                timed_out=True,
            )

        return ProcessResult(
            exit_code=process.returncode,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
        )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            if _POSIX:
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            pass  # already exited; still reap it below
        try:
            await asyncio.wait_for(process.wait(), timeout=self.kill_grace)
        except TimeoutError:
            self.logger.error(f"Process {process.pid} did not exit after kill")
