"""
Command Executor Service.

Runs an external process with stdin closed, captures stdout and stderr
incrementally, and always resolves to a CommandOutcome. A timeout or spawn
failure is reported as ``exit_code=None`` with whatever output was captured
up to that point; it never raises.
"""

import asyncio
import contextlib
import os
import signal
import time
from dataclasses import dataclass
from pathlib import Path

from uxaudit.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

# Call-site timeout policies (seconds)
ADVERSARIAL_TIMEOUT = 10.0
CLAIM_TIMEOUT = 10.0
PREREQUISITE_TIMEOUT = 10.0
FUNCTIONALITY_TIMEOUT = 30.0
INSTALL_TIMEOUT = 120.0

_READ_CHUNK = 4096
_DRAIN_GRACE = 1.0


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one bounded external-process invocation."""

    command: str
    stdout: str
    stderr: str
    exit_code: int | None
    duration: float
    timed_out: bool = False

    @property
    def completed(self) -> bool:
        """The process was observed to exit."""
        return self.exit_code is not None

    @property
    def succeeded(self) -> bool:
        """The process exited cleanly."""
        return self.exit_code == 0

    @property
    def failed(self) -> bool:
        """The process exited with a non-zero status."""
        return self.exit_code is not None and self.exit_code != 0

    @property
    def spawn_failed(self) -> bool:
        """The process never started."""
        return self.exit_code is None and not self.timed_out

    @property
    def did_not_fail(self) -> bool:
        """Exit 0, or still running when the timeout hit."""
        return self.exit_code == 0 or self.timed_out


async def _pump(stream: asyncio.StreamReader | None, sink: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        sink.extend(chunk)


def _kill(process: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError, PermissionError, OSError):
        os.killpg(os.getpgid(process.pid), signal.SIGKILL)
    with contextlib.suppress(ProcessLookupError):
        process.kill()


class CommandExecutor:
    """
    Bounded process runner.

    The timeout is a caller policy: every call site passes its own value.
    There are no retries; each call spawns at most one process.
    """

    def __init__(self, env: dict[str, str] | None = None):
        self.env = env

    async def run_async(
        self,
        executable: str,
        args: list[str] | None = None,
        cwd: str | Path | None = None,
        timeout: float = FUNCTIONALITY_TIMEOUT,
    ) -> CommandOutcome:
        """
        Execute a command asynchronously.

        Args:
            executable: Program name or path
            args: Argument list
            cwd: Working directory
            timeout: Execution timeout in seconds

        Returns:
            CommandOutcome (exit_code is None on timeout or spawn failure)
        """
        argv = [str(executable), *(args or [])]
        cmd_str = " ".join(argv)
        run_env = os.environ.copy()
        if self.env:
            run_env.update(self.env)

        logger.debug("executing_command", command=cmd_str, cwd=str(cwd or "."), timeout=timeout)

        start_time = time.perf_counter()
        stdout_buf = bytearray()
        stderr_buf = bytearray()

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(cwd) if cwd else None,
                env=run_env,
                start_new_session=True,  # own process group for cleanup
            )
        except OSError as e:
            logger.debug("command_spawn_failed", command=cmd_str, error=str(e))
            return CommandOutcome(
                command=cmd_str,
                stdout="",
                stderr=f"Execution error: {e!s}",
                exit_code=None,
                duration=time.perf_counter() - start_time,
            )

        readers = asyncio.gather(
            _pump(process.stdout, stdout_buf),
            _pump(process.stderr, stderr_buf),
        )

        timed_out = False
        try:
            await asyncio.wait_for(process.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning("command_timeout", command=cmd_str, timeout=timeout)
            _kill(process)
            with contextlib.suppress(asyncio.TimeoutError, ProcessLookupError):
                await asyncio.wait_for(process.wait(), timeout=_DRAIN_GRACE)

        try:
            await asyncio.wait_for(readers, timeout=_DRAIN_GRACE)
        except asyncio.TimeoutError:
            # grandchildren can hold the pipes open after the main process exits
            readers.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await readers

        duration = time.perf_counter() - start_time
        stdout_str = stdout_buf.decode("utf-8", errors="replace")
        stderr_str = stderr_buf.decode("utf-8", errors="replace")
        exit_code = None if timed_out else process.returncode

        if exit_code not in (0, None):
            logger.debug(
                "command_failed",
                command=cmd_str,
                exit_code=exit_code,
                stderr_snippet=stderr_str[:200],
            )
        else:
            logger.debug("command_finished", command=cmd_str, exit_code=exit_code, duration=duration)

        return CommandOutcome(
            command=cmd_str,
            stdout=stdout_str,
            stderr=stderr_str,
            exit_code=exit_code,
            duration=duration,
            timed_out=timed_out,
        )
