"""asyncio subprocess backend for the launcher.

The child's stdin is closed and its stdout/stderr are inherited: nothing is
read from or written to the launched program.
"""

import asyncio
import contextlib
import subprocess
import sys
from collections.abc import Callable

from romrunner.core.command_executor import (
    CommandExecutor,
    ExitStatus,
    ProcessError,
    ProcessResult,
    classify_start_error,
)
from romrunner.core.exceptions import ProcessStartError


class SubprocessExecutor(CommandExecutor):
    """Execute programs with asyncio.create_subprocess_exec."""

    def __init__(self, start_timeout_s: float = 30.0) -> None:
        """Initialize subprocess executor.

        Args:
            start_timeout_s: How long process creation may take before it is
                reported as timed out
        """
        self.start_timeout_s = start_timeout_s

    def get_name(self) -> str:
        return "subprocess"

    async def execute(
        self,
        args: list[str],
        on_started: Callable[[int], None],
    ) -> ProcessResult:
        """Start the program and block until it exits.

        Args:
            args: Program followed by its arguments
            on_started: Called with the pid once the process exists

        Returns:
            ProcessResult with exit code and exit status

        Raises:
            ProcessStartError: If the process could not be created
        """
        if not args:
            raise ProcessStartError(
                "No program given", program="", error=ProcessError.FAILED_TO_START.value
            )

        program = args[0]
        loop = asyncio.get_running_loop()

        try:
            process = await asyncio.wait_for(
                asyncio.create_subprocess_exec(
                    *args,
                    stdin=subprocess.DEVNULL,
                ),
                timeout=self.start_timeout_s,
            )
        except (OSError, ValueError, TimeoutError, subprocess.SubprocessError) as e:
            raise ProcessStartError(
                f"Failed to start process: {e}",
                program=program,
                error=classify_start_error(e).value,
            ) from e

        start_time = loop.time()
        on_started(process.pid)

        returncode = await process.wait()

        # No-op: the process has already been reaped
        with contextlib.suppress(ProcessLookupError):
            process.terminate()

        duration_ms = int((loop.time() - start_time) * 1000)

        return ProcessResult(
            pid=process.pid,
            exit_code=returncode,
            exit_status=ExitStatus.CRASH if returncode < 0 else ExitStatus.NORMAL,
            duration_ms=duration_ms,
            metadata={"platform": sys.platform, "program": program},
        )
