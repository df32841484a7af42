"""Process execution abstraction for the launcher.

Provides a pluggable interface for creating the child process so the launcher's
state machine can be driven by the real OS (SubprocessExecutor) or by a test
double without changing launcher code.
"""

import errno
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ExitStatus(str, Enum):
    """How a started process ended."""

    NORMAL = "normal"
    CRASH = "crash"


class ProcessError(str, Enum):
    """Why a process could not be started (or, for channels, talked to)."""

    FAILED_TO_START = "failed_to_start"
    CRASHED = "crashed"
    TIMED_OUT = "timed_out"
    READ_ERROR = "read_error"
    WRITE_ERROR = "write_error"
    UNKNOWN = "unknown"


@dataclass
class ProcessResult:
    """Terminal report of a process that was started.

    Attributes:
        pid: OS process id
        exit_code: Process return code (negative: terminated by that signal)
        exit_status: Normal exit or crash
        duration_ms: Time between start confirmation and exit in milliseconds
        metadata: Optional executor-specific metadata
    """

    pid: int
    exit_code: int
    exit_status: ExitStatus
    duration_ms: int
    metadata: dict[str, Any] | None = None


_NOT_STARTABLE = (FileNotFoundError, PermissionError, NotADirectoryError, IsADirectoryError)


def classify_start_error(exc: BaseException) -> ProcessError:
    """Map an exception raised while creating a process to a ProcessError."""
    if isinstance(exc, _NOT_STARTABLE):
        return ProcessError.FAILED_TO_START
    if isinstance(exc, TimeoutError):
        return ProcessError.TIMED_OUT
    if isinstance(exc, OSError) and exc.errno in (errno.ENOEXEC, errno.EACCES, errno.ENOENT):
        return ProcessError.FAILED_TO_START
    if isinstance(exc, subprocess.SubprocessError):
        # The child failed between fork and exec
        return ProcessError.CRASHED
    return ProcessError.UNKNOWN


class CommandExecutor(ABC):
    """Abstract interface for running one launched program to completion."""

    @abstractmethod
    async def execute(
        self,
        args: list[str],
        on_started: Callable[[int], None],
    ) -> ProcessResult:
        """Start ``args`` and wait until the process exits.

        Args:
            args: Program followed by its arguments
            on_started: Called once with the pid as soon as the OS confirms the start

        Returns:
            ProcessResult describing the exit

        Raises:
            ProcessStartError: If the process could not be created
        """
        ...

    @abstractmethod
    def get_name(self) -> str:
        """Get executor name for logging/debugging."""
        ...
