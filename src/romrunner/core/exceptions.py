"""Exception hierarchy with error codes for romrunner.

External-process outcomes are recovered by the launcher and never reach the host;
invariant violations are raised and left to propagate.
"""

from dataclasses import dataclass, field
from typing import Any

# Error codes
E_NOT_FOUND = "E_NOT_FOUND"
E_CRASHED = "E_CRASHED"
E_TIMEOUT = "E_TIMEOUT"
E_UNKNOWN = "E_UNKNOWN"
E_VALIDATION = "E_VALIDATION"
E_INVARIANT = "E_INVARIANT"

_START_ERROR_CODES = {
    "failed_to_start": E_NOT_FOUND,
    "crashed": E_CRASHED,
    "timed_out": E_TIMEOUT,
}


@dataclass
class RomRunnerException(Exception):  # noqa: N818
    """Base exception for all romrunner-specific errors.

    Provides structured error handling with error codes and metadata for
    consistent error reporting across the system.
    """

    message: str
    error_code: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)


@dataclass
class ProcessStartError(RomRunnerException):
    """The OS could not create the child process.

    Raised by command executors and caught by the launcher, which turns it into
    a warning and a ``process_failed`` event.
    """

    program: str = ""
    error: str = "unknown"

    def __post_init__(self) -> None:
        """Initialize with start-failure metadata."""
        if not self.error_code:
            self.error_code = _START_ERROR_CODES.get(self.error, E_UNKNOWN)
        if self.program:
            self.metadata["program"] = self.program
        self.metadata["process_error"] = self.error
        super().__post_init__()


@dataclass
class LauncherInvariantError(RomRunnerException):
    """A broken caller contract or an impossible OS report.

    Never recovered from: these indicate a defect, not an external failure.
    """

    def __post_init__(self) -> None:
        if not self.error_code:
            self.error_code = E_INVARIANT
        super().__post_init__()


@dataclass
class LauncherStateError(LauncherInvariantError):
    """A launch was requested while another one is still active."""

    state: str = ""

    def __post_init__(self) -> None:
        if self.state:
            self.metadata["state"] = self.state
        super().__post_init__()


@dataclass
class ProcessChannelError(LauncherInvariantError):
    """A read/write channel error was reported for a process we never talk to."""

    program: str = ""

    def __post_init__(self) -> None:
        if self.program:
            self.metadata["program"] = self.program
        super().__post_init__()


@dataclass
class ConfigurationError(RomRunnerException):
    """Error in system configuration.

    Raised for invalid config values, missing required settings,
    or configuration file problems.
    """

    key: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Initialize with configuration-specific metadata."""
        if not self.error_code:
            self.error_code = E_VALIDATION
        if self.key:
            self.metadata["config_key"] = self.key
        if self.reason:
            self.metadata["reason"] = self.reason
        super().__post_init__()


def format_error_for_user(exception: RomRunnerException) -> str:
    """Format exception for user-friendly display.

    Args:
        exception: The romrunner exception to format

    Returns:
        Human-readable error message without internal details
    """
    if isinstance(exception, ProcessStartError):
        if exception.program:
            return f"Could not start '{exception.program}': {exception.message}"
        return f"Could not start process: {exception.message}"

    if isinstance(exception, LauncherInvariantError):
        return f"Internal launcher error: {exception.message}"

    if isinstance(exception, ConfigurationError):
        if exception.key:
            return f"Configuration error '{exception.key}': {exception.message}"
        return f"Configuration error: {exception.message}"

    return str(exception.message)


def format_error_for_log(exception: RomRunnerException) -> dict[str, Any]:
    """Format exception for structured logging.

    Args:
        exception: The romrunner exception to format

    Returns:
        Dictionary with structured error information for logs
    """
    log_data: dict[str, Any] = {
        "error_type": type(exception).__name__,
        "message": exception.message,
        "error_code": exception.error_code,
    }

    if exception.metadata:
        log_data["metadata"] = exception.metadata

    if isinstance(exception, ProcessStartError):
        if exception.program:
            log_data["program"] = exception.program
        log_data["process_error"] = exception.error

    elif isinstance(exception, LauncherStateError):
        if exception.state:
            log_data["state"] = exception.state

    elif isinstance(exception, ConfigurationError):
        if exception.key:
            log_data["config_key"] = exception.key
        if exception.reason:
            log_data["reason"] = exception.reason

    return log_data
