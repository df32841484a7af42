"""Core modules for romrunner.

This package contains the command builder, the process launcher and the
supporting exceptions, events, logging and configuration.
"""

from .command_builder import (
    Placeholder,
    build_launch_command,
    complete_basename,
    prepare_argument,
    split_command,
)
from .command_executor import (
    CommandExecutor,
    ExitStatus,
    ProcessError,
    ProcessResult,
    classify_start_error,
)
from .exceptions import (
    # Error codes
    E_CRASHED,
    E_INVARIANT,
    E_NOT_FOUND,
    E_TIMEOUT,
    E_UNKNOWN,
    E_VALIDATION,
    ConfigurationError,
    LauncherInvariantError,
    LauncherStateError,
    ProcessChannelError,
    ProcessStartError,
    RomRunnerException,
    format_error_for_log,
    format_error_for_user,
)
from .launcher import ActiveProcess, LauncherState, ProcessLauncher

__all__ = [
    # Error codes
    "E_CRASHED",
    "E_INVARIANT",
    "E_NOT_FOUND",
    "E_TIMEOUT",
    "E_UNKNOWN",
    "E_VALIDATION",
    # Exception classes
    "ConfigurationError",
    "LauncherInvariantError",
    "LauncherStateError",
    "ProcessChannelError",
    "ProcessStartError",
    "RomRunnerException",
    # Command building
    "Placeholder",
    "build_launch_command",
    "complete_basename",
    "prepare_argument",
    "split_command",
    # Execution
    "ActiveProcess",
    "CommandExecutor",
    "ExitStatus",
    "LauncherState",
    "ProcessError",
    "ProcessLauncher",
    "ProcessResult",
    "classify_start_error",
    # Error formatting utilities
    "format_error_for_log",
    "format_error_for_user",
]
