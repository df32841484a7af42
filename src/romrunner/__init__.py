"""
romrunner

Launch emulators and games from a command template: substitute the ROM path into
the template, run the program, and report its lifecycle back to the host.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from romrunner.core.command_builder import build_launch_command, split_command
from romrunner.core.config import LauncherConfig
from romrunner.core.events import EventBus, LaunchEvent
from romrunner.core.exceptions import (
    ConfigurationError,
    LauncherInvariantError,
    LauncherStateError,
    ProcessChannelError,
    ProcessStartError,
    RomRunnerException,
)
from romrunner.core.factory import create_launcher
from romrunner.core.launcher import LauncherState, ProcessLauncher
from romrunner.core.logger import configure_logging

# Convenience alias
Launcher = ProcessLauncher

__all__ = [
    "__version__",
    # Core
    "ProcessLauncher",
    "Launcher",
    "LauncherState",
    "LauncherConfig",
    "EventBus",
    "LaunchEvent",
    "build_launch_command",
    "split_command",
    "create_launcher",
    "configure_logging",
    # Exceptions
    "RomRunnerException",
    "ProcessStartError",
    "LauncherInvariantError",
    "LauncherStateError",
    "ProcessChannelError",
    "ConfigurationError",
]
