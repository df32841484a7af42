"""Launcher factory for creating configured ProcessLauncher instances.

Central factory function that can be used by the CLI or any host application.
"""

from pathlib import Path

from romrunner.core.config import LauncherConfig, load_config
from romrunner.core.events import EventBus
from romrunner.core.executors.subprocess_executor import SubprocessExecutor
from romrunner.core.launcher import ProcessLauncher
from romrunner.core.logger import RomRunnerLogger, configure_logging


def create_launcher(
    config: LauncherConfig | None = None,
    event_bus: EventBus | None = None,
    logger: RomRunnerLogger | None = None,
    profile: str = "default",
    project_root: Path | None = None,
) -> ProcessLauncher:
    """Create a ProcessLauncher backed by a SubprocessExecutor.

    Args:
        config: Launcher configuration (default: loaded from profile, project and env)
        event_bus: Bus for lifecycle events (default: new bus)
        logger: Logger instance (default: the launcher module logger, with
            the JSON handlers installed unless logging is already configured)
        profile: Profile used when config is not given
        project_root: Project directory used when config is not given

    Returns:
        Configured ProcessLauncher

    Raises:
        ConfigurationError: If loading the configuration fails
    """
    if config is None:
        config = load_config(profile, project_root)

    if logger is None:
        configure_logging()

    executor = SubprocessExecutor(start_timeout_s=config.start_timeout_s)

    return ProcessLauncher(
        executor=executor,
        event_bus=event_bus or EventBus(),
        logger=logger,
    )
