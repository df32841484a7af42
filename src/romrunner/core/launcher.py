"""Process launcher.

Runs one external program at a time for the host: builds the command line from
a template and a ROM path, starts the program, waits for it to exit and reports
what happened through the logger and the event bus.

    IDLE -> STARTING -> RUNNING -> TERMINATED -> IDLE
                     \\-> FAILED_TO_START -> IDLE

``launch`` blocks the caller until the program exits. Hosts running an event
loop must await ``launch_async`` instead, or call ``launch`` from a worker
thread.
"""

import asyncio
import uuid
from dataclasses import dataclass
from enum import Enum

from romrunner.core.command_builder import build_launch_command, split_command
from romrunner.core.command_executor import (
    CommandExecutor,
    ExitStatus,
    ProcessError,
    ProcessResult,
)
from romrunner.core.events import (
    EventBus,
    create_command_event,
    create_failed_event,
    create_finished_event,
    create_launch_finished_event,
    create_started_event,
)
from romrunner.core.exceptions import (
    LauncherStateError,
    ProcessChannelError,
    ProcessStartError,
)
from romrunner.core.executors.subprocess_executor import SubprocessExecutor
from romrunner.core.logger import RomRunnerLogger

SEPARATOR = "----------------------------------------"


def _event_loop_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _process_error(value: str) -> ProcessError:
    """Map an executor's error string to a ProcessError, UNKNOWN if unrecognised."""
    try:
        return ProcessError(value)
    except ValueError:
        return ProcessError.UNKNOWN


class LauncherState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    TERMINATED = "terminated"
    FAILED_TO_START = "failed_to_start"


@dataclass
class ActiveProcess:
    """The launcher's single process slot."""

    program: str
    pid: int | None = None


class ProcessLauncher:
    """Launches one external program at a time and reports its lifecycle."""

    def __init__(
        self,
        executor: CommandExecutor | None = None,
        event_bus: EventBus | None = None,
        logger: RomRunnerLogger | None = None,
        launcher_id: str | None = None,
    ) -> None:
        """Initialize launcher.

        Args:
            executor: Process backend (default: SubprocessExecutor)
            event_bus: Bus receiving lifecycle events (default: a private bus)
            logger: Logger for lifecycle messages
            launcher_id: Identifier stamped on every event
        """
        self.executor = executor or SubprocessExecutor()
        self.event_bus = event_bus or EventBus()
        self.logger = logger or RomRunnerLogger(__name__)
        self.launcher_id = launcher_id or f"launcher-{uuid.uuid4().hex[:8]}"

        self._state = LauncherState.IDLE
        self._active: ActiveProcess | None = None

    @property
    def state(self) -> LauncherState:
        return self._state

    @property
    def active_process(self) -> ActiveProcess | None:
        return self._active

    def launch(self, launch_cmd: str, rom_path: str) -> None:
        """Launch ``rom_path`` with ``launch_cmd`` and block until the program exits.

        Start failures and crashes are logged and published, never raised.

        Raises:
            LauncherStateError: If a launch is already in progress
            RuntimeError: If called from a running event loop
        """
        self._require_idle()
        if _event_loop_running():
            raise RuntimeError(
                "launch() cannot be called from a running event loop; "
                "await launch_async() instead"
            )
        asyncio.run(self.launch_async(launch_cmd, rom_path))

    async def launch_async(self, launch_cmd: str, rom_path: str) -> None:
        """Awaitable form of ``launch``; completes when the program has exited."""
        self._require_idle()

        command = build_launch_command(launch_cmd, rom_path)

        self.logger.info(SEPARATOR)
        self.logger.info(f"Executing command: `{command}`", command=command, rom_path=rom_path)
        self.event_bus.publish(create_command_event(command, self.launcher_id))

        await self.run_process(command)

        self.event_bus.publish(create_launch_finished_event(self.launcher_id))

    async def run_process(self, command: str) -> ProcessResult | None:
        """Run an already built command line to completion.

        Returns:
            The ProcessResult, or None if the process could not be started

        Raises:
            LauncherStateError: If a launch is already in progress
            ProcessChannelError: If the executor reports a read or write error
        """
        self._require_idle()

        args = split_command(command)
        self._active = ActiveProcess(program=args[0] if args else "")
        self._state = LauncherState.STARTING

        try:
            try:
                result = await self.executor.execute(args, self._on_process_started)
            except ProcessStartError as e:
                self._state = LauncherState.FAILED_TO_START
                self._on_process_failed(_process_error(e.error))
                return None

            self._state = LauncherState.TERMINATED
            self._on_process_finished(result)
            return result
        finally:
            self._active = None
            self._state = LauncherState.IDLE

    def _require_idle(self) -> None:
        if self._state is not LauncherState.IDLE:
            raise LauncherStateError(
                f"A process is already being launched (state: {self._state.value})",
                state=self._state.value,
            )

    def _on_process_started(self, pid: int) -> None:
        assert self._active is not None
        self._active.pid = pid
        self._state = LauncherState.RUNNING

        self.logger.info(f"Process {pid} started", pid=pid, program=self._active.program)
        self.event_bus.publish(create_started_event(pid, self._active.program, self.launcher_id))

    def _on_process_failed(self, error: ProcessError) -> None:
        assert self._active is not None
        program = self._active.program

        if error in (ProcessError.READ_ERROR, ProcessError.WRITE_ERROR):
            # No channel to the launched program is ever opened
            raise ProcessChannelError(
                f"Unexpected {error.value} reported for `{program}`", program=program
            )

        if error == ProcessError.FAILED_TO_START:
            message = (
                f"Could not run the command `{program}`; either the invoked program "
                "is missing, or you don't have the permission to run it."
            )
        elif error == ProcessError.CRASHED:
            message = f"The external program `{program}` has crashed"
        elif error == ProcessError.TIMED_OUT:
            message = f"The command `{program}` has not started in a reasonable amount of time"
        else:
            message = f"Running the command `{program}` failed due to an unknown error"

        self.logger.warn(message, program=program, error=error.value)
        self.event_bus.publish(create_failed_event(error.value, program, self.launcher_id))

    def _on_process_finished(self, result: ProcessResult) -> None:
        assert self._active is not None
        pid = self._active.pid
        exit_code = result.exit_code

        if result.exit_status == ExitStatus.NORMAL:
            self.logger.info(
                f"The external program has finished cleanly, with exit code {exit_code}",
                exit_code=exit_code,
                pid=pid,
                duration_ms=result.duration_ms,
            )
        else:
            self.logger.warn(
                f"The external program has crashed on exit, with exit code {exit_code}",
                exit_code=exit_code,
                pid=pid,
                duration_ms=result.duration_ms,
            )

        status = ExitStatus(result.exit_status).value
        self.event_bus.publish(create_finished_event(exit_code, status, self.launcher_id, pid=pid))
