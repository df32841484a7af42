"""Lifecycle event system for process launches.

The launcher publishes one LaunchEvent per observable transition; hosts
subscribe callbacks (or iterate asynchronously) to follow a launch.
"""

import asyncio
import uuid
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal, get_args

from romrunner.core.logger import RomRunnerLogger

logger = RomRunnerLogger(__name__)

EventType = Literal[
    "launch_command",  # Built command line, before the process is created
    "process_started",
    "process_failed",
    "process_finished",
    "launch_finished",  # Always last, success or not
]

EVENT_TYPES: tuple[str, ...] = get_args(EventType)


@dataclass
class LaunchEvent:
    """Event emitted during a launch.

    Contract tests: tests/unit/test_events.py
    """

    type: EventType
    data: dict[str, Any]
    launcher_id: str  # Which launcher instance emitted the event
    ts: str  # ISO timestamp
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        """Validate event data structure."""
        if not isinstance(self.data, dict):
            raise ValueError(f"Event data must be dict, got {type(self.data)}")

        if not self.launcher_id:
            raise ValueError("launcher_id is required for all events")

        if self.type not in EVENT_TYPES:
            logger.warn("Unknown event type", event_type=self.type)


class EventBus:
    """Publish/subscribe bus for launch events.

    Subscribers are called synchronously in publish order. Events are also
    kept in a bounded history for late subscribers and in a queue of the same
    bound for async iteration; when nobody drains the queue the oldest events
    are dropped.
    """

    def __init__(self, max_history: int = 100) -> None:
        """Initialize event bus.

        Args:
            max_history: Maximum number of events to buffer for replay and for
                async iteration (default: 100)
        """
        if max_history < 1:
            raise ValueError(f"max_history must be >= 1, got {max_history}")

        self._subscribers: list[Callable[[LaunchEvent], None]] = []
        self._queue: asyncio.Queue[LaunchEvent] = asyncio.Queue(maxsize=max_history)
        self._closed = False
        self._event_history: list[LaunchEvent] = []
        self._max_history = max_history

    def publish(self, event: LaunchEvent) -> None:
        """Publish event to all subscribers and queue.

        A failing subscriber is logged and skipped; it never affects the
        other subscribers or the publisher.
        """
        if self._closed:
            logger.warn("Publishing to closed event bus", event_type=event.type)
            return

        logger.debug(
            "EventBus publishing event",
            event_type=event.type,
            event_id=event.id,
            subscriber_count=len(self._subscribers),
        )

        self._event_history.append(event)
        if len(self._event_history) > self._max_history:
            del self._event_history[: len(self._event_history) - self._max_history]

        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(event)

        for handler in self._subscribers[:]:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "EventBus: Handler failed",
                    error=str(e),
                    handler=getattr(handler, "__name__", repr(handler)),
                    event_type=event.type,
                    event_id=event.id,
                )

    def subscribe(self, handler: Callable[[LaunchEvent], None], replay: bool = False) -> None:
        """Subscribe to events.

        Args:
            handler: Callback function to receive events
            replay: Deliver buffered history to the handler first
        """
        if handler in self._subscribers:
            return
        if replay:
            for event in list(self._event_history):
                handler(event)
        self._subscribers.append(handler)
        logger.debug("Added event subscriber", handler=getattr(handler, "__name__", ""))

    def unsubscribe(self, handler: Callable[[LaunchEvent], None]) -> None:
        """Unsubscribe from events."""
        if handler in self._subscribers:
            self._subscribers.remove(handler)
            logger.debug("Removed event subscriber", handler=getattr(handler, "__name__", ""))

    async def __aiter__(self) -> AsyncIterator[LaunchEvent]:
        """Async iteration over events.

        Continues until bus is closed and queue is empty.
        """
        while not self._closed or not self._queue.empty():
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.1)
                yield event
            except TimeoutError:
                continue

    def clear(self) -> None:
        """Clear all subscribers, history and queue."""
        self._subscribers.clear()
        self._event_history.clear()

        while not self._queue.empty():
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break

        logger.debug("Event bus cleared")

    def close(self) -> None:
        """Close the event bus, stopping async iteration."""
        self._closed = True
        logger.debug("Event bus closed")

    @property
    def history(self) -> list[LaunchEvent]:
        """Snapshot of buffered events, oldest first."""
        return list(self._event_history)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def queue_size(self) -> int:
        return self._queue.qsize()


def _now() -> str:
    return datetime.now(UTC).isoformat()


def create_command_event(command: str, launcher_id: str) -> LaunchEvent:
    """Create the event announcing the command about to be executed."""
    return LaunchEvent(
        type="launch_command", data={"command": command}, launcher_id=launcher_id, ts=_now()
    )


def create_started_event(pid: int, program: str, launcher_id: str) -> LaunchEvent:
    """Create the event confirming the OS started the process."""
    return LaunchEvent(
        type="process_started",
        data={"pid": pid, "program": program},
        launcher_id=launcher_id,
        ts=_now(),
    )


def create_failed_event(error: str, program: str, launcher_id: str) -> LaunchEvent:
    """Create the event reporting a start failure.

    Args:
        error: ProcessError value (e.g. "failed_to_start")
        program: Program that could not be started
        launcher_id: Emitting launcher

    Returns:
        LaunchEvent with process_failed type
    """
    return LaunchEvent(
        type="process_failed",
        data={"error": str(error), "program": program},
        launcher_id=launcher_id,
        ts=_now(),
    )


def create_finished_event(
    exit_code: int, exit_status: str, launcher_id: str, pid: int | None = None
) -> LaunchEvent:
    """Create the event reporting the process exit.

    Args:
        exit_code: Process return code
        exit_status: ExitStatus value ("normal" or "crash")
        launcher_id: Emitting launcher
        pid: Process id, when known

    Returns:
        LaunchEvent with process_finished type
    """
    data: dict[str, Any] = {"exit_code": exit_code, "exit_status": str(exit_status)}
    if pid is not None:
        data["pid"] = pid

    return LaunchEvent(type="process_finished", data=data, launcher_id=launcher_id, ts=_now())


def create_launch_finished_event(launcher_id: str) -> LaunchEvent:
    """Create the terminal event of a launch sequence."""
    return LaunchEvent(type="launch_finished", data={}, launcher_id=launcher_id, ts=_now())
