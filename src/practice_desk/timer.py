"""Stopwatch for logging time against a task."""

from collections.abc import Callable
from datetime import UTC, datetime

import structlog

logger = structlog.get_logger(__name__)


class TimerStateError(RuntimeError):
    """Timer started while running or stopped while idle."""


class TaskTimer:
    """A start/stop stopwatch owned by whoever is logging time.

    The clock is injectable so elapsed time can be controlled in tests.
    """

    def __init__(self, task_id: int, clock: Callable[[], datetime] | None = None):
        self.task_id = task_id
        self._clock = clock or (lambda: datetime.now(UTC))
        self._started_at: datetime | None = None

    @property
    def is_running(self) -> bool:
        return self._started_at is not None

    @property
    def started_at(self) -> datetime | None:
        return self._started_at

    @property
    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int((self._clock() - self._started_at).total_seconds()))

    def start(self) -> None:
        if self._started_at is not None:
            raise TimerStateError(f"Timer for task {self.task_id} is already running")
        self._started_at = self._clock()
        logger.debug("timer_started", task_id=self.task_id)

    def stop(self) -> int:
        """Stop the timer and return the elapsed whole seconds."""
        if self._started_at is None:
            raise TimerStateError(f"Timer for task {self.task_id} is not running")
        elapsed = self.elapsed_seconds
        self._started_at = None
        logger.debug("timer_stopped", task_id=self.task_id, elapsed=elapsed)
        return elapsed


def split_duration(seconds: int) -> tuple[int, int]:
    """Whole hours and remaining minutes, for pre-filling a time entry."""
    return seconds // 3600, (seconds % 3600) // 60


def format_duration(seconds: int) -> str:
    hours, minutes = split_duration(seconds)
    remaining = seconds % 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{remaining}s"
