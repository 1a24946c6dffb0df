"""View-model behind the task status picker.

The picker shows the current status as a badge and, unless the task is
finished, a list of next statuses plus an optional "mark as completed"
action. It disables itself while a change is outstanding.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from practice_desk.api import PracticeAPIError
from practice_desk.models import Task, TaskStatus
from practice_desk.notifications import Notifier
from practice_desk.workflow.ranks import UNKNOWN_COLOUR
from practice_desk.workflow.service import TaskWorkflowService
from practice_desk.workflow.transitions import (
    WorkflowError,
    available_transitions,
    find_completed_status,
    find_status,
    needs_completion_fallback,
    rank_of,
)

logger = structlog.get_logger(__name__)

UPDATE_FAILED = "Failed to update task status. Please try again."
STATUSES_UNAVAILABLE = "Could not load task statuses."


@dataclass(frozen=True)
class StatusControlView:
    """Snapshot of what the picker should render."""

    label: str
    colour: str
    interactive: bool
    completed: bool
    busy: bool
    options: list[TaskStatus] = field(default_factory=list)
    show_completion_fallback: bool = False


class StatusControl:
    """Status picker for a single task."""

    def __init__(
        self,
        service: TaskWorkflowService,
        notifier: Notifier,
        task_id: int,
        current_status_id: int,
        on_status_change: Callable[[Task], None] | None = None,
    ):
        self.service = service
        self.notifier = notifier
        self.task_id = task_id
        self.current_status_id = current_status_id
        self._on_status_change = on_status_change
        self._statuses: list[TaskStatus] = []
        self._busy = False
        self._logger = logger.bind(component="status_control", task_id=task_id)

    @property
    def busy(self) -> bool:
        return self._busy

    @property
    def current_status(self) -> TaskStatus | None:
        return find_status(self._statuses, self.current_status_id)

    async def refresh(self) -> list[TaskStatus]:
        """Load the status table. A failed fetch leaves the picker empty."""
        try:
            self._statuses = await self.service.load_statuses()
        except PracticeAPIError as e:
            self._logger.warning("statuses_unavailable", error=str(e))
            self._statuses = []
            self.notifier.error(e.user_message or STATUSES_UNAVAILABLE)
        return self._statuses

    def view(self) -> StatusControlView:
        current = self.current_status
        rank = rank_of(current)
        options = available_transitions(current, self._statuses)
        fallback = needs_completion_fallback(current, options)
        completed = rank is not None and rank.is_completed
        return StatusControlView(
            label=current.name if current else "Unknown",
            colour=rank.band.colour if rank else UNKNOWN_COLOUR,
            interactive=not completed and bool(options or fallback),
            completed=completed,
            busy=self._busy,
            options=options,
            show_completion_fallback=fallback,
        )

    async def select(self, status_id: int) -> Task | None:
        """Move the task to one of the offered statuses.

        Returns the updated task, or None when the change was ignored or
        failed; failures are reported through the notifier.
        """
        if self._busy:
            self._logger.debug("select_ignored_busy", status_id=status_id)
            return None
        return await self._run(status_id)

    async def complete(self) -> Task | None:
        """Handle the "mark as completed" action."""
        if self._busy:
            return None
        try:
            completed = find_completed_status(self._statuses)
        except WorkflowError as e:
            self._logger.error("completed_status_missing")
            self.notifier.error(str(e))
            return None
        return await self._run(completed.id)

    async def _run(self, status_id: int) -> Task | None:
        self._busy = True
        try:
            updated = await self.service.apply_transition(self.task_id, status_id)
        except (PracticeAPIError, WorkflowError) as e:
            self._logger.warning("transition_rejected", status_id=status_id, error=str(e))
            message = e.user_message if isinstance(e, PracticeAPIError) else str(e)
            self.notifier.error(message or UPDATE_FAILED)
            return None
        finally:
            self._busy = False

        self.current_status_id = updated.status_id
        new_status = find_status(self._statuses, updated.status_id)
        self.notifier.success(
            "Status Updated",
            f"Task status changed to {new_status.name if new_status else 'new status'}.",
        )
        if self._on_status_change:
            self._on_status_change(updated)
        return updated
