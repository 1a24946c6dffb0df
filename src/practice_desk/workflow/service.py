"""Applying status transitions against the backend."""

import structlog

from practice_desk.api import PracticeAPIClient
from practice_desk.cache import TASK_STATUSES_KEY, TASKS_KEY, QueryCache, task_key
from practice_desk.models import Task, TaskStatus
from practice_desk.workflow.transitions import (
    IllegalTransitionError,
    TransitionInProgressError,
    available_transitions,
    find_completed_status,
    find_status,
)

logger = structlog.get_logger(__name__)


class TaskWorkflowService:
    """Moves tasks through their status workflow.

    The backend is the system of record. No optimistic update is applied:
    the caches are invalidated only after the backend accepts a change, so
    a rejected change leaves every view on the previous status.
    """

    def __init__(self, client: PracticeAPIClient, cache: QueryCache | None = None):
        self.client = client
        self.cache = cache or QueryCache()
        self._in_flight: set[int] = set()
        self._logger = logger.bind(component="task_workflow")

    async def load_statuses(self) -> list[TaskStatus]:
        """Configured statuses, fetched once and shared through the cache."""
        return await self.cache.get_or_fetch(
            TASK_STATUSES_KEY, self.client.list_task_statuses
        )

    async def load_task(self, task_id: int) -> Task:
        return await self.cache.get_or_fetch(
            task_key(task_id), lambda: self.client.get_task(task_id)
        )

    async def transitions_for(self, task_id: int) -> list[TaskStatus]:
        """Statuses the task may move to next."""
        task = await self.load_task(task_id)
        statuses = await self.load_statuses()
        return available_transitions(find_status(statuses, task.status_id), statuses)

    def is_in_flight(self, task_id: int) -> bool:
        return task_id in self._in_flight

    async def apply_transition(self, task_id: int, status_id: int) -> Task:
        """Move a task to the given status.

        Moving a task to the status it already has is a no-op and sends
        nothing. Unreachable targets raise IllegalTransitionError before any
        request is made; backend rejections propagate unchanged.
        """
        if task_id in self._in_flight:
            raise TransitionInProgressError(task_id)

        self._in_flight.add(task_id)
        try:
            task = await self.load_task(task_id)
            if task.status_id == status_id:
                self._logger.debug("transition_noop", task_id=task_id, status_id=status_id)
                return task

            statuses = await self.load_statuses()
            current = find_status(statuses, task.status_id)
            options = available_transitions(current, statuses)
            if not any(option.id == status_id for option in options):
                raise IllegalTransitionError(task_id, current, status_id)

            updated = await self.client.update_task_status(task_id, status_id)
        except IllegalTransitionError:
            self._logger.warning(
                "transition_illegal", task_id=task_id, status_id=status_id
            )
            raise
        finally:
            self._in_flight.discard(task_id)

        self.cache.invalidate(TASKS_KEY)
        self.cache.invalidate(task_key(task_id))
        self._logger.info(
            "status_transition_applied",
            task_id=task_id,
            from_status=task.status_id,
            to_status=updated.status_id,
        )
        return updated

    async def complete_task(self, task_id: int) -> Task:
        """Move a task straight to the Completed status.

        Raises ConfigurationError, without sending anything, when the tenant
        has no rank-3 status.
        """
        statuses = await self.load_statuses()
        completed = find_completed_status(statuses)
        return await self.apply_transition(task_id, completed.id)
