"""Status reachability rules for the task workflow.

From New every in-progress stage is reachable, from an in-progress stage
only the next tenth-step is, and Completed is reachable from both. Completed
is terminal.
"""

from collections.abc import Iterable

from practice_desk.models import TaskStatus
from practice_desk.workflow.ranks import StatusRank

COMPLETED_STATUS_MISSING = "Completed status not found in the system."
NEW_STATUS_MISSING = "New status not found in the system."


class WorkflowError(Exception):
    """Base exception for task workflow errors."""


class ConfigurationError(WorkflowError):
    """The tenant's status table lacks a status the workflow needs."""


class IllegalTransitionError(WorkflowError):
    """The requested status is not reachable from the current one."""

    def __init__(self, task_id: int, current: TaskStatus | None, target_id: int):
        current_name = current.name if current else "unknown"
        super().__init__(
            f"Task {task_id} cannot move from '{current_name}' to status {target_id}"
        )
        self.task_id = task_id
        self.current = current
        self.target_id = target_id


class TransitionInProgressError(WorkflowError):
    """A status change for the task is already outstanding."""

    def __init__(self, task_id: int):
        super().__init__(f"A status change for task {task_id} is already in progress")
        self.task_id = task_id


def _ranked(statuses: Iterable[TaskStatus]) -> list[tuple[StatusRank, TaskStatus]]:
    ranked = []
    for status in statuses:
        rank = StatusRank.parse(status.rank)
        if rank is not None:
            ranked.append((rank, status))
    ranked.sort(key=lambda pair: pair[0].sort_key)
    return ranked


def rank_of(status: TaskStatus | None) -> StatusRank | None:
    """Decoded rank of a status, None for a missing or malformed one."""
    if status is None:
        return None
    return StatusRank.parse(status.rank)


def find_status(statuses: Iterable[TaskStatus], status_id: int) -> TaskStatus | None:
    for status in statuses:
        if status.id == status_id:
            return status
    return None


def sort_statuses(statuses: Iterable[TaskStatus]) -> list[TaskStatus]:
    """Well-formed statuses in rank order."""
    return [status for _, status in _ranked(statuses)]


def available_transitions(
    current: TaskStatus | None, statuses: Iterable[TaskStatus]
) -> list[TaskStatus]:
    """Statuses a task may move to next, sorted by rank.

    Never raises: a terminal, unknown or malformed current status yields
    an empty list.
    """
    current_rank = rank_of(current)
    if current_rank is None or current_rank.is_completed:
        return []

    next_rank = current_rank.next_step()
    options = []
    for rank, status in _ranked(statuses):
        if rank.is_completed:
            options.append(status)
        elif current_rank.is_new and rank.is_in_progress:
            options.append(status)
        elif next_rank is not None and rank == next_rank:
            options.append(status)
    return options


def find_completed_status(statuses: Iterable[TaskStatus]) -> TaskStatus:
    """The rank-3 status; raises ConfigurationError if none is configured."""
    for rank, status in _ranked(statuses):
        if rank.is_completed:
            return status
    raise ConfigurationError(COMPLETED_STATUS_MISSING)


def find_new_status(statuses: Iterable[TaskStatus]) -> TaskStatus:
    """The rank-1 status new tasks start in."""
    for rank, status in _ranked(statuses):
        if rank.is_new:
            return status
    raise ConfigurationError(NEW_STATUS_MISSING)


def needs_completion_fallback(
    current: TaskStatus | None, options: Iterable[TaskStatus]
) -> bool:
    """Whether a separate "mark as completed" action should be offered.

    Offered whenever the task is not already completed and none of the
    computed options is the Completed status.
    """
    current_rank = rank_of(current)
    if current_rank is None or current_rank.is_completed:
        return False
    return not any(is_completed(option) for option in options)


def is_completed(status: TaskStatus | None) -> bool:
    rank = rank_of(status)
    return rank is not None and rank.is_completed
