"""Queries behind the compliance calendar."""

import calendar
from collections import Counter
from collections.abc import Iterable
from datetime import date

from practice_desk.models import Task, TaskStatus
from practice_desk.workflow.transitions import find_status, is_completed


def compliance_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Revenue tasks that carry a compliance frequency."""
    return [task for task in tasks if not task.is_admin and task.compliance_frequency]


def tasks_due_on(tasks: Iterable[Task], day: date) -> list[Task]:
    return [task for task in compliance_tasks(tasks) if task.due_date == day]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def tasks_in_month(tasks: Iterable[Task], year: int, month: int) -> list[Task]:
    """Compliance tasks due in the month, earliest first."""
    start, end = month_bounds(year, month)
    due = [
        task
        for task in compliance_tasks(tasks)
        if task.due_date is not None and start <= task.due_date <= end
    ]
    return sorted(due, key=lambda task: task.due_date or start)


def frequency_counts(tasks: Iterable[Task]) -> dict[str, int]:
    counts = Counter(task.compliance_frequency for task in compliance_tasks(tasks))
    return dict(counts)


def is_task_completed(task: Task, statuses: Iterable[TaskStatus]) -> bool:
    return is_completed(find_status(statuses, task.status_id))
