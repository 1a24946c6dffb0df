"""Task CRUD on top of the API client and the shared query cache."""

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from practice_desk.api import PracticeAPIClient
from practice_desk.cache import (
    INVOICES_KEY,
    TASK_STATUSES_KEY,
    TASKS_KEY,
    QueryCache,
    task_key,
    time_entries_key,
)
from practice_desk.compliance import apply_compliance_schedule, compliance_end_datetime
from practice_desk.config import get_settings
from practice_desk.invoicing import build_invoice_from_task
from practice_desk.models import Task, TaskStatus, TimeEntry
from practice_desk.validation import (
    validate_admin_task,
    validate_revenue_task,
    validate_time_entry,
)
from practice_desk.workflow.transitions import WorkflowError, find_new_status

logger = structlog.get_logger(__name__)

_SCHEDULE_INPUTS = ("complianceFrequency", "complianceStartDate")


class TaskService:
    """Creates, edits and deletes tasks, keeping cached reads consistent."""

    def __init__(
        self,
        client: PracticeAPIClient,
        cache: QueryCache | None = None,
        end_of_day: bool | None = None,
    ):
        self.client = client
        self.cache = cache or QueryCache()
        if end_of_day is None:
            end_of_day = get_settings().compliance_end_of_day
        self._end_of_day = end_of_day
        self._logger = logger.bind(component="task_service")

    # === Reads ===

    async def list_tasks(self) -> list[Task]:
        return await self.cache.get_or_fetch(TASKS_KEY, self.client.list_tasks)

    async def get_task(self, task_id: int) -> Task:
        return await self.cache.get_or_fetch(
            task_key(task_id), lambda: self.client.get_task(task_id)
        )

    async def list_statuses(self) -> list[TaskStatus]:
        return await self.cache.get_or_fetch(
            TASK_STATUSES_KEY, self.client.list_task_statuses
        )

    async def time_entries(self, task_id: int) -> tuple[list[TimeEntry], int]:
        return await self.cache.get_or_fetch(
            time_entries_key(task_id), lambda: self.client.list_time_entries(task_id)
        )

    # === Writes ===

    def _serialize(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(fields)
        end = payload.get("complianceEndDate")
        if self._end_of_day and isinstance(end, date) and not isinstance(end, datetime):
            payload["complianceEndDate"] = compliance_end_datetime(end)
        rate = payload.get("serviceRate")
        if isinstance(rate, (int, float, str)) and rate != "":
            payload["serviceRate"] = Decimal(str(rate))
        return payload

    async def create_task(self, form: Mapping[str, Any], is_admin: bool) -> Task:
        """Validate and create a task in the tenant's New status.

        Raises FormValidationError for an invalid form and ConfigurationError
        when no rank-1 status exists; nothing is sent in either case.
        """
        result = validate_admin_task(form) if is_admin else validate_revenue_task(form)
        result.raise_for_errors()

        statuses = await self.list_statuses()
        new_status = find_new_status(statuses)

        fields = dict(form) if is_admin else apply_compliance_schedule(form)
        fields["isAdmin"] = is_admin
        fields["statusId"] = new_status.id

        task = await self.client.create_task(self._serialize(fields))
        self.cache.invalidate(TASKS_KEY)
        self._logger.info(
            "task_created", task_id=task.id, is_admin=is_admin, status_id=new_status.id
        )
        return task

    async def update_task(self, task_id: int, changes: Mapping[str, Any]) -> Task:
        """Edit task fields, recomputing the compliance period when needed.

        Status changes go through the workflow service instead.
        """
        if "statusId" in changes:
            raise WorkflowError("Task status can only change through the status workflow")

        fields = dict(changes)
        if any(key in fields for key in _SCHEDULE_INPUTS):
            current = await self.get_task(task_id)
            merged = apply_compliance_schedule({**current.to_api(), **fields})
            for key in ("complianceStartDate", "complianceEndDate", "complianceDuration"):
                if key in merged:
                    fields[key] = merged[key]

        task = await self.client.update_task(task_id, self._serialize(fields))
        self.cache.invalidate(TASKS_KEY)
        self.cache.invalidate(task_key(task_id))
        self._logger.info("task_updated", task_id=task_id, fields=sorted(fields))
        return task

    async def delete_task(self, task_id: int) -> None:
        """Delete a task; cached copies stay until the backend confirms."""
        await self.client.delete_task(task_id)
        self.cache.invalidate(TASKS_KEY)
        self.cache.invalidate(task_key(task_id))
        self._logger.info("task_deleted", task_id=task_id)

    async def create_invoice_for_task(
        self,
        task_id: int,
        issued_on: date | None = None,
        tax_percent: Decimal | int | float | str | None = None,
        discount_amount: Decimal | int | float | str | None = None,
    ) -> dict[str, Any]:
        """Invoice a revenue task and link the invoice back to it."""
        task = await self.get_task(task_id)
        if task.is_admin:
            raise WorkflowError("Administrative tasks cannot be invoiced")

        draft = build_invoice_from_task(
            task, issued_on or date.today(), tax_percent, discount_amount
        )
        invoice = await self.client.create_invoice(draft)
        # The invoice exists even if linking it back fails
        self.cache.invalidate(INVOICES_KEY)
        invoice_id = invoice.get("id")
        if invoice_id is not None:
            await self.client.update_task(task_id, {"invoiceId": invoice_id})

        self.cache.invalidate(TASKS_KEY)
        self.cache.invalidate(task_key(task_id))
        self._logger.info(
            "invoice_created",
            task_id=task_id,
            invoice_id=invoice_id,
            total=draft["totalAmount"],
        )
        return invoice

    async def log_time(
        self,
        task_id: int,
        hours: int,
        minutes: int,
        description: str | None = None,
        is_billable: bool = True,
    ) -> TimeEntry:
        """Record a manual or timer-produced time entry."""
        validate_time_entry(hours, minutes).raise_for_errors()
        entry = await self.client.create_time_entry(
            task_id,
            duration_seconds=int(hours) * 3600 + int(minutes) * 60,
            description=description or None,
            is_billable=is_billable,
        )
        self.cache.invalidate(time_entries_key(task_id))
        return entry
