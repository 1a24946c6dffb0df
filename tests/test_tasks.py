"""Tests for task CRUD, invoicing and time logging."""

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from practice_desk.api import PracticeAPIError
from practice_desk.cache import INVOICES_KEY, TASKS_KEY, QueryCache, task_key
from practice_desk.tasks import TaskService
from practice_desk.validation import FormValidationError
from practice_desk.workflow.transitions import ConfigurationError, WorkflowError


@pytest.fixture
def service(mock_api, statuses, task):
    mock_api.list_task_statuses.return_value = statuses
    mock_api.get_task.return_value = task
    return TaskService(mock_api, QueryCache(), end_of_day=True)


@pytest.fixture
def revenue_form():
    return {
        "taskType": "Urgent",
        "assigneeId": 3,
        "dueDate": "2025-04-30",
        "taskDetails": "Prepare annual return",
        "clientId": 7,
        "entityId": 8,
        "serviceTypeId": 9,
        "complianceFrequency": "Annual",
        "complianceYear": "2024",
        "complianceStartDate": "2024-03-15",
        "serviceRate": "1000.00",
    }


class TestCreateTask:
    """Tests for TaskService.create_task."""

    @pytest.mark.asyncio
    async def test_revenue_task_starts_new_with_schedule(
        self, service, mock_api, revenue_form, task
    ):
        mock_api.create_task.return_value = task
        service.cache.set(TASKS_KEY, [])

        await service.create_task(revenue_form, is_admin=False)

        payload = mock_api.create_task.call_args.args[0]
        assert payload["statusId"] == 1
        assert payload["isAdmin"] is False
        assert payload["complianceEndDate"] == datetime(2025, 3, 15, 23, 59, 59, 999000)
        assert payload["complianceDuration"] == "Annual"
        assert payload["serviceRate"] == Decimal("1000.00")
        assert TASKS_KEY not in service.cache

    @pytest.mark.asyncio
    async def test_end_date_kept_as_date_when_disabled(
        self, mock_api, statuses, revenue_form, task
    ):
        mock_api.list_task_statuses.return_value = statuses
        mock_api.create_task.return_value = task
        service = TaskService(mock_api, QueryCache(), end_of_day=False)

        await service.create_task(revenue_form, is_admin=False)

        payload = mock_api.create_task.call_args.args[0]
        assert payload["complianceEndDate"] == date(2025, 3, 15)

    @pytest.mark.asyncio
    async def test_admin_task_skips_compliance(self, service, mock_api, task):
        mock_api.create_task.return_value = replace(task, is_admin=True)
        form = {
            "taskType": "Regular",
            "assigneeId": 3,
            "dueDate": "2025-04-30",
            "taskDetails": "Renew office lease",
        }

        await service.create_task(form, is_admin=True)

        payload = mock_api.create_task.call_args.args[0]
        assert payload["isAdmin"] is True
        assert "complianceEndDate" not in payload

    @pytest.mark.asyncio
    async def test_invalid_form_sends_nothing(self, service, mock_api, revenue_form):
        del revenue_form["clientId"]

        with pytest.raises(FormValidationError):
            await service.create_task(revenue_form, is_admin=False)

        mock_api.create_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_new_status(self, service, mock_api, statuses, revenue_form):
        mock_api.list_task_statuses.return_value = statuses[1:]

        with pytest.raises(ConfigurationError):
            await service.create_task(revenue_form, is_admin=False)

        mock_api.create_task.assert_not_awaited()


class TestUpdateTask:
    """Tests for TaskService.update_task."""

    @pytest.mark.asyncio
    async def test_frequency_change_recomputes_end(self, service, mock_api, task):
        mock_api.update_task.return_value = task

        await service.update_task(task.id, {"complianceFrequency": "Quarterly"})

        task_id, payload = mock_api.update_task.call_args.args
        assert task_id == 42
        assert payload["complianceEndDate"] == datetime(2024, 6, 15, 23, 59, 59, 999000)
        assert payload["complianceDuration"] == "Quarterly"

    @pytest.mark.asyncio
    async def test_other_fields_do_not_touch_schedule(self, service, mock_api, task):
        mock_api.update_task.return_value = task

        await service.update_task(task.id, {"taskDetails": "Updated details"})

        payload = mock_api.update_task.call_args.args[1]
        assert payload == {"taskDetails": "Updated details"}
        mock_api.get_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_cannot_be_edited(self, service, mock_api, task):
        with pytest.raises(WorkflowError):
            await service.update_task(task.id, {"statusId": 4})

        mock_api.update_task.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalidates_caches(self, service, mock_api, task):
        mock_api.update_task.return_value = task
        service.cache.set(TASKS_KEY, [task])
        service.cache.set(task_key(task.id), task)

        await service.update_task(task.id, {"taskDetails": "Updated details"})

        assert TASKS_KEY not in service.cache
        assert task_key(task.id) not in service.cache


class TestDeleteTask:
    """Tests for TaskService.delete_task."""

    @pytest.mark.asyncio
    async def test_delete(self, service, mock_api, task):
        service.cache.set(TASKS_KEY, [task])

        await service.delete_task(task.id)

        mock_api.delete_task.assert_awaited_once_with(task.id)
        assert TASKS_KEY not in service.cache

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_cache(self, service, mock_api, task):
        service.cache.set(TASKS_KEY, [task])
        mock_api.delete_task.side_effect = RuntimeError("backend down")

        with pytest.raises(RuntimeError):
            await service.delete_task(task.id)

        assert service.cache.get(TASKS_KEY) == [task]


class TestCreateInvoice:
    """Tests for TaskService.create_invoice_for_task."""

    @pytest.mark.asyncio
    async def test_creates_and_links_invoice(self, service, mock_api, task):
        mock_api.create_invoice.return_value = {"id": 77, "invoiceNumber": "INV-20250503-42"}
        service.cache.set(INVOICES_KEY, [])

        invoice = await service.create_invoice_for_task(
            task.id, issued_on=date(2025, 5, 3), tax_percent=10
        )

        assert invoice["id"] == 77
        draft = mock_api.create_invoice.call_args.args[0]
        assert draft["invoiceNumber"] == "INV-20250503-42"
        assert draft["totalAmount"] == "1100.00"
        mock_api.update_task.assert_awaited_once_with(task.id, {"invoiceId": 77})
        assert INVOICES_KEY not in service.cache

    @pytest.mark.asyncio
    async def test_failed_link_still_refreshes_invoices(self, service, mock_api, task):
        mock_api.create_invoice.return_value = {"id": 99}
        mock_api.update_task.side_effect = PracticeAPIError("API error: 500", status_code=500)
        service.cache.set(INVOICES_KEY, [])

        with pytest.raises(PracticeAPIError):
            await service.create_invoice_for_task(task.id, issued_on=date(2025, 5, 3))

        assert INVOICES_KEY not in service.cache

    @pytest.mark.asyncio
    async def test_admin_task_cannot_be_invoiced(self, service, mock_api, task):
        mock_api.get_task.return_value = replace(task, is_admin=True)

        with pytest.raises(WorkflowError):
            await service.create_invoice_for_task(task.id)

        mock_api.create_invoice.assert_not_awaited()


class TestLogTime:
    """Tests for TaskService.log_time."""

    @pytest.mark.asyncio
    async def test_logs_seconds(self, service, mock_api, task):
        await service.log_time(task.id, 1, 30, description="Review")

        mock_api.create_time_entry.assert_awaited_once_with(
            task.id, duration_seconds=5400, description="Review", is_billable=True
        )

    @pytest.mark.asyncio
    async def test_rejects_zero_duration(self, service, mock_api, task):
        with pytest.raises(FormValidationError):
            await service.log_time(task.id, 0, 0)

        mock_api.create_time_entry.assert_not_awaited()
