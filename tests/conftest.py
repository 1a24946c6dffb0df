"""Pytest configuration and fixtures."""

import os
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables before importing settings
os.environ.setdefault("PRACTICE_USERNAME", "test@example.com")
os.environ.setdefault("PRACTICE_PASSWORD", "testpassword")

from practice_desk.models import Task, TaskStatus  # noqa: E402


@pytest.fixture
def statuses():
    """New, two in-progress stages and Completed."""
    return [
        TaskStatus(id=1, name="New", rank=Decimal("1")),
        TaskStatus(id=2, name="Drafting", rank=Decimal("2.1")),
        TaskStatus(id=3, name="Review", rank=Decimal("2.2")),
        TaskStatus(id=4, name="Completed", rank=Decimal("3")),
    ]


@pytest.fixture
def status_records():
    """Status rows as the API returns them."""
    return [
        {"id": 4, "name": "Completed", "rank": 3, "tenantId": 1},
        {"id": 1, "name": "New", "rank": 1, "tenantId": 1},
        {"id": 3, "name": "Review", "rank": 2.2, "tenantId": 1},
        {"id": 2, "name": "Drafting", "rank": 2.1, "tenantId": 1},
    ]


@pytest.fixture
def task_record():
    """Revenue task row as the API returns it."""
    return {
        "id": 42,
        "tenantId": 1,
        "isAdmin": False,
        "taskType": "Regular",
        "clientId": 7,
        "entityId": 8,
        "serviceTypeId": 9,
        "assigneeId": 3,
        "dueDate": "2025-04-30T00:00:00.000Z",
        "statusId": 1,
        "taskDetails": "Prepare annual return",
        "isRecurring": True,
        "complianceFrequency": "Annual",
        "complianceYear": "2024",
        "complianceDuration": "Annual",
        "complianceStartDate": "2024-03-15T00:00:00.000Z",
        "complianceEndDate": "2025-03-15T23:59:59.999Z",
        "currency": "USD",
        "serviceRate": 1000,
    }


@pytest.fixture
def task(task_record):
    return Task.from_api(task_record)


@pytest.fixture
def mock_api():
    """A stand-in for PracticeAPIClient with async endpoint methods."""
    api = MagicMock()
    api.list_task_statuses = AsyncMock()
    api.list_tasks = AsyncMock()
    api.get_task = AsyncMock()
    api.create_task = AsyncMock()
    api.update_task = AsyncMock()
    api.update_task_status = AsyncMock()
    api.delete_task = AsyncMock()
    api.create_invoice = AsyncMock()
    api.create_time_entry = AsyncMock()
    api.list_time_entries = AsyncMock()
    return api


@pytest.fixture
def make_response():
    """Factory for mock httpx responses."""

    def _make(status_code=200, payload=None):
        response = MagicMock()
        response.status_code = status_code
        response.json.return_value = payload if payload is not None else {}
        response.content = b"content" if payload is not None else b""
        response.text = ""
        response.headers = {}
        response.raise_for_status = MagicMock()
        return response

    return _make
