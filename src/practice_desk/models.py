"""Record types exchanged with the practice API.

The backend speaks camelCase JSON with ISO-8601 dates. These dataclasses
hold the snake_case view used throughout the package and convert at the
boundary via ``from_api`` / ``to_api``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


class TaskType(str, Enum):
    """Priority label of a task."""

    REGULAR = "Regular"
    MEDIUM = "Medium"
    URGENT = "Urgent"


def parse_date(value: Any) -> date | None:
    """Parse an ISO date or timestamp string into a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_datetime(value: Any) -> datetime | None:
    """Parse an ISO timestamp, accepting the trailing ``Z`` the backend emits."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def parse_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return Decimal(str(value))


def to_json_value(value: Any) -> Any:
    """Convert a python value into its JSON wire representation."""
    if isinstance(value, datetime):
        return value.isoformat(timespec="milliseconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_json_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    return value


@dataclass(frozen=True)
class TaskStatus:
    """One configured stage a task can occupy."""

    id: int
    name: str
    rank: Decimal
    description: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TaskStatus:
        return cls(
            id=int(data["id"]),
            name=str(data.get("name", "")),
            rank=Decimal(str(data["rank"])),
            description=data.get("description"),
        )


# Task attribute -> API key
_TASK_FIELDS: dict[str, str] = {
    "id": "id",
    "tenant_id": "tenantId",
    "is_admin": "isAdmin",
    "task_type": "taskType",
    "status_id": "statusId",
    "assignee_id": "assigneeId",
    "client_id": "clientId",
    "entity_id": "entityId",
    "service_type_id": "serviceTypeId",
    "task_category_id": "taskCategoryId",
    "due_date": "dueDate",
    "task_details": "taskDetails",
    "next_to_do": "nextToDo",
    "is_recurring": "isRecurring",
    "compliance_frequency": "complianceFrequency",
    "compliance_year": "complianceYear",
    "compliance_duration": "complianceDuration",
    "compliance_start_date": "complianceStartDate",
    "compliance_end_date": "complianceEndDate",
    "currency": "currency",
    "service_rate": "serviceRate",
    "discount_amount": "discountAmount",
    "tax_percent": "taxPercent",
    "invoice_id": "invoiceId",
}


@dataclass
class Task:
    """A unit of tracked work, administrative or revenue."""

    id: int
    status_id: int
    is_admin: bool = False
    task_type: str = TaskType.REGULAR.value
    tenant_id: int | None = None
    assignee_id: int | None = None
    client_id: int | None = None
    entity_id: int | None = None
    service_type_id: int | None = None
    task_category_id: int | None = None
    due_date: date | None = None
    task_details: str | None = None
    next_to_do: str | None = None
    is_recurring: bool = False
    compliance_frequency: str | None = None
    compliance_year: str | None = None
    compliance_duration: str | None = None
    compliance_start_date: date | None = None
    compliance_end_date: date | None = None
    currency: str | None = None
    service_rate: Decimal | None = None
    discount_amount: Decimal | None = None
    tax_percent: Decimal | None = None
    invoice_id: int | None = None

    @property
    def is_revenue(self) -> bool:
        return not self.is_admin

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        """Build a task from an API record."""
        values: dict[str, Any] = {}
        for attr, key in _TASK_FIELDS.items():
            if key not in data:
                continue
            raw = data[key]
            if attr in ("due_date", "compliance_start_date", "compliance_end_date"):
                values[attr] = parse_date(raw)
            elif attr in ("service_rate", "discount_amount", "tax_percent"):
                values[attr] = parse_decimal(raw)
            elif attr in ("is_admin", "is_recurring"):
                values[attr] = bool(raw)
            else:
                values[attr] = raw
        values.setdefault("status_id", 0)
        return cls(**values)

    def to_api(self) -> dict[str, Any]:
        """Serialize to the camelCase payload, omitting unset fields."""
        payload: dict[str, Any] = {}
        for attr, key in _TASK_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            payload[key] = to_json_value(value)
        return payload


@dataclass
class TimeEntry:
    """A logged block of time against a task."""

    id: int
    task_id: int
    duration_seconds: int
    user_id: int | None = None
    description: str | None = None
    is_billable: bool = True
    created_at: datetime | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> TimeEntry:
        return cls(
            id=int(data["id"]),
            task_id=int(data["taskId"]),
            duration_seconds=int(data.get("durationSeconds", 0)),
            user_id=data.get("userId"),
            description=data.get("description"),
            is_billable=bool(data.get("isBillable", True)),
            created_at=parse_datetime(data.get("createdAt")),
        )
