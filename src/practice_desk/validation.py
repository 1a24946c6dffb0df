"""Form validation returning structured results.

Validators never raise on bad input. They return a ``ValidationResult``
whose errors block submission and whose warnings are advisory hints shown
next to the field.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

from practice_desk.compliance import ComplianceFrequency
from practice_desk.models import TaskType, parse_date

YEAR_LIST_PATTERN = re.compile(r"^\d{4}(\s*,\s*\d{4})*$")
MIN_TASK_DETAILS = 5


class FormValidationError(ValueError):
    """Raised by ``ValidationResult.raise_for_errors`` when a form is invalid."""

    def __init__(self, result: ValidationResult):
        messages = "; ".join(f"{error.field}: {error.message}" for error in result.errors)
        super().__init__(messages or "Invalid form")
        self.result = result


@dataclass(frozen=True)
class FieldError:
    """A message attached to a single form field."""

    field: str
    message: str


@dataclass
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)
    warnings: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def add_warning(self, field_name: str, message: str) -> None:
        self.warnings.append(FieldError(field_name, message))

    def errors_for(self, field_name: str) -> list[str]:
        return [error.message for error in self.errors if error.field == field_name]

    def merge(self, other: ValidationResult) -> ValidationResult:
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def raise_for_errors(self) -> None:
        if self.errors:
            raise FormValidationError(self)


def parse_years(text: str) -> list[int]:
    """Years listed in a compliance year field, e.g. "2023, 2024"."""
    return [int(part) for part in text.split(",") if part.strip()]


def validate_compliance_years(
    text: str | None, frequency: ComplianceFrequency | str | None = None
) -> ValidationResult:
    """Check the free-text compliance year(s) field.

    The field is optional. When filled it must be one 4-digit year or a
    comma-separated list of them. A year count that does not match a
    multi-year frequency only produces a warning.
    """
    result = ValidationResult()
    if text is None or not text.strip():
        return result

    value = text.strip()
    if not YEAR_LIST_PATTERN.match(value):
        result.add_error(
            "complianceYear",
            "Enter a 4-digit year or a comma-separated list of years",
        )
        return result

    parsed = ComplianceFrequency.parse(frequency)
    if parsed is not None:
        expected = parsed.years
        count = len(parse_years(value))
        if count != expected:
            plural = "year" if expected == 1 else "years"
            result.add_warning(
                "complianceYear",
                f'"{parsed.value}" expects {expected} {plural}, got {count}',
            )
    return result


def _require(result: ValidationResult, form: Mapping[str, Any], key: str, message: str) -> None:
    value = form.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        result.add_error(key, message)


def _validate_common(form: Mapping[str, Any]) -> ValidationResult:
    result = ValidationResult()

    task_type = form.get("taskType")
    if task_type not in {t.value for t in TaskType}:
        result.add_error("taskType", "Task type must be Regular, Medium or Urgent")

    _require(result, form, "assigneeId", "Please select an assignee")

    try:
        if parse_date(form.get("dueDate")) is None:
            result.add_error("dueDate", "Please select a due date")
    except ValueError:
        result.add_error("dueDate", "Due date is not a valid date")

    details = form.get("taskDetails") or ""
    if len(str(details).strip()) < MIN_TASK_DETAILS:
        result.add_error(
            "taskDetails",
            f"Task details must be at least {MIN_TASK_DETAILS} characters",
        )
    return result


def validate_admin_task(form: Mapping[str, Any]) -> ValidationResult:
    """Validate an administrative task form."""
    return _validate_common(form)


def validate_revenue_task(form: Mapping[str, Any]) -> ValidationResult:
    """Validate a revenue task form, including its compliance and billing tabs."""
    result = _validate_common(form)
    _require(result, form, "clientId", "Please select a client")
    _require(result, form, "entityId", "Please select an entity")
    _require(result, form, "serviceTypeId", "Please select a service")

    frequency_label = form.get("complianceFrequency")
    frequency = ComplianceFrequency.parse(frequency_label)
    if frequency_label and frequency is None:
        result.add_error("complianceFrequency", f"Unknown compliance frequency: {frequency_label}")

    try:
        parse_date(form.get("complianceStartDate"))
    except ValueError:
        result.add_error("complianceStartDate", "Start date is not a valid date")

    result = result.merge(validate_compliance_years(form.get("complianceYear"), frequency))

    rate = form.get("serviceRate")
    if rate not in (None, ""):
        try:
            if Decimal(str(rate)) < 0:
                result.add_error("serviceRate", "Service rate cannot be negative")
        except InvalidOperation:
            result.add_error("serviceRate", "Service rate must be a number")
    return result


def validate_time_entry(hours: Any, minutes: Any) -> ValidationResult:
    """A manual time entry needs a positive duration."""
    result = ValidationResult()
    try:
        hours, minutes = int(hours or 0), int(minutes or 0)
    except (TypeError, ValueError):
        hours = minutes = 0
    if hours < 0 or minutes < 0 or hours * 3600 + minutes * 60 <= 0:
        result.add_error("duration", "Please enter a valid duration")
    return result
