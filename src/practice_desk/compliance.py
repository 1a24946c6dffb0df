"""Compliance period scheduling for revenue tasks.

A revenue task with a compliance obligation carries a frequency label and
a period start date. The period end is derived from both with calendar
arithmetic at day precision: adding months keeps the day of month and
clamps it to the last day of a shorter month (Jan 31 + 1 month is Feb 28
or 29). Time of day is only attached when the end date is serialized.
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from practice_desk.models import parse_date

END_OF_DAY = time(23, 59, 59, 999000)


class ComplianceFrequency(str, Enum):
    """How often a compliance obligation recurs."""

    ONE_TIME = "One Time"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    BI_ANNUALLY = "Bi-Annually"
    ANNUAL = "Annual"
    TWO_YEARS = "2 Years"
    THREE_YEARS = "3 Years"
    FOUR_YEARS = "4 Years"
    FIVE_YEARS = "5 Years"

    @classmethod
    def parse(cls, label: Any) -> ComplianceFrequency | None:
        """Look up a frequency by its label, None if unknown or blank."""
        if isinstance(label, cls):
            return label
        if not label:
            return None
        try:
            return cls(str(label).strip())
        except ValueError:
            return None

    @property
    def months(self) -> int:
        """Length of one period in months (0 for one-time obligations)."""
        return _PERIOD_MONTHS[self]

    @property
    def years(self) -> int:
        """Number of compliance years one period spans."""
        return max(1, self.months // 12)

    @property
    def is_recurring(self) -> bool:
        return self is not ComplianceFrequency.ONE_TIME


_PERIOD_MONTHS: dict[ComplianceFrequency, int] = {
    ComplianceFrequency.ONE_TIME: 0,
    ComplianceFrequency.MONTHLY: 1,
    ComplianceFrequency.QUARTERLY: 3,
    ComplianceFrequency.BI_ANNUALLY: 6,
    ComplianceFrequency.ANNUAL: 12,
    ComplianceFrequency.TWO_YEARS: 24,
    ComplianceFrequency.THREE_YEARS: 36,
    ComplianceFrequency.FOUR_YEARS: 48,
    ComplianceFrequency.FIVE_YEARS: 60,
}


def add_months(start: date, months: int) -> date:
    """Add whole months, clamping the day to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def compute_compliance_end_date(
    frequency: ComplianceFrequency | str | None, start: date | None
) -> date | None:
    """End of the compliance period beginning on ``start``.

    Returns None when either input is missing or the frequency label is
    unknown, leaving the end date for manual entry.
    """
    parsed = ComplianceFrequency.parse(frequency)
    if parsed is None or start is None:
        return None
    if isinstance(start, datetime):
        start = start.date()
    return add_months(start, parsed.months)


def compliance_end_datetime(end: date) -> datetime:
    """The last millisecond of the end day."""
    return datetime.combine(end, END_OF_DAY)


def compliance_period_label(
    frequency: ComplianceFrequency | str | None, start: date
) -> str | None:
    """Human-readable period, e.g. "May 2025", "Q2 2025", "2025-2026"."""
    parsed = ComplianceFrequency.parse(frequency)
    if parsed is None:
        return None

    month_name = f"{calendar.month_name[start.month]} {start.year}"
    if parsed is ComplianceFrequency.ONE_TIME:
        return f"{month_name} (One-time)"
    if parsed is ComplianceFrequency.MONTHLY:
        return month_name
    if parsed is ComplianceFrequency.QUARTERLY:
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    if parsed is ComplianceFrequency.BI_ANNUALLY:
        return f"H{1 if start.month <= 6 else 2} {start.year}"
    if parsed.years == 1:
        return str(start.year)
    return f"{start.year}-{start.year + parsed.years - 1}"


def next_compliance_period(
    frequency: ComplianceFrequency | str | None, previous_end: date
) -> tuple[date, date] | None:
    """Start and end of the period following one that ended on previous_end.

    One-time obligations do not recur and yield None.
    """
    parsed = ComplianceFrequency.parse(frequency)
    if parsed is None or not parsed.is_recurring:
        return None
    start = previous_end + timedelta(days=1)
    return start, add_months(start, parsed.months)


def apply_compliance_schedule(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Recompute the derived compliance fields of a task form.

    When both frequency and start date are present, ``complianceEndDate``
    is overwritten with the computed end and ``complianceDuration`` echoes
    the frequency label. Otherwise the fields are returned unchanged.
    """
    updated = dict(fields)
    frequency = ComplianceFrequency.parse(fields.get("complianceFrequency"))
    start = parse_date(fields.get("complianceStartDate"))
    end = compute_compliance_end_date(frequency, start)
    if frequency is None or end is None:
        return updated

    updated["complianceStartDate"] = start
    updated["complianceEndDate"] = end
    updated["complianceDuration"] = frequency.value
    return updated
