"""Task status ranks as a tagged variant.

Tenants configure statuses with a numeric rank: ``1`` is New, ``2.x`` is an
ordered chain of in-progress stages (2.1, 2.2, ...) and ``3`` is Completed.
Ranks are decoded once into ``StatusRank`` so that no transition rule ever
compares floats.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, InvalidOperation
from enum import Enum
from typing import Any


class StatusBand(str, Enum):
    """Coarse stage of a task status."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def order(self) -> int:
        return _BAND_ORDER[self]

    @property
    def colour(self) -> str:
        """Badge colour used when rendering a status of this band."""
        return _BAND_COLOURS[self]


_BAND_ORDER: dict[StatusBand, int] = {
    StatusBand.NEW: 1,
    StatusBand.IN_PROGRESS: 2,
    StatusBand.COMPLETED: 3,
}

_BAND_COLOURS: dict[StatusBand, str] = {
    StatusBand.NEW: "blue",
    StatusBand.IN_PROGRESS: "yellow",
    StatusBand.COMPLETED: "green",
}

UNKNOWN_COLOUR = "slate"

_TENTH = Decimal("0.1")


@dataclass(frozen=True)
class StatusRank:
    """Decoded rank: a band plus the tenth-step within the in-progress band."""

    band: StatusBand
    step: int = 0

    @classmethod
    def new(cls) -> StatusRank:
        return cls(StatusBand.NEW)

    @classmethod
    def in_progress(cls, step: int) -> StatusRank:
        return cls(StatusBand.IN_PROGRESS, step)

    @classmethod
    def completed(cls) -> StatusRank:
        return cls(StatusBand.COMPLETED)

    @classmethod
    def parse(cls, value: Any) -> StatusRank | None:
        """Decode a configured rank value, returning None when malformed.

        Valid ranks are exactly 1, exactly 3, or 2 plus a whole number of
        tenths (2, 2.1, 2.2, ...). Anything else, including finer steps such
        as 2.15, has no place in the workflow.
        """
        try:
            rank = value if isinstance(value, Decimal) else Decimal(str(value))
        except (InvalidOperation, ValueError):
            return None
        if not rank.is_finite():
            return None

        if rank == 1:
            return cls.new()
        if rank == 3:
            return cls.completed()
        if rank.to_integral_value(rounding=ROUND_FLOOR) != 2:
            return None

        tenths = (rank - 2) / _TENTH
        if tenths != tenths.to_integral_value():
            return None
        return cls.in_progress(int(tenths))

    @property
    def is_new(self) -> bool:
        return self.band is StatusBand.NEW

    @property
    def is_in_progress(self) -> bool:
        return self.band is StatusBand.IN_PROGRESS

    @property
    def is_completed(self) -> bool:
        return self.band is StatusBand.COMPLETED

    @property
    def value(self) -> Decimal:
        """Numeric rank as configured by the tenant."""
        if self.band is StatusBand.IN_PROGRESS:
            return Decimal(2) + _TENTH * self.step
        return Decimal(self.band.order)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.band.order, self.step)

    def next_step(self) -> StatusRank | None:
        """The single in-progress stage that follows this one, if any."""
        if self.band is not StatusBand.IN_PROGRESS:
            return None
        return StatusRank.in_progress(self.step + 1)

    def __str__(self) -> str:
        return str(self.value.normalize())
