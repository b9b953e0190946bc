from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.constants import DEFAULT_UNIT_LABEL
from ..core.enums import EntryStatus


def _fmt_number(value: Decimal) -> str:
    """7.50 -> '7.5', 8.00 -> '8'."""
    return format(value.normalize(), "f")


@dataclass
class DaySummary:
    """What one calendar cell shows."""

    day: date
    in_month: bool = True
    has_entry: bool = False
    total_hours: Decimal = Decimal("0")
    total_quantity: Decimal = Decimal("0")
    status: Optional[EntryStatus] = None
    unit_name: Optional[str] = None
    is_holiday: bool = False

    @property
    def key(self) -> str:
        return self.day.isoformat()

    @property
    def label(self) -> str:
        """'7.5h', '3 pcs' or both joined when a day mixes billing modes."""
        if not self.has_entry:
            return ""
        parts = []
        if self.total_hours:
            parts.append(f"{_fmt_number(self.total_hours)}h")
        if self.total_quantity:
            parts.append(f"{_fmt_number(self.total_quantity)} {self.unit_name or DEFAULT_UNIT_LABEL}")
        return " + ".join(parts)

    @property
    def css_class(self) -> str:
        if not self.in_month:
            return "day-padding"
        if self.is_holiday:
            return "day-holiday"
        if not self.has_entry:
            return "day-empty"
        return {
            EntryStatus.APPROVED: "day-approved",
            EntryStatus.REJECTED: "day-rejected",
        }.get(self.status, "day-submitted")


@dataclass(frozen=True)
class MonthView:
    year: int
    month: int
    days: dict[str, DaySummary] = field(default_factory=dict)
    weeks: list[list[DaySummary]] = field(default_factory=list)

    def get(self, day: date | str) -> Optional[DaySummary]:
        key = day if isinstance(day, str) else day.isoformat()
        return self.days.get(key)

    @property
    def total_hours(self) -> Decimal:
        return sum((d.total_hours for d in self.days.values()), Decimal("0"))

    @property
    def total_quantity(self) -> Decimal:
        return sum((d.total_quantity for d in self.days.values()), Decimal("0"))
