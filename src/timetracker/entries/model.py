from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional

from ..core.enums import BillingType, EntryStatus


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: work logged by one user on one day.

    HOURLY entries carry hours, UNIT entries carry quantity. Billing type,
    unit name and unit price are copied from the task when the entry is
    logged, so later task edits or deletion do not change it. The last
    three fields are resolved from the task/project/user when reading.
    """

    entry_id: int
    user_id: int
    project_id: int
    work_date: date
    task_id: Optional[int] = None
    hours: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    hours_from: Optional[time] = None
    hours_to: Optional[time] = None
    description: Optional[str] = None
    status: EntryStatus = EntryStatus.SUBMITTED
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    billing_type: BillingType = BillingType.HOURLY
    unit_name: Optional[str] = None
    unit_price: Optional[Decimal] = None
    user_name: Optional[str] = None
    project_name: Optional[str] = None
    task_number: Optional[str] = None

    @property
    def is_unit_based(self) -> bool:
        return self.billing_type == BillingType.UNIT

    @property
    def value(self) -> Decimal:
        """Hours for HOURLY entries, quantity for UNIT entries."""
        raw = self.quantity if self.is_unit_based else self.hours
        return raw if raw is not None else Decimal("0")


@dataclass(frozen=True)
class EntryDraft:
    """Fields submitted for a new entry."""

    project_id: int
    work_date: date
    task_id: Optional[int] = None
    hours: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    hours_from: Optional[time] = None
    hours_to: Optional[time] = None
    description: Optional[str] = None
    user_id: Optional[int] = None


@dataclass(frozen=True)
class EntryChanges:
    """Partial update; None means 'leave unchanged'."""

    work_date: Optional[date] = None
    hours: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    hours_from: Optional[time] = None
    hours_to: Optional[time] = None
    description: Optional[str] = None
