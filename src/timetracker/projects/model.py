from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import BillingType


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    number: str
    description: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: bool = True

    @property
    def task_number_prefix(self) -> str:
        """Task numbers start with the first dash-segment: '20031-00' -> '20031-'."""
        head, sep, _ = self.number.partition("-")
        return f"{head if sep and head else self.number}-"


@dataclass(frozen=True)
class Task:
    """A unit of work inside exactly one project."""

    task_id: int
    project_id: int
    title: str
    number: str
    description: Optional[str] = None
    billing_type: BillingType = BillingType.HOURLY
    unit_price: Optional[Decimal] = None
    unit_name: Optional[str] = None
    is_active: bool = True

    @property
    def is_unit_based(self) -> bool:
        return self.billing_type == BillingType.UNIT
