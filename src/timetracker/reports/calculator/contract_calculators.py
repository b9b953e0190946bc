from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import DEFAULT_MONTHLY_HOURS
from ...core.enums import ContractType
from ...users.model import User
from .base import LabourCostCalculator

_CENT = Decimal("0.01")


class UopCostCalculator(LabourCostCalculator):
    """Employment contract: monthly gross spread over the standard monthly hours."""

    def __init__(self, monthly_hours: int = DEFAULT_MONTHLY_HOURS):
        if monthly_hours <= 0:
            raise ValueError("monthly_hours must be positive")
        self._monthly_hours = Decimal(monthly_hours)

    def hourly_rate(self, user: User) -> Decimal:
        if user.uop_gross_rate is None:
            return Decimal("0")
        return (user.uop_gross_rate / self._monthly_hours).quantize(_CENT, rounding=ROUND_HALF_UP)


class B2bCostCalculator(LabourCostCalculator):
    """B2B contract: net hourly rate as agreed."""

    def hourly_rate(self, user: User) -> Decimal:
        return user.b2b_hourly_net_rate if user.b2b_hourly_net_rate is not None else Decimal("0")


def calculator_for(contract_type: ContractType, *, monthly_hours: int = DEFAULT_MONTHLY_HOURS) -> LabourCostCalculator:
    if contract_type == ContractType.B2B:
        return B2bCostCalculator()
    return UopCostCalculator(monthly_hours)
