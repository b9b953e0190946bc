from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...users.model import User


class LabourCostCalculator(ABC):
    """Calculator interface (Strategy Pattern per contract type)."""

    @abstractmethod
    def hourly_rate(self, user: User) -> Decimal:
        raise NotImplementedError

    def cost(self, user: User, hours: Decimal) -> Decimal:
        return hours * self.hourly_rate(user)
