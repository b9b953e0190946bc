from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import ContractType, Language, Role


@dataclass(frozen=True)
class User:
    """Domain entity: an account of the dashboard.

    Note: Plain data object, it holds no DB access code.
    """

    user_id: int
    username: str
    email: str
    first_name: str
    last_name: str
    password_hash: str
    role: Role
    contract_type: ContractType = ContractType.UOP
    language: Language = Language.PL
    uop_gross_rate: Optional[Decimal] = None
    b2b_hourly_net_rate: Optional[Decimal] = None
    is_active: bool = True
    password_change_required: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class UserChanges:
    """Partial update; None means 'leave unchanged'."""

    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    contract_type: Optional[ContractType] = None
    language: Optional[Language] = None
    uop_gross_rate: Optional[Decimal] = None
    b2b_hourly_net_rate: Optional[Decimal] = None
    is_active: Optional[bool] = None
