from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Permission tiers, lowest first."""

    WORKER = "worker"
    MANAGER = "manager"
    DIRECTOR = "director"

    @property
    def can_review(self) -> bool:
        return self in (Role.MANAGER, Role.DIRECTOR)


class ContractType(str, Enum):
    """Billing basis for a user's labour cost."""

    UOP = "UOP"
    B2B = "B2B"


class Language(str, Enum):
    PL = "PL"
    EN = "EN"
    UA = "UA"


class BillingType(str, Enum):
    """How work on a task is measured: hours or counted units."""

    HOURLY = "HOURLY"
    UNIT = "UNIT"


class EntryStatus(str, Enum):
    """Review state of a logged time entry."""

    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
