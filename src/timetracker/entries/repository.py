from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EntryStatus
from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def list_for_user_between(self, user_id: int, *, start_date: date, end_date: date) -> Sequence[TimeEntry]:
        """Entries of one user in [start_date, end_date], oldest first."""

        raise NotImplementedError

    def list_recent_for_user(self, user_id: int, limit: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def list_by_status(self, status: EntryStatus, *, limit: int) -> Sequence[TimeEntry]:
        raise NotImplementedError

    def create_entry(self, entry: TimeEntry) -> int:
        raise NotImplementedError

    def update_entry(self, entry: TimeEntry) -> bool:
        raise NotImplementedError

    def set_status(
        self,
        entry_id: int,
        *,
        status: EntryStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        raise NotImplementedError

    def delete_by_id(self, entry_id: int) -> bool:
        raise NotImplementedError
