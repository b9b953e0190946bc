"""Per-day aggregation of a month of time entries for the calendar view."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import grid_days, month_bounds
from ..entries.model import TimeEntry
from ..entries.service import TimeEntryService
from ..users.service import SessionUser
from .model import DaySummary, MonthView


def build_month_view(
    entries: Iterable[TimeEntry],
    *,
    year: int,
    month: int,
    first_weekday: int = 0,
) -> MonthView:
    """Aggregate entries into one DaySummary per day of the month.

    - HOURLY entries add to total_hours, UNIT entries to total_quantity.
    - With several entries on one day the last one iterated sets the status.
    - Entries outside the month are ignored; padding days in the grid are
      rendered with in_month=False and never aggregated.
    - is_holiday stays False: holidays have no backing store.
    """
    start, end = month_bounds(year, month)

    days: dict[str, DaySummary] = {}
    weeks: list[list[DaySummary]] = []
    for day in grid_days(year, month, first_weekday=first_weekday):
        in_month = start <= day <= end
        summary = DaySummary(day=day, in_month=in_month)
        if in_month:
            days[summary.key] = summary
        if not weeks or len(weeks[-1]) == 7:
            weeks.append([])
        weeks[-1].append(summary)

    for entry in entries:
        summary = days.get(entry.work_date.isoformat())
        if summary is None:
            continue
        summary.has_entry = True
        if entry.is_unit_based:
            summary.total_quantity += entry.value
            summary.unit_name = entry.unit_name or summary.unit_name
        else:
            summary.total_hours += entry.value
        summary.status = entry.status

    return MonthView(year=year, month=month, days=days, weeks=weeks)


class MonthViewService:
    """Loads a user's month and aggregates it for the calendar."""

    def __init__(self, entries: TimeEntryService, *, first_weekday: int = 0):
        self._entries = entries
        self._first_weekday = first_weekday

    def month_for(self, *, actor: SessionUser, user_id: Optional[int], year: int, month: int) -> MonthView:
        target = int(user_id) if user_id else actor.user_id
        entries: Sequence[TimeEntry] = self._entries.list_month(actor=actor, user_id=target, year=year, month=month)
        return build_month_view(entries, year=year, month=month, first_weekday=self._first_weekday)

