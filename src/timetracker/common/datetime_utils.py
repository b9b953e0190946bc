from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if value is not None and not isinstance(value, str):
        raise ValidationError("Invalid date (expected YYYY-MM-DD)")
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Invalid date (expected YYYY-MM-DD)")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def require_month(year: int, month: int) -> None:
    if not 1 <= int(month) <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not 1900 <= int(year) <= 9999:
        raise ValidationError("Year out of range")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of the given month."""
    require_month(year, month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by delta months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def grid_days(year: int, month: int, *, first_weekday: int = 0) -> list[date]:
    """All days shown on a month grid, padded to whole weeks.

    first_weekday follows datetime.weekday(): 0 = Monday, 6 = Sunday.
    """
    start, end = month_bounds(year, month)
    start -= timedelta(days=(start.weekday() - first_weekday) % 7)
    last_weekday = (first_weekday + 6) % 7
    end += timedelta(days=(last_weekday - end.weekday()) % 7)

    days = []
    day = start
    while day <= end:
        days.append(day)
        day += timedelta(days=1)
    return days


def parse_time(value: Optional[str]) -> Optional[time]:
    """Parse 'HH:MM' (or 'HH:MM:SS'); blank means None."""
    if value is not None and not isinstance(value, str):
        raise ValidationError("Invalid time (expected HH:MM)")
    text = (value or "").strip()
    if not text:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError("Invalid time (expected HH:MM)")


def parse_optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
