from datetime import date
from decimal import Decimal

from timetracker.core.enums import BillingType, EntryStatus
from timetracker.entries.model import TimeEntry
from timetracker.month_view.service import build_month_view


def _entry(entry_id, day, *, hours=None, quantity=None, status=EntryStatus.SUBMITTED, unit=None):
    return TimeEntry(
        entry_id=entry_id,
        user_id=3,
        project_id=1,
        work_date=day,
        hours=Decimal(hours) if hours is not None else None,
        quantity=Decimal(quantity) if quantity is not None else None,
        status=status,
        billing_type=BillingType.UNIT if quantity is not None else BillingType.HOURLY,
        unit_name=unit,
    )


def test_two_hourly_entries_on_same_day_are_summed():
    entries = [_entry(1, date(2024, 3, 5), hours="4"), _entry(2, date(2024, 3, 5), hours="3.5")]

    view = build_month_view(entries, year=2024, month=3)

    day = view.get("2024-03-05")
    assert day.has_entry is True
    assert day.total_hours == Decimal("7.5")
    assert day.label == "7.5h"


def test_every_day_of_month_is_present_and_empty_days_have_no_status():
    view = build_month_view([], year=2024, month=2)

    assert len(view.days) == 29
    day = view.get(date(2024, 2, 10))
    assert day.has_entry is False
    assert day.total_hours == 0
    assert day.total_quantity == 0
    assert day.status is None
    assert day.is_holiday is False
    assert day.css_class == "day-empty"


def test_hours_and_quantities_are_kept_apart():
    entries = [
        _entry(1, date(2024, 3, 6), hours="2"),
        _entry(2, date(2024, 3, 6), quantity="3", unit="m2"),
    ]

    day = build_month_view(entries, year=2024, month=3).get("2024-03-06")

    assert day.total_hours == Decimal("2")
    assert day.total_quantity == Decimal("3")
    assert day.unit_name == "m2"
    assert day.label == "2h + 3 m2"


def test_last_entry_status_wins():
    entries = [
        _entry(1, date(2024, 3, 7), hours="1", status=EntryStatus.APPROVED),
        _entry(2, date(2024, 3, 7), hours="1", status=EntryStatus.REJECTED),
    ]

    day = build_month_view(entries, year=2024, month=3).get("2024-03-07")

    assert day.status == EntryStatus.REJECTED
    assert day.css_class == "day-rejected"


def test_grid_is_padded_to_whole_weeks_but_padding_is_not_aggregated():
    # March 2024 starts on a Friday and ends on a Sunday
    entries = [_entry(1, date(2024, 2, 29), hours="8"), _entry(2, date(2024, 4, 1), hours="8")]

    view = build_month_view(entries, year=2024, month=3)

    assert all(len(week) == 7 for week in view.weeks)
    first = view.weeks[0][0]
    assert first.day == date(2024, 2, 26)
    assert first.in_month is False
    assert first.has_entry is False
    assert first.css_class == "day-padding"
    assert view.weeks[-1][-1].day == date(2024, 3, 31)
    assert "2024-02-29" not in view.days
    assert view.total_hours == 0


def test_sunday_first_grid():
    view = build_month_view([], year=2024, month=3, first_weekday=6)

    assert view.weeks[0][0].day == date(2024, 2, 25)
    assert view.weeks[-1][-1].day == date(2024, 4, 6)


def test_month_totals():
    entries = [
        _entry(1, date(2024, 3, 1), hours="8"),
        _entry(2, date(2024, 3, 4), hours="7.25"),
        _entry(3, date(2024, 3, 5), quantity="10", unit="pcs"),
    ]

    view = build_month_view(entries, year=2024, month=3)

    assert view.total_hours == Decimal("15.25")
    assert view.total_quantity == Decimal("10")
