from datetime import date, time

import pytest

from timetracker.common.datetime_utils import (
    grid_days,
    month_bounds,
    parse_iso_date,
    parse_optional_int,
    parse_time,
    shift_month,
)
from timetracker.core.exceptions import ValidationError


def test_parse_iso_date():
    assert parse_iso_date("2024-03-05") == date(2024, 3, 5)
    with pytest.raises(ValidationError):
        parse_iso_date("05.03.2024")


def test_parse_time():
    assert parse_time("08:30") == time(8, 30)
    assert parse_time("17:45:00") == time(17, 45)
    assert parse_time("") is None
    with pytest.raises(ValidationError):
        parse_time("25:00")


def test_parse_optional_int():
    assert parse_optional_int("12", "Project") == 12
    assert parse_optional_int(" ", "Project") is None
    with pytest.raises(ValidationError):
        parse_optional_int("x", "Project")


def test_month_bounds_handles_leap_year():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2023, 2) == (date(2023, 2, 1), date(2023, 2, 28))


def test_month_bounds_rejects_invalid_month():
    with pytest.raises(ValidationError):
        month_bounds(2024, 13)


@pytest.mark.parametrize(
    "year,month,delta,expected",
    [(2024, 1, -1, (2023, 12)), (2024, 12, 1, (2025, 1)), (2024, 3, 0, (2024, 3)), (2024, 11, 14, (2026, 1))],
)
def test_shift_month(year, month, delta, expected):
    assert shift_month(year, month, delta) == expected


def test_grid_days_covers_whole_weeks():
    days = grid_days(2024, 9)

    assert len(days) % 7 == 0
    assert days[0].weekday() == 0
    assert days[-1].weekday() == 6
    assert date(2024, 9, 1) in days and date(2024, 9, 30) in days


@pytest.mark.parametrize("raw", [20240305, 8.5, ["2024-03-05"]])
def test_date_and_time_parsers_reject_non_text(raw):
    with pytest.raises(ValidationError):
        parse_iso_date(raw)
    with pytest.raises(ValidationError):
        parse_time(raw)
