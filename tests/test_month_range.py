from __future__ import annotations

import datetime as dt

import pytest

from core.services.coverage import InvalidRange, MonthKey, expand_months, validate_range


def test_single_day_range_yields_its_month():
    day = dt.date(2024, 2, 29)
    assert expand_months(day, day) == (MonthKey(2024, 2),)


def test_range_inside_one_month_yields_one_key():
    assert expand_months(dt.date(2024, 5, 3), dt.date(2024, 5, 30)) == (MonthKey(2024, 5),)


def test_partial_months_at_both_ends_are_included():
    keys = expand_months(dt.date(2024, 1, 15), dt.date(2024, 3, 2))
    assert [str(k) for k in keys] == ["2024-01", "2024-02", "2024-03"]


def test_year_boundary_advances_year():
    keys = expand_months(dt.date(2023, 11, 30), dt.date(2024, 2, 1))
    assert keys == (MonthKey(2023, 11), MonthKey(2023, 12), MonthKey(2024, 1), MonthKey(2024, 2))


def test_reversed_range_is_empty():
    assert expand_months(dt.date(2024, 3, 1), dt.date(2024, 2, 28)) == ()


def test_reversed_range_within_same_month_is_empty():
    assert expand_months(dt.date(2024, 3, 20), dt.date(2024, 3, 5)) == ()


def test_datetimes_use_utc_calendar_month():
    # 2024-02-29 23:30 at UTC-05:00 is already March in UTC
    tz = dt.timezone(dt.timedelta(hours=-5))
    start = dt.datetime(2024, 2, 29, 23, 30, tzinfo=tz)
    end = dt.datetime(2024, 3, 15, 8, 0, tzinfo=dt.timezone.utc)
    assert expand_months(start, end) == (MonthKey(2024, 3),)


def test_validate_range_rejects_reversed_range():
    with pytest.raises(InvalidRange) as excinfo:
        validate_range(dt.date(2024, 3, 1), dt.date(2024, 2, 1))
    assert str(excinfo.value) == "End date cannot be before the start date."
    assert excinfo.value.start == dt.date(2024, 3, 1)
    assert isinstance(excinfo.value, ValueError)


def test_validate_range_accepts_equal_bounds():
    validate_range(dt.date(2024, 3, 1), dt.date(2024, 3, 1))


def test_month_key_ordering_and_format():
    assert MonthKey(2023, 12) < MonthKey(2024, 1)
    assert MonthKey(2024, 12).next() == MonthKey(2025, 1)
    assert str(MonthKey(2024, 3)) == "2024-03"
