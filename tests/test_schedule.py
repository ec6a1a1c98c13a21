"""Tests for date/weekday fire-time calculations."""

from datetime import datetime, time, timedelta

import pytest

from pyblockflow.models import DayEntry, SpecificDayParams
from pyblockflow.triggers.schedule import (
    DEFAULT_DATE_OFFSET,
    next_specific_day_time,
    parse_time_of_day,
    specific_date_time,
    specific_day_times,
    weekday_occurrence,
)

WEDNESDAY_NOON = datetime(2024, 5, 8, 12, 0, 0, 123456)
MONDAY_NOON = datetime(2024, 5, 6, 12, 0, 0)


def test_parse_time_of_day():
    assert parse_time_of_day("10:00") == time(10, 0)
    assert parse_time_of_day("23:59:30") == time(23, 59, 30)


@pytest.mark.parametrize("value", ["10", "25:00", "aa:bb", "1:2:3:4"])
def test_parse_time_of_day_rejects_malformed(value):
    with pytest.raises(ValueError):
        parse_time_of_day(value)


def test_specific_date_time_combines_date_and_time():
    assert specific_date_time("2024-06-01", "08:30", WEDNESDAY_NOON) == datetime(2024, 6, 1, 8, 30)


def test_specific_date_time_accepts_datetime_strings():
    assert specific_date_time("2024-06-01T00:00:00.000Z", "08:30", WEDNESDAY_NOON) == datetime(
        2024, 6, 1, 8, 30
    )


def test_specific_date_without_date_fires_a_minute_from_now():
    assert specific_date_time(None, "08:30", WEDNESDAY_NOON) == WEDNESDAY_NOON + DEFAULT_DATE_OFFSET
    assert specific_date_time("", "08:30", WEDNESDAY_NOON) == WEDNESDAY_NOON + timedelta(seconds=60)


def test_weekday_occurrence_uses_sunday_started_week():
    # Sunday of that week is 2024-05-05
    assert weekday_occurrence(0, "09:00", WEDNESDAY_NOON) == datetime(2024, 5, 5, 9, 0)
    assert weekday_occurrence(6, "09:00", WEDNESDAY_NOON) == datetime(2024, 5, 11, 9, 0)


def test_weekday_occurrence_drops_microseconds():
    assert weekday_occurrence(3, "12:00", WEDNESDAY_NOON).microsecond == 0


def test_specific_day_times_sorted():
    params = SpecificDayParams(days=(DayEntry(id=5, times=("08:00",)), DayEntry(id=1, times=("18:00", "07:00"))))

    assert specific_day_times(params, WEDNESDAY_NOON) == [
        datetime(2024, 5, 6, 7, 0),
        datetime(2024, 5, 6, 18, 0),
        datetime(2024, 5, 10, 8, 0),
    ]


def test_next_specific_day_time_picks_first_future_occurrence():
    params = SpecificDayParams(days=(DayEntry(id=1, times=("10:00:00",)), DayEntry(id=4, times=("10:00:00",))))
    assert next_specific_day_time(params, WEDNESDAY_NOON) == datetime(2024, 5, 9, 10, 0)


def test_next_specific_day_time_rolls_over_to_next_week():
    """All of this week's occurrences passed: earliest one plus exactly 7 days."""
    params = SpecificDayParams(days=(DayEntry(id=1, times=("10:00:00",)),))

    result = next_specific_day_time(params, MONDAY_NOON)

    assert result == datetime(2024, 5, 6, 10, 0) + timedelta(days=7)


def test_next_specific_day_time_uses_shared_time_for_plain_ids():
    params = SpecificDayParams(days=(6,), time="20:15")
    assert next_specific_day_time(params, WEDNESDAY_NOON) == datetime(2024, 5, 11, 20, 15)


def test_next_specific_day_time_empty_days():
    assert next_specific_day_time(SpecificDayParams(days=()), WEDNESDAY_NOON) is None


def test_occurrence_equal_to_now_is_not_in_the_future():
    params = SpecificDayParams(days=(DayEntry(id=1, times=("12:00",)),))
    assert next_specific_day_time(params, MONDAY_NOON) == datetime(2024, 5, 13, 12, 0)
