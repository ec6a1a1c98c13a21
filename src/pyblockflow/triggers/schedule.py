"""
Fire-time calculations for date based triggers.

Pure functions: every calculation takes ``now`` explicitly so strategies
can pass the clock's notion of time and tests can pin it.

Weekday ids follow the editor's convention: 0=Sunday .. 6=Saturday.
Weeks start on Sunday, so ``weekday_occurrence()`` may return a moment
earlier this week; ``next_specific_day_time()`` is what rolls forward.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from pyblockflow.models import DayEntry, SpecificDayParams

__all__ = [
    "DEFAULT_DATE_OFFSET",
    "parse_time_of_day",
    "specific_date_time",
    "weekday_occurrence",
    "specific_day_times",
    "next_specific_day_time",
]

DEFAULT_DATE_OFFSET = timedelta(seconds=60)
"""Fire offset used when a specific-date trigger has no date."""


def parse_time_of_day(value: str) -> time:
    """
    Parse ``HH:MM`` or ``HH:MM:SS``.

    Raises:
        ValueError: If the string is not a valid time of day
    """
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time of day: {value!r}")

    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2] or 0) if len(parts) == 3 else 0
    return time(hour=hour, minute=minute, second=second)


def specific_date_time(date_str: str | None, time_str: str, now: datetime) -> datetime:
    """
    Absolute fire time for a specific-date trigger.

    Args:
        date_str: Calendar date (ISO ``YYYY-MM-DD``), or None
        time_str: Time of day on that date
        now: Current time

    Returns:
        ``date_str`` at ``time_str``, or ``now + 60s`` when there is no date
    """
    if not date_str:
        return now + DEFAULT_DATE_OFFSET

    day = date.fromisoformat(date_str[:10])
    return datetime.combine(day, parse_time_of_day(time_str))


def weekday_occurrence(day_id: int, time_str: str, now: datetime) -> datetime:
    """
    The given weekday and time within the Sunday-started week containing ``now``.

    Example:
        >>> now = datetime(2024, 5, 8, 12, 0)  # Wednesday
        >>> weekday_occurrence(1, "10:00:00", now)
        datetime.datetime(2024, 5, 6, 10, 0)
    """
    days_since_sunday = (now.weekday() + 1) % 7
    sunday = now.date() - timedelta(days=days_since_sunday)
    return datetime.combine(sunday + timedelta(days=day_id), parse_time_of_day(time_str))


def specific_day_times(params: SpecificDayParams, now: datetime) -> list[datetime]:
    """Expand every (day, time) pair into this week's occurrence, sorted ascending."""
    occurrences: list[datetime] = []
    for item in params.days:
        if isinstance(item, DayEntry):
            for time_str in item.times:
                occurrences.append(weekday_occurrence(item.id, time_str, now))
        else:
            occurrences.append(weekday_occurrence(item, params.time, now))

    return sorted(occurrences)


def next_specific_day_time(params: SpecificDayParams, now: datetime) -> datetime | None:
    """
    Next fire time for a weekly trigger.

    Picks the first occurrence this week strictly after ``now``. When all of
    them have passed, the earliest one is pushed exactly one week ahead.

    Returns:
        Fire time, or None when there is nothing to schedule
    """
    occurrences = specific_day_times(params, now)
    if not occurrences:
        return None

    for occurrence in occurrences:
        if occurrence > now:
            return occurrence

    return occurrences[0] + timedelta(days=7)
