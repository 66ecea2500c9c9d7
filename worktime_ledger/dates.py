"""
Date Helpers

Pure functions over date keys (``YYYY-MM-DD``). Nothing here reads the
clock; callers pass ``today`` explicitly.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Iterator, Optional

from .aggregation import DayWindow
from .errors import InvalidInput

DATE_KEY_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def is_date_key(value) -> bool:
    """Return True if value is a zero-padded ISO date naming a real day."""
    if not isinstance(value, str) or not DATE_KEY_PATTERN.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date_key(value: str) -> date:
    """
    Parse a date key.

    Args:
        value: Date in ``YYYY-MM-DD`` form

    Returns:
        The corresponding date

    Raises:
        InvalidInput: If the value is not a valid date key
    """
    if not is_date_key(value):
        raise InvalidInput(f"Invalid date format: {value!r}. Use YYYY-MM-DD.")
    return date.fromisoformat(value)


def format_date_key(day: date) -> str:
    return day.strftime('%Y-%m-%d')


def offset_date(day: date, days: int) -> date:
    """Return the date ``days`` calendar days after ``day`` (negative goes back)."""
    return day + timedelta(days=days)


def date_range(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current = offset_date(current, 1)


def local_midnight(day: date) -> datetime:
    return datetime.combine(day, time()).astimezone()


def day_window(date_key: str) -> DayWindow:
    """
    Build the local-time window covering one calendar day.

    The window runs from local midnight of the date to local midnight of
    the following date, so DST transition days are 23 or 25 hours long.
    """
    day = parse_date_key(date_key)
    return DayWindow(start=local_midnight(day), end=local_midnight(offset_date(day, 1)))


def resolve_target_date(date_arg: Optional[str], yesterday: bool, today: date) -> str:
    """
    Work out which date a command applies to.

    Args:
        date_arg: Explicit ``--date`` value, if any
        yesterday: Whether ``--yesterday`` was given
        today: The current local date

    Returns:
        The target date key

    Raises:
        InvalidInput: If both options are given or the date is malformed
    """
    if date_arg and yesterday:
        raise InvalidInput("Use either --date or --yesterday, not both.")
    if date_arg:
        parse_date_key(date_arg)
        return date_arg
    if yesterday:
        return format_date_key(offset_date(today, -1))
    return format_date_key(today)
