"""
Calendar-day helpers.

Every "is X due by day Y" decision goes through `local_date_key` with the
same `day_start_hour`, so the queue, the grading path and the statistics agree
on what "today" is.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone, tzinfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def local_date_key(
    instant: datetime, day_start_hour: int = 0, tz: tzinfo | None = None
) -> str:
    """
    Format `instant` as the local YYYY-MM-DD day it belongs to.

    Args:
        instant: Aware datetime.
        day_start_hour: Hours after midnight at which a new day begins.
        tz: Local timezone. None means the system timezone.
    """
    local = instant.astimezone(tz)
    if day_start_hour:
        local = local - timedelta(hours=day_start_hour)
    return f"{local.year:04d}-{local.month:02d}-{local.day:02d}"


def shift_days(instant: datetime, days: int, tz: tzinfo | None = None) -> datetime:
    """
    Move `instant` by whole calendar days in local wall-clock time.

    Unlike adding `days * 24h`, the local time of day is kept across DST
    transitions. Returns an aware UTC datetime.
    """
    shifted = instant.astimezone(tz) + timedelta(days=days)
    if tz is None:
        # astimezone() attached a fixed offset; resolve the new date against the system zone
        shifted = shifted.replace(tzinfo=None).astimezone()
    return shifted.astimezone(timezone.utc)


def floor_ms(instant: datetime) -> datetime:
    """Drop sub-millisecond digits; stored instants only keep milliseconds."""
    return instant - timedelta(microseconds=instant.microsecond % 1000)


def today_key(now: datetime, day_start_hour: int = 0, tz: tzinfo | None = None) -> str:
    return local_date_key(now, day_start_hour, tz)


def yesterday_key(now: datetime, day_start_hour: int = 0, tz: tzinfo | None = None) -> str:
    return local_date_key(shift_days(now, -1, tz), day_start_hour, tz)


def is_due_by_date(
    due: datetime,
    reference: datetime,
    day_start_hour: int = 0,
    tz: tzinfo | None = None,
) -> bool:
    """
    True if `due` falls on the same local day as `reference` or earlier.

    Day granularity only: a card due at any time today counts as due now, a
    card due one second into tomorrow does not.
    """
    return local_date_key(due, day_start_hour, tz) <= local_date_key(reference, day_start_hour, tz)
