"""
Timezone utilities for the swim school.

Lesson times are stored as naive wall-clock datetimes in the school's
timezone so that day-of-week and hour comparisons match what the pool
schedule shows.
"""

from datetime import datetime

import pytz

from .config import settings


def get_school_timezone() -> pytz.BaseTzInfo:
    """Return the configured school timezone as a pytz timezone object."""
    return pytz.timezone(settings.school_timezone)


def to_school_local(dt: datetime) -> datetime:
    """
    Normalize a datetime to naive school-local time.

    Aware datetimes are converted to the school timezone; naive datetimes are
    assumed to already be school-local.
    """
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(get_school_timezone()).replace(tzinfo=None)


def get_school_now() -> datetime:
    """Current naive school-local datetime."""
    return datetime.now(get_school_timezone()).replace(tzinfo=None)


def sunday_based_weekday(dt: datetime) -> int:
    """Day index with Sunday = 0 ... Saturday = 6."""
    return (dt.weekday() + 1) % 7


def from_school_local(dt: datetime) -> datetime:
    """Attach the school timezone to a naive school-local datetime."""
    if dt.tzinfo is not None:
        return dt
    return get_school_timezone().localize(dt)
