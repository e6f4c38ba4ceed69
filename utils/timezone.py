"""UTC-everywhere time handling and the injectable clock used by the core."""

from datetime import datetime, timezone
from typing import Callable

# Anything that returns an aware "now". Services accept one so tests can
# drive elapsed-time behaviour with a synthetic clock.
Clock = Callable[[], datetime]


def now_utc() -> datetime:
    """
    Current time in UTC.

    Use this instead of datetime.now() everywhere.
    """
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    Raises ValueError if datetime is naive (no timezone).
    """
    if dt.tzinfo is None:
        raise ValueError(
            "Cannot convert naive datetime to UTC. Datetime must be timezone-aware."
        )
    return dt.astimezone(timezone.utc)


def minutes_since(start: datetime, now: datetime) -> float:
    """
    Fractional minutes elapsed from start to now.

    Both datetimes must be timezone-aware. Negative when now precedes start.
    """
    return (to_utc(now) - to_utc(start)).total_seconds() / 60
