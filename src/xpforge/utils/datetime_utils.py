# src/xpforge/utils/datetime_utils.py

"""Timezone-aware datetime helpers."""

from datetime import datetime, time, timedelta, timezone, tzinfo


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime.

    SQLite hands back naive values for columns written as UTC, so a naive
    datetime is taken to already be UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def day_bounds(as_of: datetime, tz: tzinfo) -> tuple[datetime, datetime]:
    """Return the UTC ``[start, end)`` window of the calendar day holding ``as_of``.

    The day is taken in ``tz``; both bounds are converted back to UTC so they
    can be compared against stored timestamps. Computing the end from the next
    local date keeps 23h and 25h DST days correct.
    """
    local = ensure_utc(as_of).astimezone(tz)
    start_local = datetime.combine(local.date(), time.min, tzinfo=tz)
    end_local = datetime.combine(local.date() + timedelta(days=1), time.min, tzinfo=tz)
    return start_local.astimezone(timezone.utc), end_local.astimezone(timezone.utc)
