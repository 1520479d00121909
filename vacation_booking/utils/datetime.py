"""UTC datetime and date-range utilities."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    This function should be used instead of datetime.now() or datetime.utcnow()
    to ensure all timestamps are timezone-aware and stored in UTC.

    Returns:
        Timezone-aware datetime in UTC

    Example:
        >>> now = utc_now()
        >>> now.tzinfo is not None
        True
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return the current UTC calendar date."""
    return utc_now().date()


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime, or convert an aware one to UTC.

    Some drivers (SQLite) hand back naive datetimes for timezone-aware columns.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    """
    Yield every night of the half-open stay [check_in, check_out).

    Example:
        >>> list(iter_nights(date(2026, 1, 1), date(2026, 1, 3)))
        [datetime.date(2026, 1, 1), datetime.date(2026, 1, 2)]
    """
    current = check_in
    while current < check_out:
        yield current
        current += timedelta(days=1)


def nights_between(check_in: date, check_out: date) -> int:
    """Number of nights in [check_in, check_out); negative for inverted ranges."""
    return (check_out - check_in).days
