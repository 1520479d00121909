"""
Holiday calendar used for holiday night pricing.

The calendar is built once from configuration and injected into the pricing
engine, so tests can substitute their own dates.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

import structlog

from vacation_booking.config import HOLIDAY_DATES

logger = structlog.get_logger(__name__)

# Dominican Republic public holidays, 2025
DEFAULT_HOLIDAY_DATES: tuple[str, ...] = (
    "2025-01-01",
    "2025-01-06",
    "2025-01-21",
    "2025-02-27",
    "2025-04-18",
    "2025-05-01",
    "2025-06-19",
    "2025-08-16",
    "2025-09-24",
    "2025-11-06",
    "2025-12-25",
)


class HolidayCalendar:
    """Immutable set of holiday dates."""

    def __init__(self, dates: Iterable[date] = ()) -> None:
        self._dates = frozenset(dates)

    @classmethod
    def from_strings(cls, values: Iterable[str]) -> HolidayCalendar:
        """
        Build a calendar from ISO date strings.

        Raises:
            ValueError: If a value is not a YYYY-MM-DD date
        """
        return cls(date.fromisoformat(value) for value in values)

    def is_holiday(self, day: date) -> bool:
        return day in self._dates

    def __contains__(self, day: object) -> bool:
        return day in self._dates

    def __len__(self) -> int:
        return len(self._dates)


def load_holiday_calendar(raw_dates: list[str] | None = None) -> HolidayCalendar:
    """
    Build the holiday calendar from HOLIDAY_DATES, falling back to the built-in list.

    Args:
        raw_dates: Explicit ISO dates (defaults to the HOLIDAY_DATES setting)

    Returns:
        HolidayCalendar: Calendar to inject into the pricing engine
    """
    values = raw_dates if raw_dates is not None else HOLIDAY_DATES
    source = "config"
    if not values:
        values = list(DEFAULT_HOLIDAY_DATES)
        source = "default"

    calendar = HolidayCalendar.from_strings(values)
    logger.info("holiday_calendar_loaded", source=source, count=len(calendar))
    return calendar
