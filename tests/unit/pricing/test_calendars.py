"""
Unit tests for the holiday calendar and seasonal schedules.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from vacation_booking.pricing.holidays import (
    DEFAULT_HOLIDAY_DATES,
    HolidayCalendar,
    load_holiday_calendar,
)
from vacation_booking.pricing.seasonal import SeasonalPeriod, SeasonalSchedule


@pytest.mark.unit
def test_calendar_from_strings() -> None:
    """Test building a calendar from ISO dates."""
    calendar = HolidayCalendar.from_strings(["2026-12-25", "2026-01-01"])

    assert calendar.is_holiday(date(2026, 12, 25))
    assert date(2026, 1, 1) in calendar
    assert not calendar.is_holiday(date(2026, 12, 24))
    assert len(calendar) == 2


@pytest.mark.unit
def test_calendar_rejects_malformed_dates() -> None:
    """Test that configuration typos fail loudly."""
    with pytest.raises(ValueError):
        HolidayCalendar.from_strings(["2026-13-01"])


@pytest.mark.unit
def test_load_holiday_calendar_prefers_explicit_dates() -> None:
    """Test that configured dates replace the built-in list."""
    calendar = load_holiday_calendar(["2027-07-04"])

    assert len(calendar) == 1
    assert calendar.is_holiday(date(2027, 7, 4))


@pytest.mark.unit
def test_load_holiday_calendar_falls_back_to_defaults() -> None:
    """Test the built-in calendar when nothing is configured."""
    calendar = load_holiday_calendar([])

    assert len(calendar) == len(DEFAULT_HOLIDAY_DATES)
    assert calendar.is_holiday(date(2025, 12, 25))


@pytest.mark.unit
def test_highest_overlapping_season_wins() -> None:
    """Test overlapping seasonal periods."""
    schedule = SeasonalSchedule(
        [
            SeasonalPeriod("Summer", date(2026, 6, 1), date(2026, 8, 31), Decimal("1.25")),
            SeasonalPeriod("Festival", date(2026, 7, 10), date(2026, 7, 12), Decimal("1.60")),
            SeasonalPeriod(
                "Closed promo", date(2026, 7, 1), date(2026, 7, 31), Decimal("2.00"), False
            ),
        ]
    )

    assert schedule.multiplier_for(date(2026, 7, 11)) == Decimal("1.60")
    assert schedule.multiplier_for(date(2026, 7, 13)) == Decimal("1.25")
    assert schedule.multiplier_for(date(2026, 8, 31)) == Decimal("1.25")  # end date inclusive
    assert schedule.multiplier_for(date(2026, 9, 1)) == Decimal("1")


@pytest.mark.unit
def test_seasonal_period_from_row() -> None:
    """Test loading a seasonal rule row."""
    period = SeasonalPeriod.from_row(
        {
            "name": "Winter",
            "start_date": date(2026, 12, 1),
            "end_date": date(2026, 12, 31),
            "price_multiplier": 1.1,
        }
    )

    assert period.multiplier == Decimal("1.1")
    assert period.is_active
    assert period.covers(date(2026, 12, 31))
