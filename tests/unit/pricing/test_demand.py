"""
Unit tests for occupancy-based demand multipliers.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from vacation_booking.pricing.demand import FlatDemand, OccupancyDemand, multiplier_for_occupancy


@pytest.mark.unit
@pytest.mark.parametrize(
    "booked, total, expected",
    [
        (10, 10, "1.3"),
        (91, 100, "1.3"),
        (90, 100, "1.2"),  # exactly 90% is not above 90%
        (81, 100, "1.2"),
        (71, 100, "1.1"),
        (70, 100, "1"),
        (30, 100, "1"),
        (29, 100, "0.9"),
        (0, 5, "0.9"),
    ],
)
def test_multiplier_tiers(booked: int, total: int, expected: str) -> None:
    """Test every demand tier boundary."""
    assert multiplier_for_occupancy(booked, total) == Decimal(expected)


@pytest.mark.unit
def test_area_without_listings_is_neutral() -> None:
    """Test that an empty area does not divide by zero."""
    assert multiplier_for_occupancy(0, 0) == Decimal("1")


@pytest.mark.unit
def test_occupancy_counts_half_open_ranges() -> None:
    """Test that a booking occupies its nights but not its check-out day."""
    demand = OccupancyDemand(
        total_listings=4,
        booked_ranges=[
            (date(2026, 5, 1), date(2026, 5, 3)),
            (date(2026, 5, 2), date(2026, 5, 4)),
        ],
    )

    assert demand.booked_on(date(2026, 5, 1)) == 1
    assert demand.booked_on(date(2026, 5, 2)) == 2
    assert demand.booked_on(date(2026, 5, 3)) == 1
    assert demand.booked_on(date(2026, 5, 4)) == 0
    assert demand.multiplier_for(date(2026, 5, 2)) == Decimal("1")  # 50%
    assert demand.multiplier_for(date(2026, 5, 3)) == Decimal("0.9")  # 25%


@pytest.mark.unit
def test_flat_demand_never_adjusts() -> None:
    """Test the neutral estimator."""
    assert FlatDemand().multiplier_for(date(2026, 5, 2)) == Decimal("1")
