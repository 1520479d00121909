"""
Demand multipliers derived from area occupancy.

Occupancy for a night is the number of confirmed bookings covering that night
in the listing's city divided by the number of active listings in that city.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Iterable, Protocol

from vacation_booking.utils.datetime import iter_nights

# (occupancy strictly above, multiplier), checked top down
HIGH_DEMAND_TIERS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("0.9"), Decimal("1.3")),
    (Decimal("0.8"), Decimal("1.2")),
    (Decimal("0.7"), Decimal("1.1")),
)
LOW_DEMAND_THRESHOLD = Decimal("0.3")
LOW_DEMAND_MULTIPLIER = Decimal("0.9")
NEUTRAL_MULTIPLIER = Decimal("1")


def multiplier_for_occupancy(booked: int, total_listings: int) -> Decimal:
    """
    Map an occupancy count to a demand multiplier.

    Args:
        booked: Confirmed bookings covering the night
        total_listings: Active listings in the area

    Returns:
        Decimal: 1.3 / 1.2 / 1.1 above 90% / 80% / 70%, 0.9 below 30%, else 1.0.
        An area with no listings is neutral.

    Example:
        >>> multiplier_for_occupancy(19, 20)
        Decimal('1.3')
    """
    if total_listings <= 0:
        return NEUTRAL_MULTIPLIER

    occupancy = Decimal(booked) / Decimal(total_listings)
    for threshold, multiplier in HIGH_DEMAND_TIERS:
        if occupancy > threshold:
            return multiplier
    if occupancy < LOW_DEMAND_THRESHOLD:
        return LOW_DEMAND_MULTIPLIER
    return NEUTRAL_MULTIPLIER


class DemandEstimator(Protocol):
    def multiplier_for(self, day: date) -> Decimal: ...


class FlatDemand:
    """Demand estimator that never adjusts prices."""

    def multiplier_for(self, day: date) -> Decimal:
        return NEUTRAL_MULTIPLIER


class OccupancyDemand:
    """
    Demand estimator over a precomputed occupancy snapshot.

    Args:
        total_listings: Active listings in the city
        booked_ranges: (check_in, check_out) of confirmed bookings in the city
    """

    def __init__(self, total_listings: int, booked_ranges: Iterable[tuple[date, date]]) -> None:
        self.total_listings = total_listings
        self._booked_per_night: Counter[date] = Counter()
        for check_in, check_out in booked_ranges:
            self._booked_per_night.update(iter_nights(check_in, check_out))

    def booked_on(self, day: date) -> int:
        return self._booked_per_night[day]

    def multiplier_for(self, day: date) -> Decimal:
        return multiplier_for_occupancy(self.booked_on(day), self.total_listings)


NEUTRAL_DEMAND = FlatDemand()
