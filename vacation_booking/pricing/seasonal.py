"""Seasonal price multipliers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping

NEUTRAL_MULTIPLIER = Decimal("1")


@dataclass(frozen=True)
class SeasonalPeriod:
    name: str
    start_date: date
    end_date: date  # inclusive
    multiplier: Decimal
    is_active: bool = True

    def covers(self, day: date) -> bool:
        return self.is_active and self.start_date <= day <= self.end_date

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> SeasonalPeriod:
        return cls(
            name=row["name"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            multiplier=Decimal(str(row["price_multiplier"])),
            is_active=bool(row.get("is_active", True)),
        )


class SeasonalSchedule:
    """
    Seasonal rules of one listing.

    Overlapping periods are allowed; the highest multiplier covering a night
    wins, and nights outside every period use 1.0.
    """

    def __init__(self, periods: Iterable[SeasonalPeriod] = ()) -> None:
        self.periods = tuple(periods)

    def multiplier_for(self, day: date) -> Decimal:
        multipliers = [period.multiplier for period in self.periods if period.covers(day)]
        return max(multipliers) if multipliers else NEUTRAL_MULTIPLIER


NO_SEASONS = SeasonalSchedule()
