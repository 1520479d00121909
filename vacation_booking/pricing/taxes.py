"""Static lodging tax table keyed by country and city."""

from __future__ import annotations

from decimal import Decimal
from typing import Mapping

DEFAULT_KEY = "default"
FALLBACK_TAX_RATE = Decimal("0.10")

TAX_TABLE: dict[str, dict[str, Decimal]] = {
    "Dominican Republic": {
        DEFAULT_KEY: Decimal("0.18"),
        "Santo Domingo": Decimal("0.18"),
        "Punta Cana": Decimal("0.16"),
        "Puerto Plata": Decimal("0.16"),
    },
    "United States": {
        DEFAULT_KEY: Decimal("0.08"),
        "New York": Decimal("0.12"),
        "Florida": Decimal("0.06"),
        "California": Decimal("0.10"),
    },
    "Canada": {
        DEFAULT_KEY: Decimal("0.13"),
        "Toronto": Decimal("0.13"),
        "Vancouver": Decimal("0.12"),
    },
}


def _normalize(value: str | None) -> str:
    return (value or "").strip().casefold()


class TaxResolver:
    """
    Resolve the tax rate for a listing location.

    City match first, then the country default, then a flat fallback for
    countries missing from the table. Matching ignores case and outer spaces.
    """

    def __init__(
        self,
        table: Mapping[str, Mapping[str, Decimal]] = TAX_TABLE,
        fallback_rate: Decimal = FALLBACK_TAX_RATE,
    ) -> None:
        self.fallback_rate = fallback_rate
        self._table = {
            _normalize(country): {_normalize(city): rate for city, rate in cities.items()}
            for country, cities in table.items()
        }

    def rate_for(self, country: str | None, city: str | None) -> Decimal:
        cities = self._table.get(_normalize(country))
        if cities is None:
            return self.fallback_rate
        return cities.get(_normalize(city), cities[DEFAULT_KEY])
