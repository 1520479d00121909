"""
Unit tests for lodging tax resolution.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from vacation_booking.pricing.taxes import FALLBACK_TAX_RATE, TaxResolver


@pytest.mark.unit
@pytest.mark.parametrize(
    "country, city, expected",
    [
        ("Canada", "Toronto", "0.13"),
        ("Canada", "Vancouver", "0.12"),
        ("Canada", "Montreal", "0.13"),
        ("United States", "New York", "0.12"),
        ("United States", "Austin", "0.08"),
        ("Dominican Republic", "Punta Cana", "0.16"),
        ("Dominican Republic", None, "0.18"),
    ],
)
def test_rate_for_city_then_country_default(country: str, city: str | None, expected: str) -> None:
    """Test city rates with the country default as fallback."""
    assert TaxResolver().rate_for(country, city) == Decimal(expected)


@pytest.mark.unit
def test_unknown_country_uses_fallback_rate() -> None:
    """Test that countries outside the table use the flat fallback."""
    assert TaxResolver().rate_for("Portugal", "Lisbon") == FALLBACK_TAX_RATE
    assert TaxResolver().rate_for(None, None) == Decimal("0.10")


@pytest.mark.unit
def test_lookup_ignores_case_and_spaces() -> None:
    """Test that location matching is case and whitespace insensitive."""
    assert TaxResolver().rate_for("  united states ", "NEW YORK") == Decimal("0.12")


@pytest.mark.unit
def test_custom_table() -> None:
    """Test a resolver built from a custom table."""
    resolver = TaxResolver(
        table={"Spain": {"default": Decimal("0.10"), "Madrid": Decimal("0.14")}},
        fallback_rate=Decimal("0.05"),
    )

    assert resolver.rate_for("Spain", "Madrid") == Decimal("0.14")
    assert resolver.rate_for("Spain", "Sevilla") == Decimal("0.10")
    assert resolver.rate_for("Canada", "Toronto") == Decimal("0.05")
