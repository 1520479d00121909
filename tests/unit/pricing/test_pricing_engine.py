"""
Unit tests for the stay pricing engine.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from vacation_booking.errors import InvalidDateRangeError
from vacation_booking.pricing.demand import OccupancyDemand
from vacation_booking.pricing.engine import (
    NIGHT_HOLIDAY,
    NIGHT_WEEKDAY,
    NIGHT_WEEKEND,
    PricingEngine,
    RateCard,
    breakdown_total,
)
from vacation_booking.pricing.holidays import HolidayCalendar
from vacation_booking.pricing.seasonal import SeasonalPeriod, SeasonalSchedule


@pytest.fixture
def engine() -> PricingEngine:
    """Pricing engine without holidays."""
    return PricingEngine(holidays=HolidayCalendar())


@pytest.fixture
def rate_card() -> RateCard:
    return RateCard(
        base_price=Decimal("100.00"),
        cleaning_fee=Decimal("50.00"),
        extra_guest_fee=Decimal("25.00"),
        security_deposit=Decimal("200.00"),
    )


@pytest.mark.unit
def test_quote_full_breakdown(engine: PricingEngine, rate_card: RateCard) -> None:
    """Test every component of a two-night weekday quote in New York."""
    quote = engine.quote(
        rate_card,
        check_in=date(2026, 3, 2),  # Monday
        check_out=date(2026, 3, 4),
        guests_count=3,
        country="United States",
        city="New York",
        today=date(2026, 2, 25),
    )

    assert quote.nights == 2
    assert [night.type for night in quote.nightly_rates] == [NIGHT_WEEKDAY, NIGHT_WEEKDAY]
    assert quote.nightly_subtotal == Decimal("200.00")
    assert quote.extra_guests == 1
    assert quote.extra_guest_fees == Decimal("50.00")
    assert quote.subtotal == Decimal("250.00")
    assert quote.discounts == ()
    assert quote.tax_rate == Decimal("0.12")
    assert quote.taxes == Decimal("36.00")  # (250 + 50 cleaning) * 12%
    assert quote.platform_fee == Decimal("7.50")
    assert quote.total_without_deposit == Decimal("343.50")
    assert quote.total == Decimal("543.50")


@pytest.mark.unit
def test_holiday_rate_wins_over_weekend_rate() -> None:
    """Test a Saturday holiday at 1.5x base next to a plain weekday at base price."""
    engine = PricingEngine(holidays=HolidayCalendar([date(2026, 12, 26)]))
    card = RateCard(
        base_price=Decimal("250.00"),
        weekend_price=Decimal("300.00"),
        cleaning_fee=Decimal("75.00"),
    )

    tuesday = engine.nightly_rate(card, date(2026, 12, 29))
    quote = engine.quote(
        card,
        check_in=date(2026, 12, 26),  # Saturday
        check_out=date(2026, 12, 28),
        guests_count=2,
        country="Canada",
        city="Toronto",
        today=date(2026, 12, 1),
    )

    assert (tuesday.type, tuesday.rate) == (NIGHT_WEEKDAY, Decimal("250.00"))
    assert [(night.type, night.rate) for night in quote.nightly_rates] == [
        (NIGHT_HOLIDAY, Decimal("375.00")),
        (NIGHT_WEEKDAY, Decimal("250.00")),  # Sunday night is not a weekend night
    ]
    assert quote.nightly_subtotal == Decimal("625.00")
    assert quote.discounts == ()
    assert quote.taxes == Decimal("91.00")  # (625 + 75) * 13%
    assert quote.platform_fee == Decimal("18.75")
    assert quote.total == quote.subtotal + quote.cleaning_fee + quote.taxes + quote.platform_fee
    assert quote.total == Decimal("809.75")


@pytest.mark.unit
def test_total_never_decreases_with_more_nights() -> None:
    """Test that without discounts a longer stay never costs less."""
    engine = PricingEngine(holidays=HolidayCalendar([date(2026, 4, 3)]), discount_rules=())
    card = RateCard(
        base_price=Decimal("99.99"),
        weekend_price=Decimal("129.95"),
        cleaning_fee=Decimal("45.00"),
        extra_guest_fee=Decimal("12.50"),
        security_deposit=Decimal("150.00"),
    )
    check_in = date(2026, 3, 2)

    totals = [
        engine.quote(
            card,
            check_in=check_in,
            check_out=date.fromordinal(check_in.toordinal() + nights),
            guests_count=3,
            country="Dominican Republic",
            city="Punta Cana",
            today=date(2026, 1, 5),
        ).total
        for nights in range(1, 41)
    ]

    assert all(shorter <= longer for shorter, longer in zip(totals, totals[1:]))
    assert totals[-1] > totals[0]


@pytest.mark.unit
def test_friday_and_saturday_use_weekend_price(engine: PricingEngine) -> None:
    """Test that Friday and Saturday nights use the weekend price."""
    card = RateCard(base_price=Decimal("100.00"), weekend_price=Decimal("140.00"))

    quote = engine.quote(
        card,
        check_in=date(2026, 3, 5),  # Thursday
        check_out=date(2026, 3, 8),
        guests_count=1,
        country="Canada",
        city="Toronto",
        today=date(2026, 2, 25),
    )

    assert [night.type for night in quote.nightly_rates] == [
        NIGHT_WEEKDAY,
        NIGHT_WEEKEND,
        NIGHT_WEEKEND,
    ]
    assert quote.nightly_subtotal == Decimal("380.00")


@pytest.mark.unit
def test_weekend_without_weekend_price_uses_base(engine: PricingEngine) -> None:
    """Test that weekend nights fall back to the base price."""
    nightly = engine.nightly_rate(RateCard(base_price=Decimal("100.00")), date(2026, 3, 6))

    assert nightly.type == NIGHT_WEEKEND
    assert nightly.rate == Decimal("100.00")


@pytest.mark.unit
def test_seasonal_and_demand_multipliers_apply_per_night(engine: PricingEngine) -> None:
    """Test that seasonal and demand multipliers stack on the night rate."""
    seasonal = SeasonalSchedule(
        [SeasonalPeriod("Spring", date(2026, 3, 1), date(2026, 3, 31), Decimal("1.20"))]
    )
    demand = OccupancyDemand(
        total_listings=10, booked_ranges=[(date(2026, 3, 2), date(2026, 3, 3))] * 10
    )

    first = engine.nightly_rate(
        RateCard(base_price=Decimal("100.00")), date(2026, 3, 2), seasonal, demand
    )
    second = engine.nightly_rate(
        RateCard(base_price=Decimal("100.00")), date(2026, 3, 3), seasonal, demand
    )

    assert first.rate == Decimal("156.00")  # 100 * 1.2 * 1.3 (fully booked)
    assert second.rate == Decimal("108.00")  # 100 * 1.2 * 0.9 (nothing booked)


@pytest.mark.unit
def test_nightly_rate_rounds_half_up(engine: PricingEngine) -> None:
    """Test that multiplied rates are rounded half-up to cents."""
    seasonal = SeasonalSchedule(
        [SeasonalPeriod("Peak", date(2026, 3, 1), date(2026, 3, 31), Decimal("1.15"))]
    )

    nightly = engine.nightly_rate(RateCard(base_price=Decimal("99.99")), date(2026, 3, 2), seasonal)

    assert nightly.rate == Decimal("114.99")  # 114.9885


@pytest.mark.unit
def test_breakdown_components_sum_to_total(engine: PricingEngine, rate_card: RateCard) -> None:
    """Test that the serialized breakdown re-sums to its total."""
    quote = engine.quote(
        rate_card,
        check_in=date(2026, 4, 1),
        check_out=date(2026, 4, 9),
        guests_count=4,
        country="Dominican Republic",
        city="Punta Cana",
        today=date(2026, 3, 1),
        listing_created_on=date(2026, 2, 20),
    )
    breakdown = quote.to_breakdown()

    assert [d["type"] for d in breakdown["discounts"]] == [
        "weekly_stay",
        "early_bird",
        "new_property",
    ]
    assert breakdown_total(breakdown) == Decimal(breakdown["total"])
    assert breakdown["tax_rate"] == "0.16"
    assert breakdown["total"] == str(quote.total)


@pytest.mark.unit
def test_breakdown_serializes_money_as_strings(engine: PricingEngine, rate_card: RateCard) -> None:
    """Test that money values in the breakdown are two-decimal strings."""
    quote = engine.quote(
        rate_card,
        check_in=date(2026, 3, 2),
        check_out=date(2026, 3, 3),
        guests_count=1,
        country="Canada",
        city="Toronto",
        today=date(2026, 2, 25),
    )
    breakdown = quote.to_breakdown()

    assert breakdown["nightly_breakdown"] == [
        {"date": "2026-03-02", "rate": "100.00", "type": NIGHT_WEEKDAY}
    ]
    assert breakdown["extra_guest_fees"] == "0.00"
    assert breakdown["cleaning_fee"] == "50.00"
    assert breakdown["security_deposit"] == "200.00"


@pytest.mark.unit
@pytest.mark.parametrize(
    "check_in, check_out",
    [
        (date(2026, 3, 2), date(2026, 3, 2)),
        (date(2026, 3, 4), date(2026, 3, 2)),
    ],
)
def test_quote_rejects_empty_or_inverted_range(
    engine: PricingEngine, rate_card: RateCard, check_in: date, check_out: date
) -> None:
    """Test that a stay without nights cannot be priced."""
    with pytest.raises(InvalidDateRangeError):
        engine.quote(
            rate_card,
            check_in=check_in,
            check_out=check_out,
            guests_count=2,
            country="Canada",
            city="Toronto",
            today=date(2026, 2, 25),
        )


@pytest.mark.unit
def test_rate_card_from_row_defaults() -> None:
    """Test that missing optional pricing columns default to zero and USD."""
    card = RateCard.from_row({"base_price": 120, "weekend_price": None})

    assert card.base_price == Decimal("120.00")
    assert card.weekend_price is None
    assert card.cleaning_fee == Decimal("0.00")
    assert card.currency == "USD"
    assert card.minimum_stay == 1
    assert card.maximum_stay is None


@pytest.mark.unit
def test_average_nightly_rate(engine: PricingEngine) -> None:
    """Test the average nightly rate over mixed weekday and weekend nights."""
    card = RateCard(base_price=Decimal("100.00"), weekend_price=Decimal("150.00"))

    quote = engine.quote(
        card,
        check_in=date(2026, 3, 5),
        check_out=date(2026, 3, 8),
        guests_count=2,
        country="Canada",
        city="Toronto",
        today=date(2026, 2, 25),
    )

    assert quote.average_nightly_rate == Decimal("133.33")
