"""
Stay pricing.

Per night: base price, replaced by the weekend price on Friday and Saturday
nights, replaced by 1.5x base on holidays (holiday wins over weekend), then
multiplied by the seasonal and demand multipliers. Fees, discounts, taxes and
the guest service fee are layered on top of the nightly subtotal.

Every amount is rounded half-up to cents as it is produced and the total is
the exact sum of the rounded components, so a stored breakdown re-sums to the
stored total.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping

import structlog

from vacation_booking.config import GUEST_SERVICE_FEE_RATE, INCLUDED_GUESTS
from vacation_booking.errors import InvalidDateRangeError
from vacation_booking.metrics import pricing_duration
from vacation_booking.pricing.demand import NEUTRAL_DEMAND, DemandEstimator
from vacation_booking.pricing.discounts import (
    DEFAULT_DISCOUNT_RULES,
    Discount,
    DiscountContext,
    DiscountRule,
    evaluate_discounts,
)
from vacation_booking.pricing.holidays import HolidayCalendar
from vacation_booking.pricing.seasonal import NO_SEASONS, SeasonalSchedule
from vacation_booking.pricing.taxes import TaxResolver
from vacation_booking.utils.datetime import iter_nights, nights_between
from vacation_booking.utils.money import ZERO, money_to_json, to_money

logger = structlog.get_logger(__name__)

HOLIDAY_MULTIPLIER = Decimal("1.5")
WEEKEND_DAYS = frozenset({4, 5})  # Friday and Saturday nights

NIGHT_WEEKDAY = "weekday"
NIGHT_WEEKEND = "weekend"
NIGHT_HOLIDAY = "holiday"


@dataclass(frozen=True)
class RateCard:
    """Pricing rule of a listing, as used by the engine."""

    base_price: Decimal
    weekend_price: Decimal | None = None
    cleaning_fee: Decimal = ZERO
    extra_guest_fee: Decimal = ZERO
    security_deposit: Decimal = ZERO
    currency: str = "USD"
    minimum_stay: int = 1
    maximum_stay: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> RateCard:
        weekend_price = row.get("weekend_price")
        return cls(
            base_price=to_money(row["base_price"]),
            weekend_price=to_money(weekend_price) if weekend_price is not None else None,
            cleaning_fee=to_money(row.get("cleaning_fee")),
            extra_guest_fee=to_money(row.get("extra_guest_fee")),
            security_deposit=to_money(row.get("security_deposit")),
            currency=row.get("currency") or "USD",
            minimum_stay=row.get("minimum_stay") or 1,
            maximum_stay=row.get("maximum_stay"),
        )


@dataclass(frozen=True)
class NightlyRate:
    date: date
    rate: Decimal
    type: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "rate": money_to_json(self.rate), "type": self.type}


@dataclass(frozen=True)
class PriceQuote:
    """Fully priced stay. Build with PricingEngine.quote()."""

    currency: str
    nights: int
    base_price: Decimal
    nightly_rates: tuple[NightlyRate, ...]
    nightly_subtotal: Decimal
    extra_guests: int
    extra_guest_fees: Decimal
    subtotal: Decimal
    discounts: tuple[Discount, ...]
    discount_total: Decimal
    cleaning_fee: Decimal
    tax_rate: Decimal
    taxes: Decimal
    platform_fee_rate: Decimal
    platform_fee: Decimal
    security_deposit: Decimal
    total_without_deposit: Decimal
    total: Decimal

    @property
    def average_nightly_rate(self) -> Decimal:
        return to_money(self.nightly_subtotal / self.nights)

    def to_breakdown(self) -> dict[str, Any]:
        """JSON-safe breakdown, money as two-decimal strings."""
        return {
            "currency": self.currency,
            "nights": self.nights,
            "nightly_rate": money_to_json(self.base_price),
            "nightly_breakdown": [night.to_dict() for night in self.nightly_rates],
            "nightly_subtotal": money_to_json(self.nightly_subtotal),
            "extra_guests": self.extra_guests,
            "extra_guest_fees": money_to_json(self.extra_guest_fees),
            "subtotal": money_to_json(self.subtotal),
            "discounts": [discount.to_dict() for discount in self.discounts],
            "discount_total": money_to_json(self.discount_total),
            "cleaning_fee": money_to_json(self.cleaning_fee),
            "tax_rate": str(self.tax_rate),
            "taxes": money_to_json(self.taxes),
            "platform_fee_rate": str(self.platform_fee_rate),
            "platform_fee": money_to_json(self.platform_fee),
            "security_deposit": money_to_json(self.security_deposit),
            "total_without_deposit": money_to_json(self.total_without_deposit),
            "total": money_to_json(self.total),
        }


def breakdown_total(breakdown: Mapping[str, Any]) -> Decimal:
    """
    Re-sum the components of a serialized breakdown.

    Equals breakdown["total"] for every breakdown produced by PriceQuote.to_breakdown().
    """
    subtotal = Decimal(breakdown["subtotal"])
    discounts = sum((Decimal(d["amount"]) for d in breakdown["discounts"]), ZERO)
    return (
        subtotal
        - discounts
        + Decimal(breakdown["cleaning_fee"])
        + Decimal(breakdown["taxes"])
        + Decimal(breakdown["platform_fee"])
        + Decimal(breakdown["security_deposit"])
    )


class PricingEngine:
    """
    Prices stays for a listing.

    All collaborators are injected; quote() is deterministic for a given
    rate card, date range, "today", seasonal schedule and demand estimator.

    Example:
        >>> engine = PricingEngine(holidays=HolidayCalendar())
        >>> quote = engine.quote(
        ...     RateCard(base_price=Decimal("100")),
        ...     check_in=date(2026, 3, 2),
        ...     check_out=date(2026, 3, 4),
        ...     guests_count=2,
        ...     country="Canada",
        ...     city="Toronto",
        ...     today=date(2026, 2, 25),
        ... )
        >>> quote.nightly_subtotal
        Decimal('200.00')
    """

    def __init__(
        self,
        holidays: HolidayCalendar,
        tax_resolver: TaxResolver | None = None,
        discount_rules: Iterable[DiscountRule] = DEFAULT_DISCOUNT_RULES,
        service_fee_rate: Decimal = GUEST_SERVICE_FEE_RATE,
        included_guests: int = INCLUDED_GUESTS,
    ) -> None:
        self.holidays = holidays
        self.tax_resolver = tax_resolver or TaxResolver()
        self.discount_rules = tuple(discount_rules)
        self.service_fee_rate = service_fee_rate
        self.included_guests = included_guests

    def nightly_rate(
        self,
        rate_card: RateCard,
        day: date,
        seasonal: SeasonalSchedule = NO_SEASONS,
        demand: DemandEstimator = NEUTRAL_DEMAND,
    ) -> NightlyRate:
        if self.holidays.is_holiday(day):
            rate = rate_card.base_price * HOLIDAY_MULTIPLIER
            kind = NIGHT_HOLIDAY
        elif day.weekday() in WEEKEND_DAYS:
            rate = rate_card.weekend_price or rate_card.base_price
            kind = NIGHT_WEEKEND
        else:
            rate = rate_card.base_price
            kind = NIGHT_WEEKDAY

        rate = rate * seasonal.multiplier_for(day) * demand.multiplier_for(day)
        return NightlyRate(date=day, rate=to_money(rate), type=kind)

    def quote(
        self,
        rate_card: RateCard,
        check_in: date,
        check_out: date,
        guests_count: int,
        country: str | None,
        city: str | None,
        today: date,
        listing_created_on: date | None = None,
        seasonal: SeasonalSchedule = NO_SEASONS,
        demand: DemandEstimator = NEUTRAL_DEMAND,
    ) -> PriceQuote:
        """
        Price a stay over [check_in, check_out).

        Args:
            rate_card: Listing pricing rule
            check_in: First night
            check_out: Departure day (not charged)
            guests_count: Guests staying; guests beyond the included count pay the extra fee
            country: Listing country, for tax lookup
            city: Listing city, for tax lookup
            today: Booking date, for early-bird and last-minute discounts
            listing_created_on: Listing creation date, for the new-listing discount
            seasonal: Seasonal schedule of the listing
            demand: Demand estimator for the listing's area

        Returns:
            PriceQuote: Priced stay with per-night detail

        Raises:
            InvalidDateRangeError: If check_out is not after check_in
        """
        nights = nights_between(check_in, check_out)
        if nights <= 0:
            raise InvalidDateRangeError("Check-out date must be after check-in date")

        started = time.perf_counter()

        nightly_rates = tuple(
            self.nightly_rate(rate_card, day, seasonal, demand)
            for day in iter_nights(check_in, check_out)
        )
        nightly_subtotal = sum((night.rate for night in nightly_rates), ZERO)

        extra_guests = max(0, guests_count - self.included_guests)
        extra_guest_fees = to_money(extra_guests * rate_card.extra_guest_fee * nights)
        subtotal = nightly_subtotal + extra_guest_fees

        discounts = tuple(
            evaluate_discounts(
                DiscountContext(
                    nights=nights,
                    subtotal=subtotal,
                    check_in=check_in,
                    today=today,
                    listing_created_on=listing_created_on,
                ),
                self.discount_rules,
            )
        )
        discount_total = sum((discount.amount for discount in discounts), ZERO)
        discounted = subtotal - discount_total

        tax_rate = self.tax_resolver.rate_for(country, city)
        taxes = to_money((discounted + rate_card.cleaning_fee) * tax_rate)
        platform_fee = to_money(discounted * self.service_fee_rate)

        total_without_deposit = discounted + rate_card.cleaning_fee + taxes + platform_fee
        total = total_without_deposit + rate_card.security_deposit

        pricing_duration.labels(operation="quote").observe(time.perf_counter() - started)
        logger.debug(
            "stay_priced",
            nights=nights,
            subtotal=str(subtotal),
            discounts=[discount.type for discount in discounts],
            total=str(total),
        )

        return PriceQuote(
            currency=rate_card.currency,
            nights=nights,
            base_price=rate_card.base_price,
            nightly_rates=nightly_rates,
            nightly_subtotal=nightly_subtotal,
            extra_guests=extra_guests,
            extra_guest_fees=extra_guest_fees,
            subtotal=subtotal,
            discounts=discounts,
            discount_total=discount_total,
            cleaning_fee=rate_card.cleaning_fee,
            tax_rate=tax_rate,
            taxes=taxes,
            platform_fee_rate=self.service_fee_rate,
            platform_fee=platform_fee,
            security_deposit=rate_card.security_deposit,
            total_without_deposit=total_without_deposit,
            total=total,
        )
