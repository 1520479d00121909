"""
Quotes for stored listings.

Loads a listing's pricing rule, seasonal rules and area occupancy and runs
them through the PricingEngine. Used by booking creation, the quote and
estimate endpoints, price validation and the monthly pricing calendar.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import structlog
from dateutil.relativedelta import relativedelta
from sqlalchemy.engine import Connection, Engine

from vacation_booking.config import MAX_STAY_NIGHTS, PRICE_VALIDATION_TOLERANCE
from vacation_booking.db.readers.bookings import find_overlapping_bookings
from vacation_booking.db.readers.demand import count_active_listings, get_confirmed_ranges
from vacation_booking.db.readers.listings import (
    get_availability_blocks,
    get_listing,
    get_pricing_rule,
    get_seasonal_rules,
)
from vacation_booking.errors import BusinessRuleError, ListingNotFoundError
from vacation_booking.pricing.demand import OccupancyDemand
from vacation_booking.pricing.engine import PriceQuote, PricingEngine, RateCard
from vacation_booking.pricing.seasonal import SeasonalPeriod, SeasonalSchedule
from vacation_booking.services.availability import evaluate_availability
from vacation_booking.utils.datetime import ensure_utc, nights_between, utc_today
from vacation_booking.utils.money import money_to_json, to_money

logger = structlog.get_logger(__name__)

ESTIMATE_GUESTS = 2


@dataclass(frozen=True)
class PricedListing:
    listing: dict[str, Any]
    rate_card: RateCard


def load_priced_listing(conn: Connection, listing_id: int) -> PricedListing:
    """
    Load a listing with its pricing rule.

    Raises:
        ListingNotFoundError: Unknown listing
        BusinessRuleError: Listing has no pricing rule
    """
    listing = get_listing(conn, listing_id)
    if listing is None:
        raise ListingNotFoundError(listing_id)
    rule = get_pricing_rule(conn, listing_id)
    if rule is None:
        raise BusinessRuleError(f"Listing {listing_id} has no pricing configured")
    return PricedListing(listing=listing, rate_card=RateCard.from_row(rule))


def quote_stay(
    conn: Connection,
    pricing_engine: PricingEngine,
    priced: PricedListing,
    check_in: date,
    check_out: date,
    guests_count: int,
    today: date,
) -> PriceQuote:
    """
    Price a stay for a loaded listing using its seasonal rules and area demand.

    Raises:
        InvalidDateRangeError: If check_out is not after check_in
    """
    listing = priced.listing
    seasonal = SeasonalSchedule(
        SeasonalPeriod.from_row(row)
        for row in get_seasonal_rules(conn, listing["id"], check_in, check_out)
    )
    demand = OccupancyDemand(
        total_listings=count_active_listings(conn, listing["city"]),
        booked_ranges=get_confirmed_ranges(conn, listing["city"], check_in, check_out),
    )
    created_at = listing.get("created_at")
    return pricing_engine.quote(
        priced.rate_card,
        check_in=check_in,
        check_out=check_out,
        guests_count=guests_count,
        country=listing["country"],
        city=listing["city"],
        today=today,
        listing_created_on=ensure_utc(created_at).date() if created_at else None,
        seasonal=seasonal,
        demand=demand,
    )


def get_quote(
    engine: Engine,
    pricing_engine: PricingEngine,
    listing_id: int,
    check_in: date,
    check_out: date,
    guests_count: int,
    today: date | None = None,
) -> PriceQuote:
    """
    Full price quote for a stay at a stored listing.

    Raises:
        InvalidDateRangeError: If check_out is not after check_in
        BusinessRuleError: Stay longer than MAX_STAY_NIGHTS
        ListingNotFoundError: Unknown listing
    """
    if nights_between(check_in, check_out) > MAX_STAY_NIGHTS:
        raise BusinessRuleError(f"Stays are limited to {MAX_STAY_NIGHTS} nights")

    with engine.connect() as conn:
        priced = load_priced_listing(conn, listing_id)
        return quote_stay(
            conn,
            pricing_engine,
            priced,
            check_in,
            check_out,
            guests_count,
            today or utc_today(),
        )


def get_estimate(
    engine: Engine,
    pricing_engine: PricingEngine,
    listing_id: int,
    check_in: date,
    check_out: date,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Summary price for a stay with two guests, for listing pages.

    Returns:
        dict[str, Any]: nights, average_nightly_rate, total_before_fees
                        (after discounts), total_with_fees, currency
    """
    quote = get_quote(
        engine, pricing_engine, listing_id, check_in, check_out, ESTIMATE_GUESTS, today
    )
    return {
        "listing_id": listing_id,
        "currency": quote.currency,
        "nights": quote.nights,
        "average_nightly_rate": money_to_json(quote.average_nightly_rate),
        "total_before_fees": money_to_json(quote.subtotal - quote.discount_total),
        "total_with_fees": money_to_json(quote.total),
    }


def validate_quoted_price(
    engine: Engine,
    pricing_engine: PricingEngine,
    listing_id: int,
    check_in: date,
    check_out: date,
    guests_count: int,
    expected_total: Decimal,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Compare a client-side total with the current server price.

    A difference up to PRICE_VALIDATION_TOLERANCE is accepted, to absorb
    client rounding.
    """
    quote = get_quote(
        engine, pricing_engine, listing_id, check_in, check_out, guests_count, today
    )
    difference = abs(quote.total - to_money(expected_total))
    valid = difference <= PRICE_VALIDATION_TOLERANCE
    if not valid:
        logger.info(
            "quoted_price_mismatch",
            listing_id=listing_id,
            expected=str(expected_total),
            calculated=str(quote.total),
        )
    return {
        "valid": valid,
        "expected_total": money_to_json(expected_total),
        "calculated_total": money_to_json(quote.total),
        "difference": money_to_json(difference),
        "currency": quote.currency,
    }


def get_calendar_pricing(
    engine: Engine,
    pricing_engine: PricingEngine,
    listing_id: int,
    year: int,
    month: int,
    today: date | None = None,
) -> dict[str, Any]:
    """
    Nightly price and availability for every day of a month.

    Each day is priced as a one-night stay for two guests, so seasonal,
    holiday, weekend and demand adjustments show up per day.

    Raises:
        BusinessRuleError: Invalid month
    """
    if not 1 <= month <= 12:
        raise BusinessRuleError("month must be between 1 and 12")

    first = date(year, month, 1)
    after_last = first + relativedelta(months=1)
    today = today or utc_today()

    with engine.connect() as conn:
        priced = load_priced_listing(conn, listing_id)
        quote = quote_stay(
            conn, pricing_engine, priced, first, after_last, ESTIMATE_GUESTS, today
        )
        bookings = find_overlapping_bookings(conn, listing_id, first, after_last)
        blocks = get_availability_blocks(conn, listing_id, first, after_last)

    days = []
    for night in quote.nightly_rates:
        availability = evaluate_availability(
            night.date, night.date + timedelta(days=1), bookings, blocks
        )
        days.append(
            {
                "date": night.date.isoformat(),
                "price": money_to_json(night.rate),
                "type": night.type,
                "available": availability.available,
            }
        )

    return {
        "listing_id": listing_id,
        "year": year,
        "month": month,
        "month_name": calendar.month_name[month],
        "currency": quote.currency,
        "days": days,
    }
