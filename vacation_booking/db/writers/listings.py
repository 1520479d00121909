"""
Listing, pricing rule and seasonal rule writers.

Listings are owned by the listing management service; these writers seed the
tables for local development and tests.
"""

from typing import Any

import structlog
from sqlalchemy import insert
from sqlalchemy.engine import Connection

from vacation_booking.db.writers._upsert import upsert_with_distinct_check
from vacation_booking.models.listings import Listing, PricingRule, SeasonalRule
from vacation_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

PRICING_COLUMNS = [
    "base_price",
    "weekend_price",
    "cleaning_fee",
    "extra_guest_fee",
    "security_deposit",
    "currency",
    "minimum_stay",
    "maximum_stay",
]


def insert_listing(conn: Connection, data: dict[str, Any]) -> int:
    """
    Insert a listing and return its ID.

    Args:
        conn: Active database connection (within transaction)
        data: Listing columns; created_at defaults to now

    Returns:
        int: New listing ID
    """
    now = utc_now()
    row = {"created_at": now, "updated_at": now, **data}
    result = conn.execute(insert(Listing).values(row))
    listing_id = result.inserted_primary_key[0]
    logger.info("listing_inserted", listing_id=listing_id)
    return int(listing_id)


def upsert_pricing_rule(conn: Connection, listing_id: int, data: dict[str, Any]) -> None:
    """
    Create or update the pricing rule of a listing.

    Args:
        conn: Active database connection (within transaction)
        listing_id: Listing ID
        data: Pricing columns (base_price required)
    """
    now = utc_now()
    row = {
        "listing_id": listing_id,
        "weekend_price": None,
        "cleaning_fee": 0,
        "extra_guest_fee": 0,
        "security_deposit": 0,
        "currency": "USD",
        "minimum_stay": 1,
        "maximum_stay": None,
        **data,
        "created_at": now,
        "updated_at": now,
    }
    upsert_with_distinct_check(
        conn=conn,
        table=PricingRule,
        rows=[row],
        conflict_columns=["listing_id"],
        distinct_columns=PRICING_COLUMNS,
    )
    logger.info("pricing_rule_upserted", listing_id=listing_id)


def insert_seasonal_rule(conn: Connection, listing_id: int, data: dict[str, Any]) -> int:
    """Insert a seasonal rule for a listing and return its ID."""
    row = {"listing_id": listing_id, "is_active": True, "created_at": utc_now(), **data}
    result = conn.execute(insert(SeasonalRule).values(row))
    rule_id = result.inserted_primary_key[0]
    logger.info("seasonal_rule_inserted", listing_id=listing_id, rule_id=rule_id)
    return int(rule_id)
