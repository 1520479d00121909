from datetime import date
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from vacation_booking.models.listings import AvailabilityBlock, Listing, PricingRule, SeasonalRule

listings = Listing.__table__
pricing_rules = PricingRule.__table__
seasonal_rules = SeasonalRule.__table__
availability_blocks = AvailabilityBlock.__table__


def get_listing(
    conn: Connection, listing_id: int, for_update: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a listing row.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        for_update (bool): Lock the row until the transaction ends (PostgreSQL only;
                           SQLite ignores it and serializes writers itself).

    Returns:
        Optional[dict[str, Any]]: Listing columns, or None if not found.
    """
    stmt = select(listings).where(listings.c.id == listing_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_pricing_rule(conn: Connection, listing_id: int) -> Optional[dict[str, Any]]:
    """
    Fetch the pricing rule of a listing.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.

    Returns:
        Optional[dict[str, Any]]: Pricing rule columns, or None if the listing has none.
    """
    row = (
        conn.execute(select(pricing_rules).where(pricing_rules.c.listing_id == listing_id))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_seasonal_rules(
    conn: Connection, listing_id: int, start: date, end: date
) -> list[dict[str, Any]]:
    """
    Fetch active seasonal rules of a listing that touch [start, end).

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        start (date): First night of the stay.
        end (date): Check-out date (exclusive).

    Returns:
        list[dict[str, Any]]: Matching seasonal rule rows.
    """
    stmt = (
        select(seasonal_rules)
        .where(seasonal_rules.c.listing_id == listing_id)
        .where(seasonal_rules.c.is_active.is_(True))
        .where(seasonal_rules.c.start_date < end)
        .where(seasonal_rules.c.end_date >= start)
        .order_by(seasonal_rules.c.start_date)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_availability_blocks(
    conn: Connection, listing_id: int, start: date, end: date, only_blocked: bool = True
) -> list[dict[str, Any]]:
    """
    Fetch calendar entries of a listing for dates in [start, end).

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        start (date): First date (inclusive).
        end (date): Last date (exclusive).
        only_blocked (bool): Return only is_available = false entries.

    Returns:
        list[dict[str, Any]]: Rows with date, is_available and blocked_reason.
    """
    stmt = (
        select(
            availability_blocks.c.date,
            availability_blocks.c.is_available,
            availability_blocks.c.blocked_reason,
        )
        .where(availability_blocks.c.listing_id == listing_id)
        .where(availability_blocks.c.date >= start)
        .where(availability_blocks.c.date < end)
        .order_by(availability_blocks.c.date)
    )
    if only_blocked:
        stmt = stmt.where(availability_blocks.c.is_available.is_(False))
    return [dict(row) for row in conn.execute(stmt).mappings()]
