from typing import Any

import structlog
from sqlalchemy.engine import Connection

from vacation_booking.db.writers._upsert import upsert_with_distinct_check
from vacation_booking.models.listings import AvailabilityBlock
from vacation_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def upsert_availability(conn: Connection, listing_id: int, entries: list[dict[str, Any]]) -> int:
    """
    Upsert calendar entries for a listing, updating only dates whose values changed.

    Args:
        conn: Active database connection (within transaction)
        listing_id: Listing ID
        entries: Dicts with date, is_available and optional blocked_reason

    Returns:
        int: Number of entries submitted
    """
    now = utc_now()
    rows = []

    for entry in entries:
        is_available = bool(entry["is_available"])
        rows.append(
            {
                "listing_id": listing_id,
                "date": entry["date"],
                "is_available": is_available,
                # Reasons only describe blocked dates
                "blocked_reason": None if is_available else entry.get("blocked_reason"),
                "created_at": now,
                "updated_at": now,
            }
        )

    if not rows:
        logger.info("availability_upsert_skipped", listing_id=listing_id)
        return 0

    upsert_with_distinct_check(
        conn=conn,
        table=AvailabilityBlock,
        rows=rows,
        conflict_columns=["listing_id", "date"],
        distinct_columns=["is_available", "blocked_reason"],
    )

    logger.info("availability_upserted", listing_id=listing_id, dates=len(rows))
    return len(rows)
