from datetime import date
from typing import Any, Optional

import structlog
from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from vacation_booking.actors import Actor
from vacation_booking.models.bookings import Booking, BookingNight, BookingStatusChange
from vacation_booking.utils.datetime import iter_nights, utc_now

logger = structlog.get_logger(__name__)


def insert_booking(conn: Connection, data: dict[str, Any]) -> int:
    """
    Insert a booking row and return its ID.

    Args:
        conn: Active database connection (within transaction)
        data: Booking columns; timestamps default to now

    Returns:
        int: New booking ID

    Raises:
        sqlalchemy.exc.IntegrityError: If the reference or idempotency key is taken
    """
    now = utc_now()
    row = {"created_at": now, "updated_at": now, **data}
    result = conn.execute(insert(Booking).values(row))
    booking_id = int(result.inserted_primary_key[0])
    logger.debug("booking_inserted", booking_id=booking_id, reference=data["booking_reference"])
    return booking_id


def claim_booking_nights(
    conn: Connection, booking_id: int, listing_id: int, check_in: date, check_out: date
) -> int:
    """
    Reserve every night of [check_in, check_out) for a booking.

    The (listing_id, night) unique constraint makes this fail for a night
    already held by another pending or confirmed booking, even when both
    transactions passed the availability query.

    Returns:
        int: Number of nights claimed

    Raises:
        sqlalchemy.exc.IntegrityError: If any night is already claimed
    """
    rows = [
        {"booking_id": booking_id, "listing_id": listing_id, "night": night}
        for night in iter_nights(check_in, check_out)
    ]
    conn.execute(insert(BookingNight), rows)
    return len(rows)


def release_booking_nights(conn: Connection, booking_id: int) -> int:
    """Free the nights held by a booking. Returns the number of nights released."""
    result = conn.execute(delete(BookingNight).where(BookingNight.booking_id == booking_id))
    return int(result.rowcount or 0)


def update_booking(conn: Connection, booking_id: int, values: dict[str, Any]) -> None:
    """
    Update columns of a booking and bump updated_at.

    Args:
        conn: Active database connection (within transaction)
        booking_id: Booking ID
        values: Columns to set (booking_status, payment_status, canceled_at, ...)
    """
    conn.execute(
        update(Booking)
        .where(Booking.id == booking_id)
        .values(**values, updated_at=utc_now())
    )


def insert_status_change(
    conn: Connection,
    booking_id: int,
    from_status: Optional[str],
    to_status: str,
    actor: Optional[Actor] = None,
    note: Optional[str] = None,
    is_override: bool = False,
) -> None:
    """Append a row to the booking status audit trail."""
    conn.execute(
        insert(BookingStatusChange).values(
            booking_id=booking_id,
            from_status=from_status,
            to_status=to_status,
            actor_id=actor.user_id if actor else None,
            actor_role=actor.role.value if actor else None,
            note=note,
            is_override=is_override,
            created_at=utc_now(),
        )
    )
