from datetime import date
from typing import Any, Iterable, Optional

from sqlalchemy import Select, select
from sqlalchemy.engine import Connection

from vacation_booking.models.bookings import Booking, BookingPayment, BookingStatusChange
from vacation_booking.models.listings import Listing

bookings = Booking.__table__
booking_payments = BookingPayment.__table__
status_changes = BookingStatusChange.__table__
listings = Listing.__table__

BLOCKING_STATUSES = ("pending", "confirmed")


def _booking_select() -> Select[Any]:
    return select(
        bookings,
        listings.c.owner_id.label("listing_owner_id"),
        listings.c.owner_email.label("listing_owner_email"),
        listings.c.name.label("listing_name"),
    ).join(listings, listings.c.id == bookings.c.listing_id)


def get_booking(
    conn: Connection, booking_id: int, for_update: bool = False
) -> Optional[dict[str, Any]]:
    """
    Fetch a booking with its listing owner and name.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking ID.
        for_update (bool): Lock the booking row until the transaction ends.

    Returns:
        Optional[dict[str, Any]]: Booking columns plus listing_owner_id,
                                  listing_owner_email and listing_name; None if not found.
    """
    stmt = _booking_select().where(bookings.c.id == booking_id)
    if for_update:
        stmt = stmt.with_for_update(of=bookings)
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_booking_by_idempotency_key(conn: Connection, key: str) -> Optional[dict[str, Any]]:
    """Fetch the booking created with the given Idempotency-Key, if any."""
    row = (
        conn.execute(_booking_select().where(bookings.c.idempotency_key == key))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def get_booking_by_reference(conn: Connection, reference: str) -> Optional[dict[str, Any]]:
    """Fetch a booking by its public booking reference."""
    row = (
        conn.execute(_booking_select().where(bookings.c.booking_reference == reference))
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def find_overlapping_bookings(
    conn: Connection,
    listing_id: int,
    check_in: date,
    check_out: date,
    statuses: Iterable[str] = BLOCKING_STATUSES,
    exclude_booking_id: Optional[int] = None,
) -> list[dict[str, Any]]:
    """
    Find bookings of a listing whose stay overlaps [check_in, check_out).

    Two half-open ranges overlap when each starts before the other ends, so a
    guest may check in on the day the previous guest checks out.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        listing_id (int): Listing ID.
        check_in (date): Candidate check-in date.
        check_out (date): Candidate check-out date.
        statuses (Iterable[str]): Booking statuses that hold dates.
        exclude_booking_id (Optional[int]): Booking to ignore (when re-checking itself).

    Returns:
        list[dict[str, Any]]: id, booking_reference, dates and status of each overlap.
    """
    stmt = (
        select(
            bookings.c.id,
            bookings.c.booking_reference,
            bookings.c.check_in_date,
            bookings.c.check_out_date,
            bookings.c.booking_status,
        )
        .where(bookings.c.listing_id == listing_id)
        .where(bookings.c.booking_status.in_(list(statuses)))
        .where(bookings.c.check_in_date < check_out)
        .where(bookings.c.check_out_date > check_in)
        .order_by(bookings.c.check_in_date)
    )
    if exclude_booking_id is not None:
        stmt = stmt.where(bookings.c.id != exclude_booking_id)
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_booking_payments(conn: Connection, booking_id: int) -> list[dict[str, Any]]:
    """Ledger rows of a booking, oldest first."""
    stmt = (
        select(booking_payments)
        .where(booking_payments.c.booking_id == booking_id)
        .order_by(booking_payments.c.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def count_charge_attempts(conn: Connection, booking_id: int) -> int:
    """Number of charge rows (refunds excluded) recorded for a booking."""
    return sum(
        1 for row in list_booking_payments(conn, booking_id) if row["payment_method"] != "refund"
    )


def get_completed_charge(conn: Connection, booking_id: int) -> Optional[dict[str, Any]]:
    """
    Latest completed charge of a booking.

    Returns:
        Optional[dict[str, Any]]: Ledger row, or None if the booking was never charged.
    """
    stmt = (
        select(booking_payments)
        .where(booking_payments.c.booking_id == booking_id)
        .where(booking_payments.c.transaction_status == "completed")
        .where(booking_payments.c.amount > 0)
        .order_by(booking_payments.c.id.desc())
        .limit(1)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def get_payment_by_gateway_id(conn: Connection, gateway_id: str) -> Optional[dict[str, Any]]:
    """Latest ledger row recorded for a gateway transaction id."""
    stmt = (
        select(booking_payments)
        .where(booking_payments.c.payment_gateway_id == gateway_id)
        .order_by(booking_payments.c.id.desc())
        .limit(1)
    )
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def list_status_changes(conn: Connection, booking_id: int) -> list[dict[str, Any]]:
    """Audit trail of a booking, oldest first."""
    stmt = (
        select(status_changes)
        .where(status_changes.c.booking_id == booking_id)
        .order_by(status_changes.c.id)
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def list_finished_booking_ids(conn: Connection, today: date) -> list[int]:
    """IDs of confirmed bookings whose check-out date is today or earlier."""
    stmt = (
        select(bookings.c.id)
        .where(bookings.c.booking_status == "confirmed")
        .where(bookings.c.check_out_date <= today)
        .order_by(bookings.c.id)
    )
    return [row.id for row in conn.execute(stmt)]
