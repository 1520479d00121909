"""
Listing availability.

A stay [check_in, check_out) is bookable when no pending or confirmed booking
of the listing overlaps it and none of its nights is blocked on the listing
calendar. The rule itself (evaluate_availability) is pure; the DB-backed
functions load its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

import structlog
from sqlalchemy.engine import Connection, Engine

from vacation_booking.actors import Actor
from vacation_booking.db.readers.bookings import find_overlapping_bookings
from vacation_booking.db.readers.listings import get_availability_blocks, get_listing
from vacation_booking.db.writers.availability import upsert_availability
from vacation_booking.errors import (
    InvalidDateRangeError,
    ListingNotFoundError,
    PermissionDeniedError,
)
from vacation_booking.services.booking_state import HOLDING_STATUSES

logger = structlog.get_logger(__name__)


@dataclass
class AvailabilityResult:
    available: bool
    conflicts: list[dict[str, Any]] = field(default_factory=list)
    blocked_dates: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "available": self.available,
            "conflicts": self.conflicts,
            "blocked_dates": self.blocked_dates,
        }


def ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """True if half-open ranges [start_a, end_a) and [start_b, end_b) share a night."""
    return start_a < end_b and end_a > start_b


def evaluate_availability(
    check_in: date,
    check_out: date,
    bookings: Iterable[Mapping[str, Any]],
    blocks: Iterable[Mapping[str, Any]],
) -> AvailabilityResult:
    """
    Decide whether a stay can be booked.

    Args:
        check_in: Candidate check-in date
        check_out: Candidate check-out date
        bookings: Existing bookings with check_in_date, check_out_date, booking_status
        blocks: Calendar entries with date, is_available, blocked_reason

    Returns:
        AvailabilityResult: available flag plus the conflicting bookings and blocked dates

    Raises:
        InvalidDateRangeError: If check_out is not after check_in
    """
    if check_out <= check_in:
        raise InvalidDateRangeError("Check-out date must be after check-in date")

    conflicts = [
        {
            "booking_reference": booking.get("booking_reference"),
            "check_in_date": booking["check_in_date"].isoformat(),
            "check_out_date": booking["check_out_date"].isoformat(),
            "status": booking["booking_status"],
        }
        for booking in bookings
        if booking["booking_status"] in HOLDING_STATUSES
        and ranges_overlap(check_in, check_out, booking["check_in_date"], booking["check_out_date"])
    ]
    blocked = [
        {"date": block["date"].isoformat(), "reason": block.get("blocked_reason")}
        for block in blocks
        if not block["is_available"] and check_in <= block["date"] < check_out
    ]
    return AvailabilityResult(
        available=not conflicts and not blocked,
        conflicts=conflicts,
        blocked_dates=blocked,
    )


def check_listing_availability(
    conn: Connection,
    listing_id: int,
    check_in: date,
    check_out: date,
    exclude_booking_id: int | None = None,
) -> AvailabilityResult:
    """
    Check a stay against the stored bookings and calendar of a listing.

    Args:
        conn: Database connection (inside the booking transaction when writing)
        listing_id: Listing ID
        check_in: Candidate check-in date
        check_out: Candidate check-out date
        exclude_booking_id: Booking to ignore, when re-checking an existing booking

    Returns:
        AvailabilityResult
    """
    if check_out <= check_in:
        raise InvalidDateRangeError("Check-out date must be after check-in date")

    bookings = find_overlapping_bookings(
        conn, listing_id, check_in, check_out, exclude_booking_id=exclude_booking_id
    )
    blocks = get_availability_blocks(conn, listing_id, check_in, check_out)
    return evaluate_availability(check_in, check_out, bookings, blocks)


def check_availability(
    engine: Engine, listing_id: int, check_in: date, check_out: date
) -> AvailabilityResult:
    """Read-only availability check for a listing, as exposed to guests."""
    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise ListingNotFoundError(listing_id)
        return check_listing_availability(conn, listing_id, check_in, check_out)


def get_availability_calendar(
    engine: Engine, listing_id: int, start: date, end: date
) -> dict[str, Any]:
    """
    Booked ranges and blocked dates of a listing within [start, end).

    Returns:
        dict[str, Any]: listing_id, booked_dates ([{check_in_date, check_out_date, status}])
                        and blocked_dates ([{date, reason}])
    """
    if end <= start:
        raise InvalidDateRangeError("end_date must be after start_date")

    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise ListingNotFoundError(listing_id)
        bookings = find_overlapping_bookings(conn, listing_id, start, end)
        blocks = get_availability_blocks(conn, listing_id, start, end)

    return {
        "listing_id": listing_id,
        "booked_dates": [
            {
                "check_in_date": booking["check_in_date"].isoformat(),
                "check_out_date": booking["check_out_date"].isoformat(),
                "status": booking["booking_status"],
            }
            for booking in bookings
        ],
        "blocked_dates": [
            {"date": block["date"].isoformat(), "reason": block["blocked_reason"]}
            for block in blocks
        ],
    }


def update_availability(
    engine: Engine, listing_id: int, actor: Actor, entries: list[dict[str, Any]]
) -> int:
    """
    Set calendar entries of a listing (owner or admin only).

    Args:
        engine: Database engine
        listing_id: Listing ID
        actor: Caller
        entries: Dicts with date, is_available and optional blocked_reason

    Returns:
        int: Number of dates written

    Raises:
        ListingNotFoundError: Unknown listing
        PermissionDeniedError: Caller does not own the listing
    """
    with engine.begin() as conn:
        listing = get_listing(conn, listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        if not actor.owns(listing["owner_id"]):
            raise PermissionDeniedError("Only the listing owner can update its calendar")
        count = upsert_availability(conn, listing_id, entries)

    logger.info("availability_updated", listing_id=listing_id, dates=count, actor_id=actor.user_id)
    return count
