from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.engine import Connection

from vacation_booking.models.reviews import Review

reviews = Review.__table__


def get_review(conn: Connection, review_id: int) -> Optional[dict[str, Any]]:
    """Fetch a review by ID."""
    row = conn.execute(select(reviews).where(reviews.c.id == review_id)).mappings().fetchone()
    return dict(row) if row else None


def review_exists_for_booking(conn: Connection, booking_id: int) -> bool:
    """
    Check if a booking already has a review.

    Args:
        conn (Connection): An active SQLAlchemy database connection.
        booking_id (int): Booking ID to check.

    Returns:
        bool: True if a review exists, False otherwise.
    """
    result = conn.execute(select(reviews.c.id).where(reviews.c.booking_id == booking_id))
    return result.fetchone() is not None


def list_approved_reviews(conn: Connection, listing_id: int) -> list[dict[str, Any]]:
    """Approved reviews of a listing, newest first."""
    stmt = (
        select(
            reviews.c.id,
            reviews.c.booking_id,
            reviews.c.reviewer_name,
            reviews.c.rating,
            reviews.c.title,
            reviews.c.comment,
            reviews.c.created_at,
        )
        .where(reviews.c.listing_id == listing_id)
        .where(reviews.c.is_approved.is_(True))
        .order_by(reviews.c.created_at.desc(), reviews.c.id.desc())
    )
    return [dict(row) for row in conn.execute(stmt).mappings()]


def get_rating_summary(conn: Connection, listing_id: int) -> dict[str, Any]:
    """
    Average rating and count of approved reviews.

    Returns:
        dict[str, Any]: {"average_rating": float | None, "review_count": int}
    """
    stmt = (
        select(func.avg(reviews.c.rating), func.count(reviews.c.id))
        .where(reviews.c.listing_id == listing_id)
        .where(reviews.c.is_approved.is_(True))
    )
    average, count = conn.execute(stmt).one()
    return {
        "average_rating": round(float(average), 2) if average is not None else None,
        "review_count": int(count),
    }
