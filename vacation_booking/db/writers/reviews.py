from typing import Any

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from vacation_booking.models.reviews import Review
from vacation_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_review(conn: Connection, data: dict[str, Any]) -> int:
    """
    Insert a review awaiting moderation.

    Raises:
        sqlalchemy.exc.IntegrityError: If the booking already has a review
    """
    row = {"is_approved": None, "created_at": utc_now(), **data}
    result = conn.execute(insert(Review).values(row))
    review_id = int(result.inserted_primary_key[0])
    logger.info("review_inserted", review_id=review_id, booking_id=data["booking_id"])
    return review_id


def set_review_approval(
    conn: Connection, review_id: int, approved: bool, moderator_id: int | None
) -> bool:
    """
    Record a moderation decision on a review still awaiting one.

    Returns:
        bool: False if the review was already moderated
    """
    result = conn.execute(
        update(Review)
        .where(Review.id == review_id)
        .where(Review.is_approved.is_(None))
        .values(is_approved=approved, moderated_by=moderator_id, moderated_at=utc_now())
    )
    return bool(result.rowcount)
