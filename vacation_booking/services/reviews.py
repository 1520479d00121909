"""Guest reviews: one per completed booking, published after admin moderation."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from vacation_booking.actors import Actor
from vacation_booking.db.readers.bookings import get_booking
from vacation_booking.db.readers.listings import get_listing
from vacation_booking.db.readers.reviews import (
    get_rating_summary,
    get_review,
    list_approved_reviews,
    review_exists_for_booking,
)
from vacation_booking.db.writers.reviews import insert_review, set_review_approval
from vacation_booking.errors import (
    BookingNotFoundError,
    BusinessRuleError,
    ListingNotFoundError,
    PermissionDeniedError,
    ReviewAlreadyExistsError,
    ReviewAlreadyModeratedError,
    ReviewNotFoundError,
)
from vacation_booking.schemas.reviews import ReviewCreatePayload
from vacation_booking.services.booking_state import BookingStatus
from vacation_booking.utils.datetime import ensure_utc

logger = structlog.get_logger(__name__)


def _serialize_review(review: dict[str, Any]) -> dict[str, Any]:
    created_at = review.get("created_at")
    return {
        "id": review["id"],
        "booking_id": review["booking_id"],
        "reviewer_name": review["reviewer_name"],
        "rating": review["rating"],
        "title": review["title"],
        "comment": review["comment"],
        "created_at": ensure_utc(created_at).isoformat() if created_at else None,
    }


def create_review(engine: Engine, payload: ReviewCreatePayload, actor: Actor) -> dict[str, Any]:
    """
    Submit a review for a completed booking.

    The review is stored unapproved and only shown once an admin approves it.

    Args:
        engine: Database engine
        payload: Review content
        actor: Caller; must be the booking's guest or an admin

    Returns:
        dict[str, Any]: review_id and moderation status

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller is not the guest
        BusinessRuleError: Booking is not completed
        ReviewAlreadyExistsError: Booking was already reviewed
    """
    try:
        with engine.begin() as conn:
            booking = get_booking(conn, payload.booking_id)
            if booking is None:
                raise BookingNotFoundError(payload.booking_id)

            is_guest = actor.user_id is not None and actor.user_id == booking["guest_id"]
            if not (is_guest or actor.is_admin):
                raise PermissionDeniedError("Only the guest can review this booking")
            if booking["booking_status"] != BookingStatus.COMPLETED.value:
                raise BusinessRuleError("Only completed stays can be reviewed")
            if review_exists_for_booking(conn, payload.booking_id):
                raise ReviewAlreadyExistsError("This booking has already been reviewed")

            review_id = insert_review(
                conn,
                {
                    "booking_id": payload.booking_id,
                    "listing_id": booking["listing_id"],
                    "reviewer_id": actor.user_id,
                    "reviewer_name": booking["guest_name"],
                    "rating": payload.rating,
                    "title": payload.title,
                    "comment": payload.comment,
                },
            )
    except IntegrityError as e:
        # Concurrent submission for the same booking
        raise ReviewAlreadyExistsError("This booking has already been reviewed") from e

    return {"review_id": review_id, "status": "pending_moderation"}


def list_listing_reviews(engine: Engine, listing_id: int) -> dict[str, Any]:
    """Approved reviews of a listing with its average rating."""
    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise ListingNotFoundError(listing_id)
        rows = list_approved_reviews(conn, listing_id)
        summary = get_rating_summary(conn, listing_id)

    return {
        "listing_id": listing_id,
        **summary,
        "reviews": [_serialize_review(row) for row in rows],
    }


def moderate_review(engine: Engine, review_id: int, approved: bool, actor: Actor) -> dict[str, Any]:
    """
    Approve or reject a review. The decision cannot be changed afterwards.

    Raises:
        PermissionDeniedError: Caller is not an admin
        ReviewNotFoundError: Unknown review
        ReviewAlreadyModeratedError: Review was already moderated
    """
    if not actor.is_admin:
        raise PermissionDeniedError("Only admins can moderate reviews")

    with engine.begin() as conn:
        if get_review(conn, review_id) is None:
            raise ReviewNotFoundError(review_id)
        if not set_review_approval(conn, review_id, approved, actor.user_id):
            raise ReviewAlreadyModeratedError(f"Review {review_id} was already moderated")

    logger.info(
        "review_moderated", review_id=review_id, approved=approved, moderator_id=actor.user_id
    )
    return {"review_id": review_id, "approved": approved}
