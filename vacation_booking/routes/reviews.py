from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine

from vacation_booking.actors import Actor
from vacation_booking.dependencies import get_current_actor, get_db_engine
from vacation_booking.errors import BookingError
from vacation_booking.routes._booking_helpers import raise_http_for
from vacation_booking.schemas.reviews import ReviewCreatePayload, ReviewModerationPayload
from vacation_booking.services.reviews import create_review, list_listing_reviews, moderate_review

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/reviews", status_code=status.HTTP_201_CREATED)
def create_review_route(
    payload: ReviewCreatePayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Review a completed stay; published after moderation."""
    try:
        return create_review(engine, payload, actor)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("review_creation_failed", booking_id=payload.booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/listings/{listing_id}/reviews")
def list_reviews_route(listing_id: int, engine: Engine = Depends(get_db_engine)) -> dict[str, Any]:
    """Approved reviews of a listing with its average rating."""
    try:
        return list_listing_reviews(engine, listing_id)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("review_list_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/admin/reviews/{review_id}/moderate")
def moderate_review_route(
    review_id: int,
    payload: ReviewModerationPayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Approve or reject a review (admin only, once)."""
    try:
        return moderate_review(engine, review_id, payload.approved, actor)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("review_moderation_failed", review_id=review_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
