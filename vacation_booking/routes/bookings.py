from typing import Any, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Response, status
from sqlalchemy.engine import Engine

from vacation_booking.actors import Actor
from vacation_booking.dependencies import (
    get_current_actor,
    get_db_engine,
    get_notifier,
    get_payment_gateway,
    get_pricing_engine,
)
from vacation_booking.errors import BookingError
from vacation_booking.network.notifications import Notifier
from vacation_booking.network.payments import PaymentGateway
from vacation_booking.pricing.engine import PricingEngine
from vacation_booking.routes._booking_helpers import raise_http_for, schedule_notifications
from vacation_booking.schemas.bookings import (
    BookingCancelPayload,
    BookingCreatePayload,
    BookingStatusPayload,
    PaymentRetryPayload,
)
from vacation_booking.services.bookings import (
    BookingOutcome,
    cancel_booking,
    create_booking,
    get_booking_details,
    get_booking_payout,
    override_booking_status,
    retry_payment,
    serialize_booking,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


def _outcome_body(outcome: BookingOutcome) -> dict[str, Any]:
    body = serialize_booking(outcome.booking)
    if outcome.payment_error:
        body["payment_error"] = outcome.payment_error
    return body


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
def create_booking_route(
    payload: BookingCreatePayload,
    background_tasks: BackgroundTasks,
    response: Response,
    idempotency_key: Optional[str] = Header(None, max_length=255),
    engine: Engine = Depends(get_db_engine),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
    pricing_engine: PricingEngine = Depends(get_pricing_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """
    Create a booking and charge it.

    A failed charge still creates the booking (pending, payment failed) and
    returns 201 with payment_error set. Repeating a request with the same
    Idempotency-Key header returns the original booking with 200.

    Args:
        payload: Listing, stay dates, guest details and payment method
        background_tasks: Runs notifications after the response
        response: Used to switch to 200 on idempotent replay
        idempotency_key: Optional Idempotency-Key header

    Returns:
        dict: The stored booking
    """
    try:
        outcome = create_booking(
            engine,
            gateway,
            pricing_engine,
            payload,
            actor,
            idempotency_key=idempotency_key,
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("booking_creation_failed", listing_id=payload.listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    if outcome.replayed:
        response.status_code = status.HTTP_200_OK
    schedule_notifications(background_tasks, notifier, outcome)
    return _outcome_body(outcome)


@router.get("/bookings/{booking_id}")
def get_booking_route(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Booking details with its payment ledger (guest, owner or admin)."""
    try:
        return get_booking_details(engine, booking_id, actor)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("booking_fetch_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/bookings/{booking_id}/cancel")
def cancel_booking_route(
    booking_id: int,
    background_tasks: BackgroundTasks,
    payload: Optional[BookingCancelPayload] = None,
    engine: Engine = Depends(get_db_engine),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """
    Cancel a booking, refunding it when it was paid.

    Guests and owners must cancel more than 24 hours before check-in.
    """
    reason = payload.reason if payload else None
    try:
        outcome = cancel_booking(engine, gateway, booking_id, actor, reason=reason)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("booking_cancellation_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    schedule_notifications(background_tasks, notifier, outcome)
    return _outcome_body(outcome)


@router.put("/bookings/{booking_id}/status")
def override_status_route(
    booking_id: int,
    payload: BookingStatusPayload,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Set a booking status outside the normal lifecycle (owner or admin)."""
    try:
        outcome = override_booking_status(
            engine, booking_id, actor, payload.status, note=payload.note
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("booking_status_override_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    return _outcome_body(outcome)


@router.post("/bookings/{booking_id}/payment")
def retry_payment_route(
    booking_id: int,
    payload: PaymentRetryPayload,
    background_tasks: BackgroundTasks,
    engine: Engine = Depends(get_db_engine),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    notifier: Notifier = Depends(get_notifier),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Charge a booking whose previous payment failed."""
    try:
        outcome = retry_payment(
            engine, gateway, booking_id, actor, payload.payment_method, payload.payment_token
        )
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("payment_retry_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")

    schedule_notifications(background_tasks, notifier, outcome)
    return _outcome_body(outcome)


@router.get("/bookings/{booking_id}/payout")
def booking_payout_route(
    booking_id: int,
    engine: Engine = Depends(get_db_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict[str, Any]:
    """Owner payout after platform commission and processing fees."""
    try:
        return get_booking_payout(engine, booking_id, actor)
    except BookingError as e:
        raise_http_for(e)
    except Exception as e:
        logger.exception("booking_payout_failed", booking_id=booking_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
