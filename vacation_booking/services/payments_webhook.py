"""
Stripe webhook handling.

Card payments that need extra customer action (3-D Secure, delayed methods)
finish after the booking request returned; Stripe reports the final result
through webhooks. Each event is applied once: its id is recorded in the same
transaction as the state change, so redelivered events are acknowledged
without effect.
"""

from __future__ import annotations

import json
from typing import Any, Callable

import stripe
import structlog
from sqlalchemy.engine import Connection, Engine

from vacation_booking.config import STRIPE_WEBHOOK_TOLERANCE
from vacation_booking.db.readers.bookings import get_booking, get_payment_by_gateway_id
from vacation_booking.db.writers.bookings import insert_status_change, update_booking
from vacation_booking.db.writers.payments import record_webhook_event, update_payment_status
from vacation_booking.errors import WebhookVerificationError
from vacation_booking.metrics import payment_webhook_events
from vacation_booking.services.booking_state import (
    BookingStatus,
    PaymentStatus,
    TransactionStatus,
)

logger = structlog.get_logger(__name__)

RESULT_PROCESSED = "processed"
RESULT_DUPLICATE = "duplicate"
RESULT_IGNORED = "ignored"
RESULT_UNMATCHED = "unmatched"


def verify_webhook(
    payload: bytes, signature: str | None, secret: str, tolerance: int = STRIPE_WEBHOOK_TOLERANCE
) -> dict[str, Any]:
    """
    Verify the Stripe-Signature header and decode the event.

    Args:
        payload: Raw request body
        signature: Stripe-Signature header value
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum age of the signature timestamp in seconds

    Returns:
        dict[str, Any]: Decoded event

    Raises:
        WebhookVerificationError: Missing or invalid signature, or malformed body
    """
    if not signature:
        raise WebhookVerificationError("Missing Stripe-Signature header")

    try:
        body = payload.decode("utf-8")
    except UnicodeDecodeError as e:
        raise WebhookVerificationError("Webhook body is not UTF-8") from e

    try:
        stripe.WebhookSignature.verify_header(body, signature, secret, tolerance=tolerance)
    except stripe.SignatureVerificationError as e:
        raise WebhookVerificationError(str(e)) from e

    try:
        event = json.loads(payload)
    except ValueError as e:
        raise WebhookVerificationError("Webhook body is not valid JSON") from e

    if not isinstance(event, dict) or "id" not in event or "type" not in event:
        raise WebhookVerificationError("Webhook body is not a Stripe event")
    return event


def _intent_succeeded(conn: Connection, payment: dict[str, Any], obj: dict[str, Any]) -> None:
    update_payment_status(conn, payment["id"], TransactionStatus.COMPLETED.value)

    booking = get_booking(conn, payment["booking_id"], for_update=True)
    if booking is None:
        return
    values: dict[str, Any] = {"payment_status": PaymentStatus.PAID.value}
    status = BookingStatus(booking["booking_status"])
    if status.can_transition_to(BookingStatus.CONFIRMED):
        values["booking_status"] = BookingStatus.CONFIRMED.value
        insert_status_change(
            conn,
            booking["id"],
            status.value,
            BookingStatus.CONFIRMED.value,
            note="Payment confirmed by provider",
        )
    update_booking(conn, booking["id"], values)


def _intent_failed(conn: Connection, payment: dict[str, Any], obj: dict[str, Any]) -> None:
    error = (obj.get("last_payment_error") or {}).get("message") or "Payment failed"
    update_payment_status(conn, payment["id"], TransactionStatus.FAILED.value, error)

    booking = get_booking(conn, payment["booking_id"], for_update=True)
    if booking is None:
        return
    if (
        booking["booking_status"] == BookingStatus.PENDING.value
        and booking["payment_status"] != PaymentStatus.PAID.value
    ):
        update_booking(conn, booking["id"], {"payment_status": PaymentStatus.FAILED.value})


def _dispute_created(conn: Connection, payment: dict[str, Any], obj: dict[str, Any]) -> None:
    update_payment_status(conn, payment["id"], TransactionStatus.DISPUTED.value, obj.get("reason"))
    update_booking(conn, payment["booking_id"], {"payment_status": PaymentStatus.DISPUTED.value})
    logger.warning(
        "payment_disputed",
        booking_id=payment["booking_id"],
        payment_id=payment["id"],
        reason=obj.get("reason"),
    )


EVENT_HANDLERS: dict[str, Callable[[Connection, dict[str, Any], dict[str, Any]], None]] = {
    "payment_intent.succeeded": _intent_succeeded,
    "payment_intent.payment_failed": _intent_failed,
    "charge.dispute.created": _dispute_created,
}


def _gateway_id_for(event_type: str, obj: dict[str, Any]) -> str | None:
    # Disputes reference the intent; intent events are the intent itself
    if event_type.startswith("charge.dispute."):
        return obj.get("payment_intent")
    return obj.get("id")


def handle_payment_event(engine: Engine, event: dict[str, Any]) -> str:
    """
    Apply a verified Stripe event to the matching booking payment.

    Args:
        engine: Database engine
        event: Decoded Stripe event

    Returns:
        str: processed, duplicate, ignored (unsupported type) or unmatched
             (no ledger row for the payment)
    """
    event_id = event["id"]
    event_type = event["type"]
    handler = EVENT_HANDLERS.get(event_type)
    log = logger.bind(event_id=event_id, event_type=event_type)

    if handler is None:
        log.debug("payment_webhook_ignored")
        payment_webhook_events.labels(event_type=event_type, result=RESULT_IGNORED).inc()
        return RESULT_IGNORED

    obj = (event.get("data") or {}).get("object") or {}
    gateway_id = _gateway_id_for(event_type, obj)

    with engine.begin() as conn:
        if not record_webhook_event(conn, event_id, event_type):
            result = RESULT_DUPLICATE
        else:
            payment = get_payment_by_gateway_id(conn, gateway_id) if gateway_id else None
            if payment is None:
                result = RESULT_UNMATCHED
            else:
                handler(conn, payment, obj)
                result = RESULT_PROCESSED

    payment_webhook_events.labels(event_type=event_type, result=result).inc()
    if result == RESULT_UNMATCHED:
        log.warning("payment_webhook_unmatched", gateway_id=gateway_id)
    else:
        log.info("payment_webhook_handled", result=result, gateway_id=gateway_id)
    return result
