"""Stripe webhook receiver route."""

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from vacation_booking import config
from vacation_booking.dependencies import get_db_engine
from vacation_booking.errors import WebhookVerificationError
from vacation_booking.metrics import payment_webhook_events
from vacation_booking.services.payments_webhook import handle_payment_event, verify_webhook

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/payments/webhook")
async def receive_payment_webhook(
    request: Request, engine: Engine = Depends(get_db_engine)
) -> JSONResponse:
    """
    Handle Stripe webhook events.

    Supported events:
    - payment_intent.succeeded
    - payment_intent.payment_failed
    - charge.dispute.created

    Other event types are acknowledged and ignored. Redelivered events are
    acknowledged without being applied again.

    Authentication: Stripe-Signature header checked against STRIPE_WEBHOOK_SECRET

    Returns:
        JSONResponse: {"status": "accepted", "result": ...}
    """
    if not config.STRIPE_WEBHOOK_SECRET:
        logger.error("payment_webhook_not_configured")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook secret not configured"},
        )

    payload = await request.body()
    try:
        event = verify_webhook(
            payload,
            request.headers.get("Stripe-Signature"),
            config.STRIPE_WEBHOOK_SECRET,
        )
    except WebhookVerificationError as e:
        logger.warning("payment_webhook_rejected", error=str(e))
        payment_webhook_events.labels(event_type="unknown", result="rejected").inc()
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid signature"},
        )

    logger.info("payment_webhook_received", event_id=event["id"], event_type=event["type"])

    try:
        result = await run_in_threadpool(handle_payment_event, engine, event)
    except Exception as e:
        logger.exception(
            "payment_webhook_processing_failed",
            event_id=event["id"],
            event_type=event["type"],
            error=str(e),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    return JSONResponse(content={"status": "accepted", "result": result})
