from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from vacation_booking.db.writers._upsert import insert_if_absent
from vacation_booking.models.bookings import BookingPayment, PaymentWebhookEvent
from vacation_booking.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


def insert_payment(
    conn: Connection,
    booking_id: int,
    amount: Decimal,
    currency: str,
    payment_method: str,
    transaction_status: str,
    payment_gateway_id: Optional[str] = None,
    error_message: Optional[str] = None,
) -> int:
    """
    Append a row to the payment ledger.

    Args:
        conn: Active database connection (within transaction)
        booking_id: Booking ID
        amount: Charged amount; negative for refunds
        currency: ISO currency code
        payment_method: stripe, bank_transfer or refund
        transaction_status: pending, completed, failed, refunded or disputed
        payment_gateway_id: Provider transaction or refund id
        error_message: Provider error for failed attempts

    Returns:
        int: Ledger row ID
    """
    result = conn.execute(
        insert(BookingPayment).values(
            booking_id=booking_id,
            amount=amount,
            currency=currency,
            payment_method=payment_method,
            payment_gateway_id=payment_gateway_id,
            transaction_status=transaction_status,
            error_message=error_message,
            created_at=utc_now(),
        )
    )
    payment_id = int(result.inserted_primary_key[0])
    logger.info(
        "payment_recorded",
        booking_id=booking_id,
        payment_id=payment_id,
        amount=str(amount),
        method=payment_method,
        status=transaction_status,
    )
    return payment_id


def update_payment_status(
    conn: Connection,
    payment_id: int,
    transaction_status: str,
    error_message: Optional[str] = None,
) -> None:
    """Set the status of a ledger row, as reported later by the provider."""
    conn.execute(
        update(BookingPayment)
        .where(BookingPayment.id == payment_id)
        .values(transaction_status=transaction_status, error_message=error_message)
    )


def record_webhook_event(conn: Connection, event_id: str, event_type: str) -> bool:
    """
    Remember a provider webhook event.

    Returns:
        bool: True the first time an event id is seen, False for replays
    """
    return insert_if_absent(
        conn=conn,
        table=PaymentWebhookEvent,
        row={"event_id": event_id, "event_type": event_type, "received_at": utc_now()},
        conflict_columns=["event_id"],
    )
