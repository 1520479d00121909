"""
Booking notifications.

Services return the notifications a state change calls for; route handlers
hand them to deliver_notifications() as a background task once the database
transaction has committed. Delivery is best effort: failures are logged and
counted, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

import structlog

from vacation_booking.metrics import notifications as notifications_metric
from vacation_booking.network.notifications import Notifier
from vacation_booking.utils.money import money_to_json

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Notification:
    recipient: str
    template: str
    data: dict[str, Any] = field(default_factory=dict)


def booking_template_data(booking: dict[str, Any]) -> dict[str, Any]:
    """Template values for a booking row (as returned by readers.bookings.get_booking)."""
    return {
        "booking_reference": booking["booking_reference"],
        "guest_name": booking["guest_name"],
        "listing_name": booking.get("listing_name") or "your listing",
        "check_in_date": booking["check_in_date"].isoformat(),
        "check_out_date": booking["check_out_date"].isoformat(),
        "guests_count": booking["guests_count"],
        "total_amount": money_to_json(booking["total_amount"]),
        "currency": booking["currency"],
        "cancellation_reason": booking.get("cancellation_reason") or "not provided",
    }


def notifications_for_new_booking(booking: dict[str, Any]) -> list[Notification]:
    """Guest and owner messages after a booking was created and charged."""
    data = booking_template_data(booking)
    status = booking["booking_status"]
    payment_status = booking["payment_status"]

    if status == "confirmed":
        messages = [Notification(booking["guest_email"], "booking_confirmed", data)]
        if booking.get("listing_owner_email"):
            messages.append(
                Notification(booking["listing_owner_email"], "owner_new_booking", data)
            )
        return messages
    if payment_status == "failed":
        return [Notification(booking["guest_email"], "payment_failed", data)]
    return [Notification(booking["guest_email"], "booking_pending_payment", data)]


def notifications_for_cancellation(
    booking: dict[str, Any], refund_status: str | None
) -> list[Notification]:
    """Guest and owner messages after a cancellation."""
    data = booking_template_data(booking)
    if refund_status == "completed":
        data["refund_note"] = "A full refund has been issued to your original payment method."
    elif refund_status is not None:
        data["refund_note"] = "Your refund is being processed; our team will contact you."
    else:
        data["refund_note"] = ""

    messages = [Notification(booking["guest_email"], "booking_canceled", data)]
    if booking.get("listing_owner_email"):
        messages.append(
            Notification(booking["listing_owner_email"], "owner_booking_canceled", data)
        )
    return messages


def deliver_notifications(notifier: Notifier, notifications: Iterable[Notification]) -> int:
    """
    Send notifications, logging and counting failures instead of raising.

    Args:
        notifier: Notification backend
        notifications: Messages to send

    Returns:
        int: Number of messages delivered
    """
    delivered = 0
    for notification in notifications:
        try:
            notifier.send(notification.recipient, notification.template, notification.data)
        except Exception as e:
            notifications_metric.labels(template=notification.template, result="failed").inc()
            logger.warning(
                "notification_failed",
                template=notification.template,
                recipient=notification.recipient,
                error=str(e),
            )
            continue
        delivered += 1
        notifications_metric.labels(template=notification.template, result="sent").inc()
    return delivered
