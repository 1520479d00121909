"""
Outbound guest and owner notifications.

Three backends share one ``send(recipient, template, data)`` interface:
SMTP email, an HTTP notification API, and a log-only backend for local
development. The backend is picked by NOTIFICATION_BACKEND.
"""

from __future__ import annotations

import smtplib
from email.message import EmailMessage
from typing import Any, Protocol

import requests
import structlog

from vacation_booking.config import (
    FRONTEND_URL,
    NOTIFICATION_API_KEY,
    NOTIFICATION_API_URL,
    NOTIFICATION_BACKEND,
    NOTIFICATION_TIMEOUT,
    SMTP_FROM,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USER,
)

logger = structlog.get_logger(__name__)

# template -> (subject, body); bodies are str.format templates
TEMPLATES: dict[str, tuple[str, str]] = {
    "booking_confirmed": (
        "Booking confirmed - {booking_reference}",
        "Hi {guest_name},\n\n"
        "Your stay at {listing_name} from {check_in_date} to {check_out_date} is confirmed.\n"
        "Total paid: {total_amount} {currency}\n\n"
        "Manage your booking: {booking_url}\n",
    ),
    "booking_pending_payment": (
        "Booking received - {booking_reference}",
        "Hi {guest_name},\n\n"
        "We received your booking for {listing_name} from {check_in_date} to "
        "{check_out_date}. It will be confirmed once your payment of "
        "{total_amount} {currency} clears.\n\n"
        "Manage your booking: {booking_url}\n",
    ),
    "payment_failed": (
        "Payment failed - {booking_reference}",
        "Hi {guest_name},\n\n"
        "We could not process the payment for your booking at {listing_name}. "
        "Your dates are held; retry the payment here: {booking_url}\n",
    ),
    "owner_new_booking": (
        "New booking - {booking_reference}",
        "You have a new booking for {listing_name} from {check_in_date} to "
        "{check_out_date} ({guests_count} guests).\n"
        "Total: {total_amount} {currency}\n",
    ),
    "booking_canceled": (
        "Booking canceled - {booking_reference}",
        "Hi {guest_name},\n\n"
        "Your booking at {listing_name} from {check_in_date} to {check_out_date} "
        "has been canceled.\n{refund_note}\n",
    ),
    "owner_booking_canceled": (
        "Booking canceled - {booking_reference}",
        "The booking {booking_reference} for {listing_name} from {check_in_date} to "
        "{check_out_date} has been canceled.\nReason: {cancellation_reason}\n",
    ),
}


class NotificationError(Exception):
    """Notification backend failed to deliver a message."""


def render_template(template: str, data: dict[str, Any]) -> tuple[str, str]:
    """
    Render a notification template.

    Args:
        template: Template name from TEMPLATES
        data: Values for the template placeholders

    Returns:
        tuple[str, str]: (subject, body)

    Raises:
        NotificationError: Unknown template or missing placeholder value
    """
    if template not in TEMPLATES:
        raise NotificationError(f"Unknown notification template: {template}")
    subject, body = TEMPLATES[template]
    values = {"booking_url": "", **data}
    if values.get("booking_reference") and not values["booking_url"]:
        values["booking_url"] = f"{FRONTEND_URL}/bookings/{values['booking_reference']}"
    try:
        return subject.format(**values), body.format(**values)
    except KeyError as e:
        raise NotificationError(f"Missing value {e} for template {template}") from e


class Notifier(Protocol):
    def send(self, recipient: str, template: str, data: dict[str, Any]) -> None: ...


class LogNotifier:
    """Logs rendered notifications instead of sending them."""

    def send(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        subject, _ = render_template(template, data)
        logger.info("notification_logged", recipient=recipient, template=template, subject=subject)


class SmtpNotifier:
    """Sends notifications as plain-text email over SMTP."""

    def __init__(
        self,
        host: str = SMTP_HOST,
        port: int = SMTP_PORT,
        username: str | None = SMTP_USER,
        password: str | None = SMTP_PASSWORD,
        from_email: str = SMTP_FROM,
        use_tls: bool = SMTP_USE_TLS,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.use_tls = use_tls

    def send(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        subject, body = render_template(template, data)

        msg = EmailMessage()
        msg["From"] = self.from_email
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=10) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(str(e)) from e


class HttpNotifier:
    """Posts notifications to an HTTP notification API."""

    def __init__(
        self,
        url: str,
        api_key: str | None = NOTIFICATION_API_KEY,
        timeout: float = NOTIFICATION_TIMEOUT,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    def send(self, recipient: str, template: str, data: dict[str, Any]) -> None:
        subject, body = render_template(template, data)
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            res = requests.post(
                self.url,
                json={
                    "recipient": recipient,
                    "template": template,
                    "subject": subject,
                    "body": body,
                    "data": data,
                },
                headers=headers,
                timeout=self.timeout,
            )
            res.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(str(e)) from e


def build_notifier(backend: str = NOTIFICATION_BACKEND) -> Notifier:
    """
    Build the configured notification backend.

    Raises:
        ValueError: Unknown backend, or http backend without NOTIFICATION_API_URL
    """
    if backend == "log":
        return LogNotifier()
    if backend == "smtp":
        return SmtpNotifier()
    if backend == "http":
        if not NOTIFICATION_API_URL:
            raise ValueError("NOTIFICATION_API_URL must be set for the http notification backend")
        return HttpNotifier(NOTIFICATION_API_URL)
    raise ValueError(f"Unknown NOTIFICATION_BACKEND: {backend}")
