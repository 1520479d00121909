"""
Unit tests for booking notification selection and delivery.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any
from unittest.mock import Mock

import pytest

from vacation_booking.network.notifications import NotificationError
from vacation_booking.services.notifications import (
    Notification,
    deliver_notifications,
    notifications_for_cancellation,
    notifications_for_new_booking,
)


def make_booking(**overrides: Any) -> dict[str, Any]:
    return {
        "booking_reference": "MC25600123ABCD",
        "guest_name": "Ana Perez",
        "guest_email": "ana@example.com",
        "listing_name": "Casa Azul",
        "listing_owner_email": "owner@example.com",
        "check_in_date": date(2026, 5, 1),
        "check_out_date": date(2026, 5, 3),
        "guests_count": 2,
        "total_amount": Decimal("265.3"),
        "currency": "USD",
        "booking_status": "confirmed",
        "payment_status": "paid",
        "cancellation_reason": None,
        **overrides,
    }


@pytest.mark.unit
def test_confirmed_booking_notifies_guest_and_owner() -> None:
    """Test messages for a paid booking."""
    messages = notifications_for_new_booking(make_booking())

    assert [(m.recipient, m.template) for m in messages] == [
        ("ana@example.com", "booking_confirmed"),
        ("owner@example.com", "owner_new_booking"),
    ]
    assert messages[0].data["total_amount"] == "265.30"


@pytest.mark.unit
def test_confirmed_booking_without_owner_email() -> None:
    """Test that the owner message is skipped without an owner email."""
    messages = notifications_for_new_booking(make_booking(listing_owner_email=None))

    assert [m.template for m in messages] == ["booking_confirmed"]


@pytest.mark.unit
def test_failed_payment_notifies_guest_only() -> None:
    """Test the payment failure message."""
    messages = notifications_for_new_booking(
        make_booking(booking_status="pending", payment_status="failed")
    )

    assert [m.template for m in messages] == ["payment_failed"]


@pytest.mark.unit
def test_pending_payment_notifies_guest_only() -> None:
    """Test the bank transfer message."""
    messages = notifications_for_new_booking(
        make_booking(booking_status="pending", payment_status="pending")
    )

    assert [m.template for m in messages] == ["booking_pending_payment"]


@pytest.mark.unit
@pytest.mark.parametrize(
    "refund_status, note_fragment",
    [("completed", "full refund"), ("failed", "being processed"), (None, "")],
)
def test_cancellation_refund_note(refund_status: str | None, note_fragment: str) -> None:
    """Test the refund note in cancellation messages."""
    messages = notifications_for_cancellation(
        make_booking(booking_status="canceled", cancellation_reason="Plans changed"),
        refund_status,
    )

    assert [m.template for m in messages] == ["booking_canceled", "owner_booking_canceled"]
    assert note_fragment in messages[0].data["refund_note"]
    assert messages[1].data["cancellation_reason"] == "Plans changed"


@pytest.mark.unit
def test_delivery_failures_are_swallowed() -> None:
    """Test that one failed message does not stop the others."""
    notifier = Mock()
    notifier.send.side_effect = [NotificationError("smtp down"), None]

    delivered = deliver_notifications(
        notifier,
        [
            Notification("a@example.com", "booking_confirmed", {}),
            Notification("b@example.com", "owner_new_booking", {}),
        ],
    )

    assert delivered == 1
    assert notifier.send.call_count == 2
