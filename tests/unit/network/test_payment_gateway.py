"""
Unit tests for the payment gateway client.

Stripe calls are patched; no network access.
"""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe

from vacation_booking.errors import PaymentError
from vacation_booking.network.payments import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PENDING,
    PaymentGateway,
    to_minor_units,
)


@pytest.fixture
def gateway() -> PaymentGateway:
    return PaymentGateway(stripe_api_key="sk_test_dummy")


def charge(gateway: PaymentGateway, method: str = "stripe", token: str | None = "pm_card_visa"):
    return gateway.charge(
        amount=Decimal("265.30"),
        currency="USD",
        method=method,
        token=token,
        reference="MC25600123ABCD",
        idempotency_key="charge-MC25600123ABCD-1",
        email="guest@example.com",
    )


@pytest.mark.unit
def test_to_minor_units() -> None:
    """Test conversion of amounts to cents."""
    assert to_minor_units(Decimal("265.30")) == 26530
    assert to_minor_units(Decimal("0.005")) == 1


@pytest.mark.unit
def test_bank_transfer_is_pending(gateway: PaymentGateway) -> None:
    """Test that bank transfers are recorded without calling Stripe."""
    with patch("vacation_booking.network.payments.stripe.PaymentIntent.create") as mock_create:
        result = charge(gateway, method="bank_transfer", token=None)

    mock_create.assert_not_called()
    assert result.status == STATUS_PENDING
    assert result.transaction_id == "BTMC25600123ABCD"


@pytest.mark.unit
def test_card_charge_confirms_payment_method(gateway: PaymentGateway) -> None:
    """Test that a pm_ token creates and confirms a PaymentIntent."""
    with patch("vacation_booking.network.payments.stripe.PaymentIntent.create") as mock_create:
        mock_create.return_value = SimpleNamespace(id="pi_123", status="succeeded")

        result = charge(gateway)

    assert result.status == STATUS_COMPLETED
    assert result.transaction_id == "pi_123"
    kwargs = mock_create.call_args.kwargs
    assert kwargs["amount"] == 26530
    assert kwargs["currency"] == "usd"
    assert kwargs["payment_method"] == "pm_card_visa"
    assert kwargs["confirm"] is True
    assert kwargs["idempotency_key"] == "charge-MC25600123ABCD-1"
    assert kwargs["metadata"] == {"booking_reference": "MC25600123ABCD"}
    assert kwargs["receipt_email"] == "guest@example.com"


@pytest.mark.unit
def test_confirmed_intent_is_retrieved(gateway: PaymentGateway) -> None:
    """Test that a pi_ token is looked up instead of charged again."""
    with patch("vacation_booking.network.payments.stripe.PaymentIntent.retrieve") as mock_retrieve:
        mock_retrieve.return_value = SimpleNamespace(id="pi_456", status="processing")

        result = charge(gateway, token="pi_456")

    mock_retrieve.assert_called_once_with("pi_456", api_key="sk_test_dummy")
    assert result.status == STATUS_PENDING


@pytest.mark.unit
def test_unexpected_intent_status_fails(gateway: PaymentGateway) -> None:
    """Test that a canceled intent is a failed charge."""
    with patch("vacation_booking.network.payments.stripe.PaymentIntent.create") as mock_create:
        mock_create.return_value = SimpleNamespace(id="pi_789", status="canceled")

        result = charge(gateway)

    assert result.status == STATUS_FAILED
    assert result.error == "Payment intent status canceled"


@pytest.mark.unit
def test_card_decline_raises_payment_error(gateway: PaymentGateway) -> None:
    """Test that Stripe errors surface as PaymentError with the user message."""
    decline = stripe.CardError("Your card was declined.", param=None, code="card_declined")
    with patch(
        "vacation_booking.network.payments.stripe.PaymentIntent.create", side_effect=decline
    ):
        with pytest.raises(PaymentError, match="declined"):
            charge(gateway)


@pytest.mark.unit
def test_card_payment_requires_token(gateway: PaymentGateway) -> None:
    """Test that card payments need a token."""
    with pytest.raises(PaymentError, match="token is required"):
        charge(gateway, token=None)


@pytest.mark.unit
def test_unrecognized_token_rejected(gateway: PaymentGateway) -> None:
    """Test that tokens other than pm_ and pi_ are refused."""
    with pytest.raises(PaymentError, match="Unrecognized"):
        charge(gateway, token="tok_visa")


@pytest.mark.unit
def test_card_payment_requires_api_key() -> None:
    """Test that card payments fail without a Stripe key."""
    with pytest.raises(PaymentError, match="not configured"):
        charge(PaymentGateway(stripe_api_key=None))


@pytest.mark.unit
def test_unsupported_method(gateway: PaymentGateway) -> None:
    """Test that unknown payment methods are refused."""
    with pytest.raises(PaymentError, match="Unsupported"):
        charge(gateway, method="paypal")


@pytest.mark.unit
def test_card_refund(gateway: PaymentGateway) -> None:
    """Test refunding a card charge with a per-booking idempotency key."""
    with patch("vacation_booking.network.payments.stripe.Refund.create") as mock_refund:
        mock_refund.return_value = SimpleNamespace(id="re_1", status="succeeded")

        result = gateway.refund(
            method="stripe",
            transaction_id="pi_123",
            amount=Decimal("265.30"),
            reference="MC25600123ABCD",
        )

    assert result.status == STATUS_COMPLETED
    assert result.refund_id == "re_1"
    kwargs = mock_refund.call_args.kwargs
    assert kwargs["payment_intent"] == "pi_123"
    assert kwargs["amount"] == 26530
    assert kwargs["idempotency_key"] == "refund-MC25600123ABCD"


@pytest.mark.unit
def test_card_refund_error_raises(gateway: PaymentGateway) -> None:
    """Test that a rejected refund raises PaymentError."""
    error = stripe.InvalidRequestError("Charge already refunded", param="payment_intent")
    with patch("vacation_booking.network.payments.stripe.Refund.create", side_effect=error):
        with pytest.raises(PaymentError, match="already refunded"):
            gateway.refund(
                method="stripe",
                transaction_id="pi_123",
                amount=Decimal("10.00"),
                reference="MC25600123ABCD",
            )


@pytest.mark.unit
def test_bank_transfer_refund_is_pending(gateway: PaymentGateway) -> None:
    """Test that bank transfer refunds wait for an operator."""
    result = gateway.refund(
        method="bank_transfer",
        transaction_id="BTMC25600123ABCD",
        amount=Decimal("265.30"),
        reference="MC25600123ABCD",
    )

    assert result.status == STATUS_PENDING
    assert result.refund_id == "BTRMC25600123ABCD"
