"""
Payment gateway client for card (Stripe) and bank transfer payments.

Charges and refunds carry an idempotency key derived from the booking
reference, so a retried request cannot charge or refund twice.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

import stripe
import structlog

from vacation_booking.errors import PaymentError
from vacation_booking.metrics import payments, refunds

logger = structlog.get_logger(__name__)

METHOD_STRIPE = "stripe"
METHOD_BANK_TRANSFER = "bank_transfer"
SUPPORTED_METHODS = (METHOD_STRIPE, METHOD_BANK_TRANSFER)

STATUS_COMPLETED = "completed"
STATUS_PENDING = "pending"
STATUS_FAILED = "failed"

# PaymentIntent.status -> charge status
INTENT_STATUSES = {
    "succeeded": STATUS_COMPLETED,
    "processing": STATUS_PENDING,
    "requires_action": STATUS_PENDING,
    "requires_capture": STATUS_PENDING,
    "requires_confirmation": STATUS_PENDING,
}

# Refund.status -> refund status
REFUND_STATUSES = {
    "succeeded": STATUS_COMPLETED,
    "pending": STATUS_PENDING,
    "requires_action": STATUS_PENDING,
}


@dataclass(frozen=True)
class ChargeResult:
    status: str
    transaction_id: Optional[str] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class RefundResult:
    status: str
    refund_id: Optional[str] = None
    error: Optional[str] = None


def to_minor_units(amount: Decimal) -> int:
    """Convert a two-decimal amount to integer cents."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentGateway:
    """
    Charges and refunds bookings.

    Card payments go through Stripe: a ``pm_`` token is a PaymentMethod that is
    confirmed immediately, a ``pi_`` token is a PaymentIntent the client already
    confirmed (e.g. after 3-D Secure) and is only retrieved. Bank transfers are
    recorded as pending until reconciled by an operator.

    Args:
        stripe_api_key: Stripe secret key; card payments fail without it
    """

    def __init__(self, stripe_api_key: Optional[str]) -> None:
        self.stripe_api_key = stripe_api_key

    def charge(
        self,
        amount: Decimal,
        currency: str,
        method: str,
        token: Optional[str],
        reference: str,
        idempotency_key: str,
        email: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ChargeResult:
        """
        Charge a booking.

        Args:
            amount: Amount to charge
            currency: ISO currency code
            method: stripe or bank_transfer
            token: Stripe PaymentMethod (pm_) or PaymentIntent (pi_) id
            reference: Booking reference, stored as provider metadata
            idempotency_key: Key sent to the provider for this attempt
            email: Receipt email
            description: Statement description

        Returns:
            ChargeResult: completed, pending or failed with provider id

        Raises:
            PaymentError: Unsupported method, missing configuration, or provider error
        """
        if method == METHOD_BANK_TRANSFER:
            result = ChargeResult(status=STATUS_PENDING, transaction_id=f"BT{reference}")
        elif method == METHOD_STRIPE:
            result = self._charge_stripe(
                amount, currency, token, reference, idempotency_key, email, description
            )
        else:
            raise PaymentError(f"Unsupported payment method: {method}")

        payments.labels(method=method, status=result.status).inc()
        logger.info(
            "charge_completed",
            reference=reference,
            method=method,
            status=result.status,
            transaction_id=result.transaction_id,
        )
        return result

    def refund(
        self,
        method: str,
        transaction_id: Optional[str],
        amount: Decimal,
        reference: str,
    ) -> RefundResult:
        """
        Refund a completed charge.

        Args:
            method: Payment method of the original charge
            transaction_id: Provider id of the original charge
            amount: Amount to refund (positive)
            reference: Booking reference

        Returns:
            RefundResult: completed or pending with provider refund id

        Raises:
            PaymentError: If the provider rejects the refund
        """
        if method == METHOD_BANK_TRANSFER:
            result = RefundResult(status=STATUS_PENDING, refund_id=f"BTR{reference}")
        elif method == METHOD_STRIPE:
            result = self._refund_stripe(transaction_id, amount, reference)
        else:
            raise PaymentError(f"Unsupported payment method: {method}")

        refunds.labels(status=result.status).inc()
        logger.info("refund_completed", reference=reference, status=result.status)
        return result

    def _require_stripe_key(self) -> str:
        if not self.stripe_api_key:
            raise PaymentError("Card payments are not configured")
        return self.stripe_api_key

    def _charge_stripe(
        self,
        amount: Decimal,
        currency: str,
        token: Optional[str],
        reference: str,
        idempotency_key: str,
        email: Optional[str],
        description: Optional[str],
    ) -> ChargeResult:
        api_key = self._require_stripe_key()
        if not token:
            raise PaymentError("Payment token is required for card payments")

        try:
            if token.startswith("pi_"):
                intent = stripe.PaymentIntent.retrieve(token, api_key=api_key)
            elif token.startswith("pm_"):
                params: dict[str, Any] = {
                    "amount": to_minor_units(amount),
                    "currency": currency.lower(),
                    "payment_method": token,
                    "confirm": True,
                    "automatic_payment_methods": {"enabled": True, "allow_redirects": "never"},
                    "metadata": {"booking_reference": reference},
                    "description": description or f"Booking {reference}",
                }
                if email:
                    params["receipt_email"] = email
                intent = stripe.PaymentIntent.create(
                    **params, idempotency_key=idempotency_key, api_key=api_key
                )
            else:
                raise PaymentError("Unrecognized card payment token")
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e)
            logger.warning("stripe_charge_failed", reference=reference, error=message)
            raise PaymentError(message) from e

        status = INTENT_STATUSES.get(intent.status, STATUS_FAILED)
        error = None if status != STATUS_FAILED else f"Payment intent status {intent.status}"
        return ChargeResult(status=status, transaction_id=intent.id, error=error)

    def _refund_stripe(
        self, transaction_id: Optional[str], amount: Decimal, reference: str
    ) -> RefundResult:
        api_key = self._require_stripe_key()
        if not transaction_id:
            raise PaymentError("No card charge to refund")

        try:
            refund = stripe.Refund.create(
                payment_intent=transaction_id,
                amount=to_minor_units(amount),
                metadata={"booking_reference": reference},
                idempotency_key=f"refund-{reference}",
                api_key=api_key,
            )
        except stripe.StripeError as e:
            message = getattr(e, "user_message", None) or str(e)
            logger.warning("stripe_refund_failed", reference=reference, error=message)
            raise PaymentError(message) from e

        status = REFUND_STATUSES.get(refund.status, STATUS_FAILED)
        error = None if status != STATUS_FAILED else f"Refund status {refund.status}"
        return RefundResult(status=status, refund_id=refund.id, error=error)
