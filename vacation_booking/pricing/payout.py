"""Owner payout: booking amount minus platform commission and card processing fees."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from vacation_booking.config import COMMISSION_RATE
from vacation_booking.utils.money import money_to_json, to_money

# currency -> (percentage, fixed fee)
PROCESSING_FEES: dict[str, tuple[Decimal, Decimal]] = {
    "USD": (Decimal("0.029"), Decimal("0.30")),
    "EUR": (Decimal("0.029"), Decimal("0.25")),
    "GBP": (Decimal("0.029"), Decimal("0.20")),
    "CAD": (Decimal("0.029"), Decimal("0.30")),
    "AUD": (Decimal("0.029"), Decimal("0.30")),
    "DOP": (Decimal("0.035"), Decimal("15.00")),
}


@dataclass(frozen=True)
class Payout:
    currency: str
    booking_amount: Decimal
    commission_rate: Decimal
    platform_commission: Decimal
    processing_fee: Decimal
    owner_payout: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "booking_amount": money_to_json(self.booking_amount),
            "commission_rate": str(self.commission_rate),
            "platform_commission": money_to_json(self.platform_commission),
            "processing_fee": money_to_json(self.processing_fee),
            "owner_payout": money_to_json(self.owner_payout),
        }


def processing_fee_for(amount: Decimal, currency: str) -> Decimal:
    """Card processing fee; unknown currencies use the USD schedule."""
    percentage, fixed = PROCESSING_FEES.get(currency.upper(), PROCESSING_FEES["USD"])
    return to_money(amount * percentage + fixed)


def calculate_owner_payout(
    booking_amount: Decimal,
    currency: str,
    commission_rate: Decimal = COMMISSION_RATE,
) -> Payout:
    """
    Split a booking amount between the platform, the card processor and the owner.

    Args:
        booking_amount: Amount the guest paid
        currency: ISO currency code
        commission_rate: Platform commission in percent

    Returns:
        Payout: Rounded components; owner_payout is the remainder

    Example:
        >>> calculate_owner_payout(Decimal("1000"), "USD").owner_payout
        Decimal('870.70')
    """
    amount = to_money(booking_amount)
    commission = to_money(amount * commission_rate / Decimal("100"))
    processing_fee = processing_fee_for(amount, currency)
    return Payout(
        currency=currency,
        booking_amount=amount,
        commission_rate=commission_rate,
        platform_commission=commission,
        processing_fee=processing_fee,
        owner_payout=amount - commission - processing_fee,
    )
