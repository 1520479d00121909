"""
Discount rules applied to a stay.

Rules are evaluated in order, each against the pre-discount subtotal, and every
applicable amount is summed into a single deduction. The total is not capped.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Protocol, Sequence

from vacation_booking.utils.money import money_to_json, to_money


@dataclass(frozen=True)
class DiscountContext:
    nights: int
    subtotal: Decimal
    check_in: date
    today: date
    listing_created_on: date | None = None

    @property
    def days_until_check_in(self) -> int:
        return (self.check_in - self.today).days


@dataclass(frozen=True)
class Discount:
    type: str
    name: str
    rate: Decimal
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "rate": str(self.rate),
            "amount": money_to_json(self.amount),
        }


class DiscountRule(Protocol):
    def evaluate(self, ctx: DiscountContext) -> Discount | None: ...


def _discount(kind: str, name: str, rate: Decimal, ctx: DiscountContext) -> Discount:
    return Discount(type=kind, name=name, rate=rate, amount=to_money(ctx.subtotal * rate))


@dataclass(frozen=True)
class StayTier:
    min_nights: int
    type: str
    name: str
    rate: Decimal


class LengthOfStayDiscount:
    """Single length-of-stay rule; the longest tier reached wins."""

    def __init__(self, tiers: Sequence[StayTier] | None = None) -> None:
        tiers = tiers or (
            StayTier(28, "monthly_stay", "Monthly stay discount", Decimal("0.20")),
            StayTier(7, "weekly_stay", "Weekly stay discount", Decimal("0.10")),
        )
        self.tiers = tuple(sorted(tiers, key=lambda tier: tier.min_nights, reverse=True))

    def evaluate(self, ctx: DiscountContext) -> Discount | None:
        for tier in self.tiers:
            if ctx.nights >= tier.min_nights:
                return _discount(tier.type, tier.name, tier.rate, ctx)
        return None


class EarlyBirdDiscount:
    def __init__(self, min_days_ahead: int = 30, rate: Decimal = Decimal("0.05")) -> None:
        self.min_days_ahead = min_days_ahead
        self.rate = rate

    def evaluate(self, ctx: DiscountContext) -> Discount | None:
        if ctx.days_until_check_in >= self.min_days_ahead:
            return _discount("early_bird", "Early bird discount", self.rate, ctx)
        return None


class LastMinuteDiscount:
    """Check-in 1 to max_days_ahead days away, inclusive. Same-day bookings get nothing."""

    def __init__(self, max_days_ahead: int = 3, rate: Decimal = Decimal("0.15")) -> None:
        self.max_days_ahead = max_days_ahead
        self.rate = rate

    def evaluate(self, ctx: DiscountContext) -> Discount | None:
        if 1 <= ctx.days_until_check_in <= self.max_days_ahead:
            return _discount("last_minute", "Last minute discount", self.rate, ctx)
        return None


class NewListingDiscount:
    def __init__(self, max_age_days: int = 30, rate: Decimal = Decimal("0.10")) -> None:
        self.max_age_days = max_age_days
        self.rate = rate

    def evaluate(self, ctx: DiscountContext) -> Discount | None:
        if ctx.listing_created_on is None:
            return None
        if (ctx.today - ctx.listing_created_on).days <= self.max_age_days:
            return _discount("new_property", "New property discount", self.rate, ctx)
        return None


DEFAULT_DISCOUNT_RULES: tuple[DiscountRule, ...] = (
    LengthOfStayDiscount(),
    EarlyBirdDiscount(),
    LastMinuteDiscount(),
    NewListingDiscount(),
)


def evaluate_discounts(
    ctx: DiscountContext, rules: Iterable[DiscountRule] = DEFAULT_DISCOUNT_RULES
) -> list[Discount]:
    """
    Run every rule against the context and collect the applicable discounts.

    Example:
        >>> ctx = DiscountContext(nights=7, subtotal=Decimal("700"),
        ...                       check_in=date(2026, 3, 10), today=date(2026, 3, 1))
        >>> [d.type for d in evaluate_discounts(ctx)]
        ['weekly_stay']
    """
    applied = []
    for rule in rules:
        discount = rule.evaluate(ctx)
        if discount is not None:
            applied.append(discount)
    return applied
