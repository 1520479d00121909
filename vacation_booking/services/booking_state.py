"""
Booking and payment status model.

Normal lifecycle::

    pending -> confirmed -> completed
    pending -> canceled
    confirmed -> canceled

completed and canceled are terminal for the normal path. Owners and admins can
additionally override a pending, confirmed or canceled booking to any status
through a separate, audited operation (services.bookings.override_booking_status).
"""

from __future__ import annotations

from enum import Enum

from vacation_booking.errors import InvalidTransitionError


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELED = "canceled"
    COMPLETED = "completed"

    @property
    def holds_dates(self) -> bool:
        """Bookings in this status block their nights for other guests."""
        return self in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    @property
    def is_terminal(self) -> bool:
        return not TRANSITIONS[self]

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in TRANSITIONS[self]


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"
    DISPUTED = "disputed"


class TransactionStatus(str, Enum):
    """Status of a single payment ledger row."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    DISPUTED = "disputed"


TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

OVERRIDABLE_STATUSES = frozenset(
    {BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.CANCELED}
)

HOLDING_STATUSES = tuple(status.value for status in BookingStatus if status.holds_dates)


def ensure_transition(current: BookingStatus | str, target: BookingStatus | str) -> None:
    """
    Check a normal lifecycle transition.

    Raises:
        InvalidTransitionError: If target is not reachable from current
    """
    current, target = BookingStatus(current), BookingStatus(target)
    if not current.can_transition_to(target):
        raise InvalidTransitionError(current.value, target.value)


def ensure_override_allowed(current: BookingStatus | str, target: BookingStatus | str) -> None:
    """
    Check an administrative override.

    Raises:
        InvalidTransitionError: If the booking is completed
    """
    current, target = BookingStatus(current), BookingStatus(target)
    if current not in OVERRIDABLE_STATUSES:
        raise InvalidTransitionError(current.value, target.value)
