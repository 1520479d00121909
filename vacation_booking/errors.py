"""
Domain exceptions raised by the pricing, availability and booking services.

Services raise these; route handlers translate them to HTTP responses through
``routes._booking_helpers.raise_http_for``. None of them carry HTTP status codes
themselves so the services stay usable from scripts and background jobs.
"""

from __future__ import annotations

from typing import Any


class BookingError(Exception):
    """Base class for every domain error in this package."""


class BusinessRuleError(BookingError):
    """Request rejected by a validation rule before anything was persisted."""


class InvalidDateRangeError(BusinessRuleError):
    """Check-out date is on or before the check-in date."""


class NotFoundError(BookingError):
    """Referenced entity does not exist."""


class ListingNotFoundError(NotFoundError):
    def __init__(self, listing_id: int) -> None:
        super().__init__(f"Listing {listing_id} not found")
        self.listing_id = listing_id


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: int) -> None:
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class ReviewNotFoundError(NotFoundError):
    def __init__(self, review_id: int) -> None:
        super().__init__(f"Review {review_id} not found")
        self.review_id = review_id


class PermissionDeniedError(BookingError):
    """Actor is not allowed to perform the operation."""


class BookingConflictError(BookingError):
    """
    Requested dates collide with an existing booking or a blocked date.

    Attributes:
        conflicts: Conflicting bookings as dicts (booking_reference, dates, status)
        blocked_dates: ISO dates blocked on the listing calendar
    """

    def __init__(
        self,
        message: str = "Listing is not available for the selected dates",
        conflicts: list[dict[str, Any]] | None = None,
        blocked_dates: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.conflicts = conflicts or []
        self.blocked_dates = blocked_dates or []


class InvalidTransitionError(BookingError):
    """Booking status change not allowed from the current status."""

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Cannot move booking from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class CancellationWindowError(BookingError):
    """Cancellation requested too close to check-in."""


class ReviewAlreadyExistsError(BookingError):
    """A review was already submitted for the booking."""


class ReviewAlreadyModeratedError(BookingError):
    """Review moderation decision is final."""


class PaymentError(BookingError):
    """Payment gateway rejected or failed a charge or refund."""


class WebhookVerificationError(BookingError):
    """Webhook payload failed signature verification."""
