"""
Internal helper functions for booking route handlers.

Maps domain exceptions to HTTP errors and schedules notifications, so the
route handlers stay thin.
"""

from __future__ import annotations

from typing import NoReturn

from fastapi import BackgroundTasks, HTTPException, status

from vacation_booking.errors import (
    BookingConflictError,
    BookingError,
    BusinessRuleError,
    CancellationWindowError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ReviewAlreadyExistsError,
    ReviewAlreadyModeratedError,
)
from vacation_booking.network.notifications import Notifier
from vacation_booking.services.bookings import BookingOutcome
from vacation_booking.services.notifications import deliver_notifications

STATUS_FOR_ERROR: list[tuple[type[BookingError], int]] = [
    (BookingConflictError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ReviewAlreadyExistsError, status.HTTP_409_CONFLICT),
    (ReviewAlreadyModeratedError, status.HTTP_409_CONFLICT),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (CancellationWindowError, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleError, status.HTTP_400_BAD_REQUEST),
]


def raise_http_for(error: BookingError) -> NoReturn:
    """
    Raise the HTTPException matching a domain error.

    Conflicts carry the conflicting bookings and blocked dates in the detail.

    Raises:
        HTTPException: Always; 400 for errors without a specific mapping
    """
    if isinstance(error, BookingConflictError):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "message": str(error),
                "conflicts": error.conflicts,
                "blocked_dates": error.blocked_dates,
            },
        ) from error

    for error_type, status_code in STATUS_FOR_ERROR:
        if isinstance(error, error_type):
            raise HTTPException(status_code=status_code, detail=str(error)) from error
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error)) from error


def schedule_notifications(
    background_tasks: BackgroundTasks, notifier: Notifier, outcome: BookingOutcome
) -> None:
    """Send the outcome's notifications after the response is returned."""
    if outcome.notifications:
        background_tasks.add_task(deliver_notifications, notifier, outcome.notifications)
