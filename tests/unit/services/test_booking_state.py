"""
Unit tests for the booking status model.
"""

from __future__ import annotations

import pytest

from vacation_booking.errors import InvalidTransitionError
from vacation_booking.services.booking_state import (
    HOLDING_STATUSES,
    BookingStatus,
    ensure_override_allowed,
    ensure_transition,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "confirmed"),
        ("pending", "canceled"),
        ("confirmed", "canceled"),
        ("confirmed", "completed"),
    ],
)
def test_allowed_transitions(current: str, target: str) -> None:
    """Test the normal lifecycle transitions."""
    ensure_transition(current, target)


@pytest.mark.unit
@pytest.mark.parametrize(
    "current, target",
    [
        ("pending", "completed"),
        ("confirmed", "pending"),
        ("canceled", "confirmed"),
        ("canceled", "canceled"),
        ("completed", "canceled"),
    ],
)
def test_rejected_transitions(current: str, target: str) -> None:
    """Test that transitions outside the lifecycle raise."""
    with pytest.raises(InvalidTransitionError) as exc_info:
        ensure_transition(current, target)

    assert exc_info.value.from_status == current
    assert exc_info.value.to_status == target


@pytest.mark.unit
def test_terminal_statuses() -> None:
    """Test which statuses end the normal lifecycle."""
    assert BookingStatus.CANCELED.is_terminal
    assert BookingStatus.COMPLETED.is_terminal
    assert not BookingStatus.PENDING.is_terminal
    assert not BookingStatus.CONFIRMED.is_terminal


@pytest.mark.unit
def test_only_pending_and_confirmed_hold_dates() -> None:
    """Test the statuses that block nights for other guests."""
    assert HOLDING_STATUSES == ("pending", "confirmed")


@pytest.mark.unit
def test_override_allowed_from_canceled() -> None:
    """Test that overrides may re-activate a canceled booking."""
    ensure_override_allowed("canceled", "confirmed")
    ensure_override_allowed("confirmed", "pending")


@pytest.mark.unit
def test_override_rejected_for_completed() -> None:
    """Test that completed bookings cannot be overridden."""
    with pytest.raises(InvalidTransitionError):
        ensure_override_allowed("completed", "confirmed")
