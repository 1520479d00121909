"""
Unit tests for money, reference and date helpers.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from vacation_booking.services.bookings import hours_until_check_in
from vacation_booking.utils.datetime import ensure_utc, iter_nights, nights_between
from vacation_booking.utils.money import money_to_json, to_money
from vacation_booking.utils.reference import SUFFIX_ALPHABET, generate_booking_reference


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (2.675, "2.68"),
        ("10.005", "10.01"),
        (Decimal("10.004"), "10.00"),
        (7, "7.00"),
        (None, "0.00"),
    ],
)
def test_to_money_rounds_half_up(value: object, expected: str) -> None:
    """Test half-up rounding to cents."""
    assert to_money(value) == Decimal(expected)


@pytest.mark.unit
def test_money_to_json_has_two_decimals() -> None:
    """Test the serialized money format."""
    assert money_to_json(Decimal("5")) == "5.00"
    assert money_to_json(Decimal("265.3")) == "265.30"


@pytest.mark.unit
def test_booking_reference_format() -> None:
    """Test prefix, clock digits and random suffix of a reference."""
    reference = generate_booking_reference(timestamp_ms=1767225600123)

    assert reference.startswith("MC25600123")
    assert len(reference) == 14
    assert all(char in SUFFIX_ALPHABET for char in reference[-4:])


@pytest.mark.unit
def test_booking_references_differ() -> None:
    """Test that references generated in the same millisecond still differ."""
    references = {generate_booking_reference(timestamp_ms=1767225600123) for _ in range(50)}

    assert len(references) > 1


@pytest.mark.unit
def test_iter_nights_excludes_check_out() -> None:
    """Test the half-open stay range."""
    assert list(iter_nights(date(2026, 1, 30), date(2026, 2, 2))) == [
        date(2026, 1, 30),
        date(2026, 1, 31),
        date(2026, 2, 1),
    ]
    assert nights_between(date(2026, 1, 30), date(2026, 2, 2)) == 3
    assert nights_between(date(2026, 2, 2), date(2026, 1, 30)) == -3


@pytest.mark.unit
def test_ensure_utc() -> None:
    """Test normalizing naive and offset datetimes to UTC."""
    naive = datetime(2026, 1, 1, 12, 0)
    offset = datetime(2026, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=-5)))

    assert ensure_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ensure_utc(offset).hour == 17


@pytest.mark.unit
def test_hours_until_check_in_counts_to_midnight_utc() -> None:
    """Test the cancellation window clock."""
    now = datetime(2026, 5, 1, 6, 0, tzinfo=timezone.utc)

    assert hours_until_check_in(date(2026, 5, 2), now) == 18
    assert hours_until_check_in(date(2026, 5, 3), now) == 42
