"""Human-shareable booking references."""

import secrets
import string
import time

from vacation_booking.config import BOOKING_REFERENCE_PREFIX

SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_booking_reference(
    prefix: str = BOOKING_REFERENCE_PREFIX, timestamp_ms: int | None = None
) -> str:
    """
    Build a booking reference: prefix + last 8 digits of the epoch-millis clock + 4 random chars.

    Example:
        >>> ref = generate_booking_reference(timestamp_ms=1767225600123)
        >>> ref[:10], len(ref)
        ('MC25600123', 14)
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(4))
    return f"{prefix}{str(timestamp_ms)[-8:]}{suffix}"
