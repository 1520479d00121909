"""
Booking orchestration: create, charge, cancel, override and complete bookings.

Every status change runs in one transaction together with its payment ledger
row and audit row. Payment gateway calls happen between transactions, never
inside one, and notifications are returned to the caller to send after commit.

Double booking is prevented twice: the availability query inside the booking
transaction (with the listing row locked on PostgreSQL), and the unique
(listing_id, night) constraint on booking_nights, which rejects the second of
two concurrent writers even if both passed the query.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from vacation_booking.actors import Actor
from vacation_booking.config import CANCELLATION_CUTOFF_HOURS, MAX_STAY_NIGHTS
from vacation_booking.db.readers.bookings import (
    count_charge_attempts,
    get_booking,
    get_booking_by_idempotency_key,
    get_completed_charge,
    list_booking_payments,
    list_finished_booking_ids,
)
from vacation_booking.db.readers.listings import get_listing
from vacation_booking.db.writers.bookings import (
    claim_booking_nights,
    insert_booking,
    insert_status_change,
    release_booking_nights,
    update_booking,
)
from vacation_booking.db.writers.payments import insert_payment
from vacation_booking.errors import (
    BookingConflictError,
    BookingNotFoundError,
    BusinessRuleError,
    CancellationWindowError,
    InvalidDateRangeError,
    PaymentError,
    PermissionDeniedError,
)
from vacation_booking.metrics import (
    booking_cancellations,
    booking_conflicts,
    booking_status_overrides,
    bookings_completed,
    bookings_created,
    payments,
    refunds,
)
from vacation_booking.network.payments import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    ChargeResult,
    PaymentGateway,
    RefundResult,
)
from vacation_booking.pricing.engine import PriceQuote, PricingEngine
from vacation_booking.pricing.payout import calculate_owner_payout
from vacation_booking.schemas.bookings import BookingCreatePayload
from vacation_booking.services.availability import check_listing_availability
from vacation_booking.services.booking_state import (
    BookingStatus,
    PaymentStatus,
    ensure_override_allowed,
    ensure_transition,
)
from vacation_booking.services.notifications import (
    Notification,
    notifications_for_cancellation,
    notifications_for_new_booking,
)
from vacation_booking.services.pricing import PricedListing, load_priced_listing, quote_stay
from vacation_booking.utils.datetime import ensure_utc, nights_between, utc_now, utc_today
from vacation_booking.utils.money import money_to_json, to_money
from vacation_booking.utils.reference import generate_booking_reference

logger = structlog.get_logger(__name__)


@dataclass
class BookingOutcome:
    booking: dict[str, Any]
    notifications: list[Notification] = field(default_factory=list)
    replayed: bool = False
    payment_error: str | None = None


# =============================================================================
# Serialization and permissions
# =============================================================================


def _iso(value: datetime | None) -> str | None:
    return ensure_utc(value).isoformat() if value else None


def serialize_booking(booking: dict[str, Any]) -> dict[str, Any]:
    """API representation of a booking row."""
    return {
        "booking_id": booking["id"],
        "booking_reference": booking["booking_reference"],
        "listing_id": booking["listing_id"],
        "guest_id": booking["guest_id"],
        "guest_name": booking["guest_name"],
        "guest_email": booking["guest_email"],
        "guest_phone": booking["guest_phone"],
        "check_in_date": booking["check_in_date"].isoformat(),
        "check_out_date": booking["check_out_date"].isoformat(),
        "guests_count": booking["guests_count"],
        "total_amount": money_to_json(booking["total_amount"]),
        "currency": booking["currency"],
        "status": booking["booking_status"],
        "payment_status": booking["payment_status"],
        "payment_method": booking["payment_method"],
        "special_requests": booking["special_requests"],
        "price_breakdown": booking["price_breakdown"],
        "canceled_at": _iso(booking["canceled_at"]),
        "cancellation_reason": booking["cancellation_reason"],
        "created_at": _iso(booking["created_at"]),
    }


def serialize_payment(payment: dict[str, Any]) -> dict[str, Any]:
    """API representation of a payment ledger row."""
    return {
        "id": payment["id"],
        "amount": money_to_json(payment["amount"]),
        "currency": payment["currency"],
        "payment_method": payment["payment_method"],
        "payment_gateway_id": payment["payment_gateway_id"],
        "transaction_status": payment["transaction_status"],
        "error_message": payment["error_message"],
        "created_at": _iso(payment["created_at"]),
    }


def _is_guest(actor: Actor, booking: dict[str, Any]) -> bool:
    # An email header alone proves nothing; only signed-in users match by email
    if actor.user_id is None:
        return False
    if actor.user_id == booking["guest_id"]:
        return True
    return bool(actor.email) and actor.email.lower() == booking["guest_email"].lower()


def _can_access(actor: Actor, booking: dict[str, Any]) -> bool:
    return actor.owns(booking["listing_owner_id"]) or _is_guest(actor, booking)


def _load_booking(conn: Connection, booking_id: int, for_update: bool = False) -> dict[str, Any]:
    booking = get_booking(conn, booking_id, for_update=for_update)
    if booking is None:
        raise BookingNotFoundError(booking_id)
    return booking


# =============================================================================
# Creation
# =============================================================================


def _validate_dates(check_in: date, check_out: date, today: date) -> int:
    nights = nights_between(check_in, check_out)
    if nights <= 0:
        raise InvalidDateRangeError("Check-out date must be after check-in date")
    if check_in < today:
        raise BusinessRuleError("Check-in date cannot be in the past")
    if nights > MAX_STAY_NIGHTS:
        raise BusinessRuleError(f"Stays are limited to {MAX_STAY_NIGHTS} nights")
    return nights


def _validate_listing(priced: PricedListing, guests_count: int, nights: int) -> None:
    listing, rate_card = priced.listing, priced.rate_card
    if not listing["is_active"] or listing["verification_status"] != "verified":
        raise BusinessRuleError("Listing is not available for booking")
    if guests_count > listing["capacity"]:
        raise BusinessRuleError(f"Listing accommodates at most {listing['capacity']} guests")
    if nights < rate_card.minimum_stay:
        raise BusinessRuleError(f"Minimum stay is {rate_card.minimum_stay} nights")
    if rate_card.maximum_stay is not None and nights > rate_card.maximum_stay:
        raise BusinessRuleError(f"Maximum stay is {rate_card.maximum_stay} nights")


def _reserve_booking(
    engine: Engine,
    payload: BookingCreatePayload,
    actor: Actor,
    quote: PriceQuote,
    reference: str,
    idempotency_key: str | None,
) -> int:
    """Insert a pending booking and claim its nights in one transaction."""
    with engine.begin() as conn:
        # Serializes concurrent bookings of the listing on PostgreSQL
        get_listing(conn, payload.listing_id, for_update=True)

        availability = check_listing_availability(
            conn, payload.listing_id, payload.check_in_date, payload.check_out_date
        )
        if not availability.available:
            raise BookingConflictError(
                conflicts=availability.conflicts,
                blocked_dates=[block["date"] for block in availability.blocked_dates],
            )

        booking_id = insert_booking(
            conn,
            {
                "booking_reference": reference,
                "listing_id": payload.listing_id,
                "guest_id": actor.user_id,
                "guest_name": payload.guest_name,
                "guest_email": payload.guest_email,
                "guest_phone": payload.guest_phone,
                "check_in_date": payload.check_in_date,
                "check_out_date": payload.check_out_date,
                "guests_count": payload.guests_count,
                "total_amount": quote.total,
                "currency": quote.currency,
                "booking_status": BookingStatus.PENDING.value,
                "payment_status": PaymentStatus.PENDING.value,
                "payment_method": payload.payment_method,
                "special_requests": payload.special_requests,
                "price_breakdown": quote.to_breakdown(),
                "idempotency_key": idempotency_key,
            },
        )
        claim_booking_nights(
            conn, booking_id, payload.listing_id, payload.check_in_date, payload.check_out_date
        )
        insert_status_change(
            conn, booking_id, None, BookingStatus.PENDING.value, actor, note="Booking created"
        )
    return booking_id


def _is_reference_collision(error: IntegrityError) -> bool:
    return "booking_reference" in str(error.orig)


def _reserve_with_fresh_reference(
    engine: Engine,
    payload: BookingCreatePayload,
    actor: Actor,
    quote: PriceQuote,
    idempotency_key: str | None,
    log: Any,
) -> tuple[int, str]:
    """Reserve the booking, drawing a new reference once if the first one is taken."""
    reference = generate_booking_reference()
    try:
        return (
            _reserve_booking(engine, payload, actor, quote, reference, idempotency_key),
            reference,
        )
    except IntegrityError as e:
        if not _is_reference_collision(e):
            raise
        log.warning("booking_reference_collision", reference=reference)

    reference = generate_booking_reference()
    return _reserve_booking(engine, payload, actor, quote, reference, idempotency_key), reference


def _replay(engine: Engine, idempotency_key: str) -> BookingOutcome | None:
    with engine.connect() as conn:
        existing = get_booking_by_idempotency_key(conn, idempotency_key)
    if existing is None:
        return None
    bookings_created.labels(outcome="replayed").inc()
    logger.info(
        "booking_replayed",
        booking_id=existing["id"],
        reference=existing["booking_reference"],
    )
    return BookingOutcome(booking=existing, replayed=True)


def create_booking(
    engine: Engine,
    gateway: PaymentGateway,
    pricing_engine: PricingEngine,
    payload: BookingCreatePayload,
    actor: Actor,
    idempotency_key: str | None = None,
    today: date | None = None,
) -> BookingOutcome:
    """
    Validate, price, reserve and charge a new booking.

    The booking is written as pending/pending before the charge. A completed
    charge confirms it; a failed charge leaves it pending/failed (still holding
    its dates) so the guest can retry the payment.

    Args:
        engine: Database engine
        gateway: Payment gateway
        pricing_engine: Pricing engine
        payload: Booking request
        actor: Caller; anonymous callers book as guests without an account
        idempotency_key: Client key; a repeated key returns the original booking
        today: Booking date (defaults to the current UTC date)

    Returns:
        BookingOutcome: Stored booking plus notifications to send

    Raises:
        InvalidDateRangeError: check_out_date is not after check_in_date
        BusinessRuleError: Past check-in, stay bounds, capacity or inactive listing
        ListingNotFoundError: Unknown listing
        BookingConflictError: Dates overlap another booking or a blocked date
    """
    today = today or utc_today()
    nights = _validate_dates(payload.check_in_date, payload.check_out_date, today)

    if idempotency_key:
        replayed = _replay(engine, idempotency_key)
        if replayed is not None:
            return replayed

    with engine.connect() as conn:
        priced = load_priced_listing(conn, payload.listing_id)
        _validate_listing(priced, payload.guests_count, nights)
        quote = quote_stay(
            conn,
            pricing_engine,
            priced,
            payload.check_in_date,
            payload.check_out_date,
            payload.guests_count,
            today,
        )

    log = logger.bind(
        listing_id=payload.listing_id,
        check_in=payload.check_in_date.isoformat(),
        check_out=payload.check_out_date.isoformat(),
    )

    try:
        booking_id, reference = _reserve_with_fresh_reference(
            engine, payload, actor, quote, idempotency_key, log
        )
    except BookingConflictError:
        bookings_created.labels(outcome="conflict").inc()
        booking_conflicts.labels(source="check").inc()
        log.info("booking_conflict", source="check")
        raise
    except IntegrityError as e:
        if idempotency_key:
            replayed = _replay(engine, idempotency_key)
            if replayed is not None:
                return replayed
        bookings_created.labels(outcome="conflict").inc()
        booking_conflicts.labels(source="constraint").inc()
        log.warning("booking_conflict", source="constraint")
        raise BookingConflictError() from e

    booking, payment_error = _charge_booking(
        engine, gateway, booking_id, payload.payment_method, payload.payment_token
    )

    outcome = booking["booking_status"]
    if booking["payment_status"] == PaymentStatus.FAILED.value:
        outcome = "payment_failed"
    bookings_created.labels(outcome=outcome).inc()
    log.info(
        "booking_created",
        booking_id=booking_id,
        reference=reference,
        status=booking["booking_status"],
        payment_status=booking["payment_status"],
        total=money_to_json(booking["total_amount"]),
    )

    return BookingOutcome(
        booking=booking,
        notifications=notifications_for_new_booking(booking),
        payment_error=payment_error,
    )


# =============================================================================
# Payments
# =============================================================================


def _charge_booking(
    engine: Engine,
    gateway: PaymentGateway,
    booking_id: int,
    method: str,
    token: str | None,
) -> tuple[dict[str, Any], str | None]:
    """
    Charge a booking and record the outcome.

    Returns:
        tuple: (updated booking, error message when the charge failed)
    """
    with engine.connect() as conn:
        booking = _load_booking(conn, booking_id)
        attempt = count_charge_attempts(conn, booking_id) + 1

    reference = booking["booking_reference"]
    amount = to_money(booking["total_amount"])

    try:
        result = gateway.charge(
            amount=amount,
            currency=booking["currency"],
            method=method,
            token=token,
            reference=reference,
            idempotency_key=f"charge-{reference}-{attempt}",
            email=booking["guest_email"],
            description=f"Booking {reference} - {booking['listing_name']}",
        )
    except PaymentError as e:
        payments.labels(method=method, status=STATUS_FAILED).inc()
        logger.warning("payment_failed", booking_id=booking_id, reference=reference, error=str(e))
        result = ChargeResult(status=STATUS_FAILED, error=str(e))

    with engine.begin() as conn:
        current = _load_booking(conn, booking_id, for_update=True)
        insert_payment(
            conn,
            booking_id=booking_id,
            amount=amount,
            currency=booking["currency"],
            payment_method=method,
            transaction_status=result.status,
            payment_gateway_id=result.transaction_id,
            error_message=result.error,
        )

        values: dict[str, Any] = {"payment_method": method}
        if result.status == STATUS_COMPLETED:
            values["payment_status"] = PaymentStatus.PAID.value
            status = BookingStatus(current["booking_status"])
            if status.can_transition_to(BookingStatus.CONFIRMED):
                values["booking_status"] = BookingStatus.CONFIRMED.value
                insert_status_change(
                    conn,
                    booking_id,
                    status.value,
                    BookingStatus.CONFIRMED.value,
                    note="Payment captured",
                )
            else:
                logger.warning(
                    "payment_captured_for_inactive_booking",
                    booking_id=booking_id,
                    status=status.value,
                )
        elif result.status == STATUS_FAILED:
            values["payment_status"] = PaymentStatus.FAILED.value
        else:
            values["payment_status"] = PaymentStatus.PENDING.value
        update_booking(conn, booking_id, values)

        booking = _load_booking(conn, booking_id)

    return booking, result.error if result.status == STATUS_FAILED else None


def retry_payment(
    engine: Engine,
    gateway: PaymentGateway,
    booking_id: int,
    actor: Actor,
    payment_method: str,
    payment_token: str | None,
) -> BookingOutcome:
    """
    Charge a pending booking whose previous payment failed.

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller is not the guest or an admin
        BusinessRuleError: Booking is not awaiting a payment retry
    """
    with engine.connect() as conn:
        booking = _load_booking(conn, booking_id)

    if not (actor.is_admin or _is_guest(actor, booking)):
        raise PermissionDeniedError("Only the guest can pay for this booking")
    if (
        booking["booking_status"] != BookingStatus.PENDING.value
        or booking["payment_status"] != PaymentStatus.FAILED.value
    ):
        raise BusinessRuleError("Only pending bookings with a failed payment can be retried")

    booking, payment_error = _charge_booking(
        engine, gateway, booking_id, payment_method, payment_token
    )
    logger.info(
        "payment_retried",
        booking_id=booking_id,
        status=booking["booking_status"],
        payment_status=booking["payment_status"],
    )
    return BookingOutcome(
        booking=booking,
        notifications=notifications_for_new_booking(booking),
        payment_error=payment_error,
    )


def _refund_booking(
    engine: Engine,
    gateway: PaymentGateway,
    booking: dict[str, Any],
    charge: dict[str, Any],
) -> str:
    """Refund a completed charge and record it. Failures are logged, not raised."""
    amount = to_money(charge["amount"])
    reference = booking["booking_reference"]

    try:
        result = gateway.refund(
            method=charge["payment_method"],
            transaction_id=charge["payment_gateway_id"],
            amount=amount,
            reference=reference,
        )
    except PaymentError as e:
        refunds.labels(status=STATUS_FAILED).inc()
        result = RefundResult(status=STATUS_FAILED, error=str(e))

    if result.status == STATUS_FAILED:
        logger.error(
            "refund_failed", booking_id=booking["id"], reference=reference, error=result.error
        )

    with engine.begin() as conn:
        insert_payment(
            conn,
            booking_id=booking["id"],
            amount=-amount,
            currency=booking["currency"],
            payment_method="refund",
            transaction_status=result.status,
            payment_gateway_id=result.refund_id,
            error_message=result.error,
        )
        if result.status == STATUS_COMPLETED:
            update_booking(conn, booking["id"], {"payment_status": PaymentStatus.REFUNDED.value})

    return result.status


# =============================================================================
# Cancellation and status changes
# =============================================================================


def hours_until_check_in(check_in: date, now: datetime) -> float:
    """Hours from now until midnight UTC of the check-in date."""
    check_in_at = datetime.combine(check_in, time.min, tzinfo=timezone.utc)
    return (check_in_at - ensure_utc(now)).total_seconds() / 3600


def cancel_booking(
    engine: Engine,
    gateway: PaymentGateway,
    booking_id: int,
    actor: Actor,
    reason: str | None = None,
    now: datetime | None = None,
) -> BookingOutcome:
    """
    Cancel a pending or confirmed booking and refund it if it was paid.

    Guests and owners must cancel more than CANCELLATION_CUTOFF_HOURS before
    check-in; admins may cancel at any time. A failed refund is recorded in the
    ledger and logged, and the cancellation still stands.

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller is not the guest, the owner or an admin
        InvalidTransitionError: Booking is already canceled or completed
        CancellationWindowError: Too close to check-in for a non-admin
    """
    now = now or utc_now()

    with engine.begin() as conn:
        booking = _load_booking(conn, booking_id, for_update=True)
        if not _can_access(actor, booking):
            raise PermissionDeniedError("Not allowed to cancel this booking")

        ensure_transition(booking["booking_status"], BookingStatus.CANCELED)

        hours_left = hours_until_check_in(booking["check_in_date"], now)
        if hours_left < CANCELLATION_CUTOFF_HOURS and not actor.is_admin:
            raise CancellationWindowError(
                f"Bookings can only be canceled more than {CANCELLATION_CUTOFF_HOURS} hours "
                "before check-in"
            )

        update_booking(
            conn,
            booking_id,
            {
                "booking_status": BookingStatus.CANCELED.value,
                "canceled_at": now,
                "cancellation_reason": reason,
            },
        )
        release_booking_nights(conn, booking_id)
        insert_status_change(
            conn,
            booking_id,
            booking["booking_status"],
            BookingStatus.CANCELED.value,
            actor,
            note=reason,
        )

        charge = None
        if booking["payment_status"] == PaymentStatus.PAID.value:
            charge = get_completed_charge(conn, booking_id)

    refund_status = None
    if charge is not None:
        refund_status = _refund_booking(engine, gateway, booking, charge)

    with engine.connect() as conn:
        booking = _load_booking(conn, booking_id)

    booking_cancellations.labels(actor_role=actor.role.value).inc()
    logger.info(
        "booking_canceled",
        booking_id=booking_id,
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        refund_status=refund_status,
        hours_before_check_in=round(hours_left, 1),
    )
    return BookingOutcome(
        booking=booking,
        notifications=notifications_for_cancellation(booking, refund_status),
    )


def override_booking_status(
    engine: Engine,
    booking_id: int,
    actor: Actor,
    new_status: BookingStatus,
    note: str | None = None,
    now: datetime | None = None,
) -> BookingOutcome:
    """
    Administrative status change, outside the normal lifecycle.

    The listing owner or an admin may move a pending, confirmed or canceled
    booking to any status. Night claims follow the new status, so re-activating
    a booking onto dates taken since it was canceled is a conflict. The change
    is logged with before/after state and written to the audit trail.

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller is not the owner or an admin
        InvalidTransitionError: Booking is completed
        BookingConflictError: Re-activated dates are no longer free
    """
    now = now or utc_now()

    try:
        with engine.begin() as conn:
            booking = _load_booking(conn, booking_id, for_update=True)
            if not actor.owns(booking["listing_owner_id"]):
                raise PermissionDeniedError(
                    "Only the listing owner or an admin can change booking status"
                )

            current = BookingStatus(booking["booking_status"])
            ensure_override_allowed(current, new_status)
            if current == new_status:
                return BookingOutcome(booking=booking)

            values: dict[str, Any] = {"booking_status": new_status.value}
            if new_status == BookingStatus.CANCELED:
                values.update(canceled_at=now, cancellation_reason=note)
            elif current == BookingStatus.CANCELED:
                values.update(canceled_at=None, cancellation_reason=None)

            if current.holds_dates and not new_status.holds_dates:
                release_booking_nights(conn, booking_id)
            elif new_status.holds_dates and not current.holds_dates:
                availability = check_listing_availability(
                    conn,
                    booking["listing_id"],
                    booking["check_in_date"],
                    booking["check_out_date"],
                    exclude_booking_id=booking_id,
                )
                if not availability.available:
                    raise BookingConflictError(
                        conflicts=availability.conflicts,
                        blocked_dates=[block["date"] for block in availability.blocked_dates],
                    )
                claim_booking_nights(
                    conn,
                    booking_id,
                    booking["listing_id"],
                    booking["check_in_date"],
                    booking["check_out_date"],
                )

            update_booking(conn, booking_id, values)
            insert_status_change(
                conn,
                booking_id,
                current.value,
                new_status.value,
                actor,
                note=note,
                is_override=True,
            )
            booking = _load_booking(conn, booking_id)
    except IntegrityError as e:
        booking_conflicts.labels(source="constraint").inc()
        raise BookingConflictError() from e

    booking_status_overrides.labels(from_status=current.value, to_status=new_status.value).inc()
    logger.info(
        "booking_status_overridden",
        booking_id=booking_id,
        from_status=current.value,
        to_status=new_status.value,
        actor_id=actor.user_id,
        actor_role=actor.role.value,
        note=note,
    )
    return BookingOutcome(booking=booking)


def complete_finished_stays(engine: Engine, today: date | None = None) -> int:
    """
    Mark confirmed bookings whose check-out date has arrived as completed.

    Args:
        engine: Database engine
        today: Cut-off date (defaults to the current UTC date)

    Returns:
        int: Number of bookings completed
    """
    today = today or utc_today()

    with engine.connect() as conn:
        booking_ids = list_finished_booking_ids(conn, today)

    completed = 0
    for booking_id in booking_ids:
        with engine.begin() as conn:
            booking = get_booking(conn, booking_id, for_update=True)
            # Skip bookings changed since the list was read
            if booking is None or booking["booking_status"] != BookingStatus.CONFIRMED.value:
                continue
            update_booking(conn, booking_id, {"booking_status": BookingStatus.COMPLETED.value})
            release_booking_nights(conn, booking_id)
            insert_status_change(
                conn,
                booking_id,
                BookingStatus.CONFIRMED.value,
                BookingStatus.COMPLETED.value,
                note="Stay completed",
            )
        completed += 1
        bookings_completed.inc()

    logger.info("finished_stays_completed", count=completed, today=today.isoformat())
    return completed


# =============================================================================
# Read operations
# =============================================================================


def get_booking_details(engine: Engine, booking_id: int, actor: Actor) -> dict[str, Any]:
    """
    Booking with its payment ledger, for the guest, the listing owner or an admin.

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller may not see the booking
    """
    with engine.connect() as conn:
        booking = _load_booking(conn, booking_id)
        ledger = list_booking_payments(conn, booking_id)

    if not _can_access(actor, booking):
        raise PermissionDeniedError("Not allowed to view this booking")

    return {**serialize_booking(booking), "payments": [serialize_payment(p) for p in ledger]}


def get_booking_payout(engine: Engine, booking_id: int, actor: Actor) -> dict[str, Any]:
    """
    Owner payout breakdown for a booking (owner or admin only).

    Raises:
        BookingNotFoundError: Unknown booking
        PermissionDeniedError: Caller is not the owner or an admin
    """
    with engine.connect() as conn:
        booking = _load_booking(conn, booking_id)

    if not actor.owns(booking["listing_owner_id"]):
        raise PermissionDeniedError("Only the listing owner can view the payout")

    payout = calculate_owner_payout(booking["total_amount"], booking["currency"])
    return {
        "booking_id": booking_id,
        "booking_reference": booking["booking_reference"],
        **payout.to_dict(),
    }
