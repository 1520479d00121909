# models/bookings.py

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    false,
)
from sqlalchemy.sql import func

from vacation_booking.models.base import Base, JSONType


class Booking(Base):
    """
    ORM model for a guest booking of a listing over [check_in_date, check_out_date).

    Bookings are never deleted. price_breakdown holds the full quote the guest
    was charged, with money amounts as two-decimal strings.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("check_out_date > check_in_date", name="ck_bookings_date_order"),
        CheckConstraint("guests_count > 0", name="ck_bookings_positive_guests"),
        Index("ix_bookings_listing_dates", "listing_id", "check_in_date", "check_out_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_reference = Column(String(20), nullable=False, unique=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False)
    guest_id = Column(Integer, nullable=True, index=True)  # null for anonymous guests
    guest_name = Column(String(200), nullable=False)
    guest_email = Column(String(255), nullable=False, index=True)
    guest_phone = Column(String(50), nullable=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    guests_count = Column(Integer, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    booking_status = Column(String(20), nullable=False, server_default="pending")
    payment_status = Column(String(20), nullable=False, server_default="pending")
    payment_method = Column(String(30), nullable=True)
    special_requests = Column(Text, nullable=True)
    price_breakdown = Column(JSONType, nullable=False)
    idempotency_key = Column(String(255), nullable=True, unique=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class BookingNight(Base):
    """
    One row per occupied night of every pending or confirmed booking.

    The unique (listing_id, night) constraint is the storage-level guard against
    double booking: two transactions claiming the same night cannot both commit.
    """

    __tablename__ = "booking_nights"
    __table_args__ = (
        UniqueConstraint("listing_id", "night", name="uq_booking_nights_listing_night"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False)
    night = Column(Date, nullable=False)


class BookingPayment(Base):
    """
    Payment ledger, one row per charge or refund attempt.

    Refunds are rows with a negative amount. Rows are never deleted; provider
    webhooks update the status of the row they report on.
    """

    __tablename__ = "booking_payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    payment_method = Column(String(30), nullable=False)
    payment_gateway_id = Column(String(255), nullable=True, index=True)
    transaction_status = Column(String(20), nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class BookingStatusChange(Base):
    """Audit trail of every booking status transition, including overrides."""

    __tablename__ = "booking_status_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(
        Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=False)
    actor_id = Column(Integer, nullable=True)
    actor_role = Column(String(20), nullable=True)
    is_override = Column(Boolean, nullable=False, server_default=false())
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class PaymentWebhookEvent(Base):
    """Provider event ids already processed, so replayed callbacks are ignored."""

    __tablename__ = "payment_webhook_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(255), nullable=False, unique=True)
    event_type = Column(String(100), nullable=False)
    received_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
