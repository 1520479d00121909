"""Create listing, booking, payment and review tables

Revision ID: 3a1f9c2d7b10
Revises:
Create Date: 2026-10-18 09:12:04.118230

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op  # type: ignore[attr-defined]

# revision identifiers, used by Alembic.
revision = "3a1f9c2d7b10"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "listings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("owner_id", sa.Integer(), nullable=False),
        sa.Column("owner_email", sa.String(255), nullable=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("bedrooms", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("bathrooms", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "verification_status", sa.String(20), server_default="pending", nullable=False
        ),
        *_timestamps(),
    )
    op.create_index("ix_listings_owner_id", "listings", ["owner_id"])
    op.create_index("ix_listings_city", "listings", ["city"])

    op.create_table(
        "pricing_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "listing_id",
            sa.Integer(),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("base_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("weekend_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("cleaning_fee", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "extra_guest_fee", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False
        ),
        sa.Column(
            "security_deposit", sa.Numeric(10, 2), server_default=sa.text("0"), nullable=False
        ),
        sa.Column("currency", sa.String(3), server_default="USD", nullable=False),
        sa.Column("minimum_stay", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("maximum_stay", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "maximum_stay IS NULL OR maximum_stay >= minimum_stay",
            name="ck_pricing_rules_stay_bounds",
        ),
    )

    op.create_table(
        "seasonal_rules",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "listing_id",
            sa.Integer(),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column(
            "price_multiplier", sa.Numeric(5, 2), server_default=sa.text("1.00"), nullable=False
        ),
        sa.Column("fixed_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("end_date >= start_date", name="ck_seasonal_rules_date_order"),
        sa.CheckConstraint("price_multiplier > 0", name="ck_seasonal_rules_positive_multiplier"),
    )
    op.create_index("ix_seasonal_rules_listing_id", "seasonal_rules", ["listing_id"])

    op.create_table(
        "availability_blocks",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "listing_id",
            sa.Integer(),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("blocked_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("listing_id", "date", name="uq_availability_blocks_listing_date"),
    )
    op.create_index("ix_availability_blocks_listing_id", "availability_blocks", ["listing_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("booking_reference", sa.String(20), nullable=False, unique=True),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("guest_id", sa.Integer(), nullable=True),
        sa.Column("guest_name", sa.String(200), nullable=False),
        sa.Column("guest_email", sa.String(255), nullable=False),
        sa.Column("guest_phone", sa.String(50), nullable=True),
        sa.Column("check_in_date", sa.Date(), nullable=False),
        sa.Column("check_out_date", sa.Date(), nullable=False),
        sa.Column("guests_count", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("booking_status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("payment_status", sa.String(20), server_default="pending", nullable=False),
        sa.Column("payment_method", sa.String(30), nullable=True),
        sa.Column("special_requests", sa.Text(), nullable=True),
        sa.Column("price_breakdown", postgresql.JSONB(), nullable=False),
        sa.Column("idempotency_key", sa.String(255), nullable=True, unique=True),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("check_out_date > check_in_date", name="ck_bookings_date_order"),
        sa.CheckConstraint("guests_count > 0", name="ck_bookings_positive_guests"),
    )
    op.create_index("ix_bookings_guest_id", "bookings", ["guest_id"])
    op.create_index("ix_bookings_guest_email", "bookings", ["guest_email"])
    op.create_index(
        "ix_bookings_listing_dates", "bookings", ["listing_id", "check_in_date", "check_out_date"]
    )

    op.create_table(
        "booking_nights",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("listing_id", sa.Integer(), sa.ForeignKey("listings.id"), nullable=False),
        sa.Column("night", sa.Date(), nullable=False),
        sa.UniqueConstraint("listing_id", "night", name="uq_booking_nights_listing_night"),
    )
    op.create_index("ix_booking_nights_booking_id", "booking_nights", ["booking_id"])

    op.create_table(
        "booking_payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("payment_method", sa.String(30), nullable=False),
        sa.Column("payment_gateway_id", sa.String(255), nullable=True),
        sa.Column("transaction_status", sa.String(20), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index("ix_booking_payments_booking_id", "booking_payments", ["booking_id"])
    op.create_index(
        "ix_booking_payments_payment_gateway_id", "booking_payments", ["payment_gateway_id"]
    )

    op.create_table(
        "booking_status_changes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_status", sa.String(20), nullable=True),
        sa.Column("to_status", sa.String(20), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("actor_role", sa.String(20), nullable=True),
        sa.Column("is_override", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("note", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )
    op.create_index(
        "ix_booking_status_changes_booking_id", "booking_status_changes", ["booking_id"]
    )

    op.create_table(
        "payment_webhook_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event_id", sa.String(255), nullable=False, unique=True),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column(
            "received_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "booking_id",
            sa.Integer(),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "listing_id",
            sa.Integer(),
            sa.ForeignKey("listings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("reviewer_id", sa.Integer(), nullable=True),
        sa.Column("reviewer_name", sa.String(200), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("is_approved", sa.Boolean(), nullable=True),
        sa.Column("moderated_by", sa.Integer(), nullable=True),
        sa.Column("moderated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
        ),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_listing_id", "reviews", ["listing_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("reviews")
    op.drop_table("payment_webhook_events")
    op.drop_table("booking_status_changes")
    op.drop_table("booking_payments")
    op.drop_table("booking_nights")
    op.drop_table("bookings")
    op.drop_table("availability_blocks")
    op.drop_table("seasonal_rules")
    op.drop_table("pricing_rules")
    op.drop_table("listings")
