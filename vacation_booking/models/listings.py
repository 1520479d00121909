"""SQLAlchemy models for listings and the rules that price and block them."""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
    true,
)
from sqlalchemy.sql import func

from vacation_booking.models.base import Base


class Listing(Base):
    """
    ORM model for a bookable property.

    Listings are maintained by the listing management service; this service only
    reads them. They are soft-deleted through is_active and are bookable only
    when active and verified.
    """

    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, nullable=False, index=True)
    owner_email = Column(String(255), nullable=True)
    name = Column(String(200), nullable=False)
    capacity = Column(Integer, nullable=False)
    bedrooms = Column(Integer, nullable=False, server_default=text("1"))
    bathrooms = Column(Integer, nullable=False, server_default=text("1"))
    city = Column(String(100), nullable=False, index=True)
    country = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, server_default=true())
    verification_status = Column(String(20), nullable=False, server_default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class PricingRule(Base):
    """Per-listing base pricing: nightly rates, fees, deposit and stay bounds."""

    __tablename__ = "pricing_rules"
    __table_args__ = (
        CheckConstraint(
            "maximum_stay IS NULL OR maximum_stay >= minimum_stay",
            name="ck_pricing_rules_stay_bounds",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    base_price = Column(Numeric(10, 2), nullable=False)
    weekend_price = Column(Numeric(10, 2), nullable=True)
    cleaning_fee = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    extra_guest_fee = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    security_deposit = Column(Numeric(10, 2), nullable=False, server_default=text("0"))
    currency = Column(String(3), nullable=False, server_default="USD")
    minimum_stay = Column(Integer, nullable=False, server_default=text("1"))
    maximum_stay = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class SeasonalRule(Base):
    """
    Date-bounded price multiplier for a listing.

    Rules may overlap; the highest active multiplier covering a night wins.
    fixed_price is stored for the listing dashboard but not applied by pricing.
    """

    __tablename__ = "seasonal_rules"
    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="ck_seasonal_rules_date_order"),
        CheckConstraint("price_multiplier > 0", name="ck_seasonal_rules_positive_multiplier"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)  # inclusive
    price_multiplier = Column(Numeric(5, 2), nullable=False, server_default=text("1.00"))
    fixed_price = Column(Numeric(10, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class AvailabilityBlock(Base):
    """Owner-managed calendar entry; is_available=false blocks the night."""

    __tablename__ = "availability_blocks"
    __table_args__ = (
        UniqueConstraint("listing_id", "date", name="uq_availability_blocks_listing_date"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    listing_id = Column(
        Integer, ForeignKey("listings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    is_available = Column(Boolean, nullable=False, server_default=true())
    blocked_reason = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
