from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field

from vacation_booking.services.booking_state import BookingStatus


class BookingCreatePayload(BaseModel):
    """
    Schema for creating a booking.

    payment_token is a Stripe PaymentMethod (pm_...) or a confirmed
    PaymentIntent (pi_...) for card payments; bank transfers need none.
    """

    listing_id: int = Field(..., description="Listing to book")
    check_in_date: date = Field(..., description="First night of the stay")
    check_out_date: date = Field(..., description="Departure date (not charged)")
    guests_count: int = Field(..., ge=1, description="Number of guests")
    guest_name: str = Field(..., min_length=1, max_length=200, description="Guest full name")
    guest_email: str = Field(..., min_length=3, max_length=255, description="Guest email")
    guest_phone: Optional[str] = Field(None, max_length=50, description="Guest phone number")
    payment_method: Literal["stripe", "bank_transfer"] = Field(
        ..., description="Payment method"
    )
    payment_token: Optional[str] = Field(None, description="Card payment token or intent id")
    special_requests: Optional[str] = Field(None, max_length=2000)


class BookingCancelPayload(BaseModel):
    """Schema for canceling a booking."""

    reason: Optional[str] = Field(None, max_length=1000, description="Cancellation reason")


class BookingStatusPayload(BaseModel):
    """Schema for the owner/admin status override."""

    status: BookingStatus = Field(..., description="New booking status")
    note: Optional[str] = Field(None, max_length=1000, description="Audit note")


class PaymentRetryPayload(BaseModel):
    """Schema for retrying a failed booking payment."""

    payment_method: Literal["stripe", "bank_transfer"] = Field(..., description="Payment method")
    payment_token: Optional[str] = Field(None, description="Card payment token or intent id")


class PriceValidationPayload(BaseModel):
    """Schema for checking a client-side total against the server price."""

    check_in_date: date
    check_out_date: date
    guests_count: int = Field(..., ge=1)
    expected_total: Decimal = Field(..., ge=0, description="Total shown to the guest")
