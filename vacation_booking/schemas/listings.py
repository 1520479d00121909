import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AvailabilityCheckPayload(BaseModel):
    """Schema for checking whether a stay can be booked."""

    check_in_date: datetime.date = Field(..., description="First night of the stay")
    check_out_date: datetime.date = Field(..., description="Departure date")


class AvailabilityDateEntry(BaseModel):
    """One calendar date of a listing."""

    date: datetime.date
    is_available: bool = Field(..., description="False blocks the night")
    blocked_reason: Optional[str] = Field(None, max_length=500)


class AvailabilityUpdatePayload(BaseModel):
    """Schema for updating calendar dates of a listing."""

    dates: list[AvailabilityDateEntry] = Field(..., min_length=1, max_length=366)
