from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreatePayload(BaseModel):
    """Schema for reviewing a completed stay."""

    booking_id: int = Field(..., description="Completed booking being reviewed")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = Field(None, max_length=5000)


class ReviewModerationPayload(BaseModel):
    """Schema for approving or rejecting a review."""

    approved: bool = Field(..., description="True to publish, False to reject")
