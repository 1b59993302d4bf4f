"""Pydantic v2 request/response schemas for review endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ReviewCreate(BaseModel):
    """Schema for reviewing a completed stay."""

    property_id: uuid.UUID
    booking_id: uuid.UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=1000)
    cleanliness: int | None = Field(None, ge=1, le=5)
    communication: int | None = Field(None, ge=1, le=5)
    check_in: int | None = Field(None, ge=1, le=5)
    accuracy: int | None = Field(None, ge=1, le=5)
    location: int | None = Field(None, ge=1, le=5)
    value: int | None = Field(None, ge=1, le=5)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ReviewerResponse(BaseModel):
    id: uuid.UUID
    name: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    booking_id: uuid.UUID
    guest_id: uuid.UUID
    host_id: uuid.UUID
    rating: int
    comment: str
    cleanliness: int | None = None
    communication: int | None = None
    check_in: int | None = None
    accuracy: int | None = None
    location: int | None = None
    value: int | None = None
    is_verified: bool
    guest: ReviewerResponse | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewListResponse(BaseModel):
    """Paginated reviews for one property."""

    items: list[ReviewResponse]
    total: int


class CategoryAverages(BaseModel):
    cleanliness: float = 0
    communication: float = 0
    check_in: float = 0
    accuracy: float = 0
    location: float = 0
    value: float = 0


class ReviewStatsResponse(BaseModel):
    """Aggregate view of a property's reviews.

    ``rating_distribution`` is keyed by star value ``"1"`` .. ``"5"``.
    """

    total_reviews: int
    average_rating: float
    rating_distribution: dict[str, int]
    category_averages: CategoryAverages


class CanReviewResponse(BaseModel):
    can_review: bool
    booking_id: uuid.UUID | None = None
    message: str
