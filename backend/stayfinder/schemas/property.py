"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for listing a new property."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1, max_length=255)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    base_rate: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    weekly_discount_rate: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    tax_percent: Decimal = Field(..., ge=0, le=100, decimal_places=2)
    max_guests: int | None = Field(None, ge=1)
    amenities: list[str] = Field(..., min_length=1)
    cover_photo: str = Field(..., min_length=1, max_length=512)
    images: list[str] = Field(default_factory=list, max_length=10)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional.

    ``rating`` is deliberately absent: it is maintained by the review ledger.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, min_length=1)
    location: str | None = Field(None, min_length=1, max_length=255)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    base_rate: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    weekly_discount_rate: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)
    tax_percent: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    max_guests: int | None = Field(None, ge=1)
    amenities: list[str] | None = Field(None, min_length=1)
    cover_photo: str | None = Field(None, min_length=1, max_length=512)
    images: list[str] | None = Field(None, max_length=10)
    is_active: bool | None = None


class DateRangeRequest(BaseModel):
    """Body for availability checks and price quotes."""

    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_dates(self) -> "DateRangeRequest":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str
    location: str
    latitude: float
    longitude: float
    base_rate: Decimal
    weekly_discount_rate: Decimal
    tax_percent: Decimal
    max_guests: int | None = None
    amenities: list[str]
    cover_photo: str
    images: list[str]
    rating: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertySummary(BaseModel):
    """Compact property view nested in bookings."""

    id: uuid.UUID
    title: str
    location: str
    cover_photo: str

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of properties."""

    items: list[PropertyResponse]
    total: int


class AvailabilityResponse(BaseModel):
    available: bool
    message: str


class PriceQuoteResponse(BaseModel):
    """Itemised price for a prospective stay."""

    check_in: date
    check_out: date
    nights: int
    standard_nights: int
    discounted_nights: int
    base_rate: Decimal
    weekly_discount_rate: Decimal
    tax_percent: Decimal
    subtotal: Decimal
    tax: Decimal
    total: Decimal
