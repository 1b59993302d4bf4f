"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from stayfinder.schemas.property import PropertySummary

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class GuestDetails(BaseModel):
    """Contact details copied onto the booking at creation time."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str = Field(..., min_length=1, max_length=50)
    address: str | None = Field(None, max_length=512)
    gov_id: str | None = Field(None, max_length=100)


class BookingCreate(BaseModel):
    """Schema for reserving a property.

    The price is computed server-side from the property's rates; clients
    cannot supply it.
    """

    property_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    special_requests: str | None = Field(None, max_length=2000)
    guest_details: GuestDetails

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self


class BookingStatusUpdate(BaseModel):
    """Requested status change. ``completed`` is set by the sweep only."""

    status: Literal["confirmed", "cancelled"]


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Booking as seen by its guest or host."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    host_id: uuid.UUID
    check_in: date
    check_out: date
    num_guests: int
    total_price: Decimal
    status: str
    payment_status: str
    special_requests: str | None = None
    guest_name: str
    guest_email: str
    guest_phone: str
    guest_address: str | None = None
    guest_id_type: str | None = None
    guest_id_number: str | None = None
    property: PropertySummary | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
