"""Bookings API router.

Visibility rule: a booking is visible to its guest and to the host of the
booked property, nobody else. Guests list their own stays under
``GET /bookings``; hosts see bookings on their listings under
``GET /bookings/host``.
"""

from __future__ import annotations

import uuid
from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_active_user, get_db, require_host
from stayfinder.models.user import User
from stayfinder.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from stayfinder.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])

StatusFilter = Literal["pending", "confirmed", "completed", "cancelled"]


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a property",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Reserve a property for the current user.

    The booking starts ``pending`` and waits for the host to confirm it.
    Returns 409 when the dates overlap another pending or confirmed booking.
    """
    booking = await booking_service.create_booking(db, current_user, body)
    return BookingResponse.model_validate(booking)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's bookings",
)
async def list_my_bookings(
    status_filter: StatusFilter | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingListResponse:
    """Bookings made by the current user, newest first."""
    items, total = await booking_service.list_guest_bookings(db, current_user, status_filter, skip, limit)
    return BookingListResponse(items=[BookingResponse.model_validate(b) for b in items], total=total)


@router.get(
    "/host",
    response_model=BookingListResponse,
    summary="List bookings on the current host's properties",
)
async def list_host_bookings(
    status_filter: StatusFilter | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> BookingListResponse:
    """Bookings on properties hosted by the current user, newest first."""
    items, total = await booking_service.list_host_bookings(db, current_user, status_filter, skip, limit)
    return BookingListResponse(items=[BookingResponse.model_validate(b) for b in items], total=total)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    booking = await booking_service.get_booking(db, booking_id, current_user)
    return BookingResponse.model_validate(booking)


@router.put(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Confirm or cancel a booking",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Apply a status transition.

    Hosts confirm pending bookings; guest or host may cancel a pending or
    confirmed one. Any other move returns 400.
    """
    booking = await booking_service.transition_status(db, booking_id, current_user, body.status)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Shortcut for ``PUT /{booking_id}/status`` with ``cancelled``."""
    booking = await booking_service.transition_status(db, booking_id, current_user, "cancelled")
    return BookingResponse.model_validate(booking)
