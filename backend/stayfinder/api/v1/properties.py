"""Properties API routes — public search, host-managed listings, availability."""

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_active_user, get_db, get_optional_user, require_host
from stayfinder.models.property import Property
from stayfinder.models.user import User
from stayfinder.schemas.auth import MessageResponse
from stayfinder.schemas.property import (
    AvailabilityResponse,
    DateRangeRequest,
    PriceQuoteResponse,
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from stayfinder.services.availability import get_property_or_404, is_available
from stayfinder.services.pricing import count_nights, quote

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


async def _get_owned_property(property_id: uuid.UUID, current_user: User, db: AsyncSession) -> Property:
    """Fetch a property the current user may manage (its host, or an admin)."""
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()

    if prop is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    if prop.host_id != current_user.id and current_user.role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to manage this property",
        )
    return prop


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="List a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> PropertyResponse:
    """Create a property hosted by the authenticated user."""
    prop = Property(
        host_id=current_user.id,
        **body.model_dump(),
    )
    db.add(prop)
    await db.flush()
    await db.refresh(prop)
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Search active properties",
)
async def list_properties(
    min_price: Decimal | None = Query(None, ge=0, description="Minimum base nightly rate"),
    max_price: Decimal | None = Query(None, ge=0, description="Maximum base nightly rate"),
    city: str | None = Query(None, min_length=1, description="Case-insensitive match on location"),
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Return paginated active listings, newest first."""
    filters = [Property.is_active.is_(True)]
    if min_price is not None:
        filters.append(Property.base_rate >= min_price)
    if max_price is not None:
        filters.append(Property.base_rate <= max_price)
    if city is not None:
        filters.append(Property.location.ilike(f"%{city}%"))

    count_query = select(func.count()).select_from(Property).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    items_query = (
        select(Property).where(*filters).order_by(Property.created_at.desc(), Property.id).offset(skip).limit(limit)
    )
    items = list((await db.execute(items_query)).scalars().all())

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    summary="List the current host's properties",
)
async def list_my_properties(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_host),
) -> PropertyListResponse:
    """All of the host's listings, including delisted ones."""
    result = await db.execute(
        select(Property).where(Property.host_id == current_user.id).order_by(Property.created_at.desc())
    )
    items = list(result.scalars().all())
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: User | None = Depends(get_optional_user),
) -> PropertyResponse:
    """Retrieve a single property.

    Removed listings are only visible to their host or an admin; everyone
    else gets the same 404 as for an unknown ID.
    """
    prop = await get_property_or_404(db, property_id)
    if not prop.is_active and (viewer is None or (viewer.id != prop.host_id and viewer.role != "admin")):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Property not found",
        )
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Partially update a property. Only explicitly set fields are changed."""
    prop = await _get_owned_property(property_id, current_user, db)

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Delist a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    """Soft-delete a property. Its bookings and reviews are kept."""
    prop = await _get_owned_property(property_id, current_user, db)

    prop.is_active = False
    db.add(prop)
    await db.flush()

    return MessageResponse(message="Property removed")


@router.post(
    "/{property_id}/availability",
    response_model=AvailabilityResponse,
    summary="Check whether dates are free",
)
async def check_availability(
    property_id: uuid.UUID,
    body: DateRangeRequest,
    db: AsyncSession = Depends(get_db),
) -> AvailabilityResponse:
    """Report whether any pending or confirmed booking overlaps the requested stay."""
    available = await is_available(db, property_id, body.check_in, body.check_out)
    message = "Property is available for these dates" if available else "Property is not available for these dates"
    return AvailabilityResponse(available=available, message=message)


@router.post(
    "/{property_id}/quote",
    response_model=PriceQuoteResponse,
    summary="Price a prospective stay",
)
async def quote_stay(
    property_id: uuid.UUID,
    body: DateRangeRequest,
    db: AsyncSession = Depends(get_db),
) -> PriceQuoteResponse:
    """Itemised price for the requested dates, without checking availability."""
    prop = await get_property_or_404(db, property_id)
    breakdown = quote(
        prop.base_rate,
        prop.weekly_discount_rate,
        prop.tax_percent,
        count_nights(body.check_in, body.check_out),
    )
    return PriceQuoteResponse(
        check_in=body.check_in,
        check_out=body.check_out,
        nights=breakdown.nights,
        standard_nights=breakdown.standard_nights,
        discounted_nights=breakdown.discounted_nights,
        base_rate=prop.base_rate,
        weekly_discount_rate=prop.weekly_discount_rate,
        tax_percent=prop.tax_percent,
        subtotal=breakdown.subtotal,
        tax=breakdown.tax,
        total=breakdown.total,
    )
