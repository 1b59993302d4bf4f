"""Reviews API router — verified guest reviews and rating statistics."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_active_user, get_db
from stayfinder.models.user import User
from stayfinder.schemas.review import (
    CanReviewResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewStatsResponse,
)
from stayfinder.services import review_service

router = APIRouter(prefix="/api/v1/reviews", tags=["reviews"])


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a completed stay",
)
async def create_review(
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> ReviewResponse:
    """Create the single review allowed for a completed booking.

    Returns 400 when the booking is not completed and 409 when it has
    already been reviewed.
    """
    review = await review_service.create_review(db, current_user, body)
    return ReviewResponse.model_validate(review)


@router.get(
    "/property/{property_id}",
    response_model=ReviewListResponse,
    summary="List reviews for a property",
)
async def list_property_reviews(
    property_id: uuid.UUID,
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    items, total = await review_service.list_property_reviews(db, property_id, skip, limit)
    return ReviewListResponse(items=[ReviewResponse.model_validate(r) for r in items], total=total)


@router.get(
    "/stats/{property_id}",
    response_model=ReviewStatsResponse,
    summary="Rating statistics for a property",
)
async def get_review_stats(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
) -> ReviewStatsResponse:
    return ReviewStatsResponse(**await review_service.get_review_stats(db, property_id))


@router.get(
    "/can-review/{property_id}",
    response_model=CanReviewResponse,
    summary="Check whether the current user may review a property",
)
async def can_review(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> CanReviewResponse:
    return CanReviewResponse(**await review_service.can_review(db, property_id, current_user.id))
