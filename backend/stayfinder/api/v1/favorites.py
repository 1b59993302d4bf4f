"""Favorites API router — the current user's saved properties."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_active_user, get_db
from stayfinder.models.user import User
from stayfinder.schemas.auth import MessageResponse
from stayfinder.schemas.favorite import (
    FavoriteCreate,
    FavoriteListResponse,
    FavoriteResponse,
    FavoriteStatusResponse,
)
from stayfinder.schemas.property import PropertyResponse
from stayfinder.services import favorite_service

router = APIRouter(prefix="/api/v1/favorites", tags=["favorites"])


@router.post(
    "",
    response_model=FavoriteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a property to favorites",
)
async def add_favorite(
    body: FavoriteCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FavoriteResponse:
    favorite = await favorite_service.add_favorite(db, current_user.id, body.property_id)
    return FavoriteResponse.model_validate(favorite)


@router.get(
    "",
    response_model=FavoriteListResponse,
    summary="List favorite properties",
)
async def list_favorites(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FavoriteListResponse:
    properties = await favorite_service.list_favorites(db, current_user.id)
    return FavoriteListResponse(
        items=[PropertyResponse.model_validate(p) for p in properties],
        count=len(properties),
    )


@router.get(
    "/{property_id}",
    response_model=FavoriteStatusResponse,
    summary="Check whether a property is a favorite",
)
async def get_favorite_status(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> FavoriteStatusResponse:
    return FavoriteStatusResponse(
        property_id=property_id,
        is_favorite=await favorite_service.is_favorite(db, current_user.id, property_id),
    )


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Remove a property from favorites",
)
async def remove_favorite(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MessageResponse:
    await favorite_service.remove_favorite(db, current_user.id, property_id)
    return MessageResponse(message="Removed from favorites")
