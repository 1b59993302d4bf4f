"""Pydantic v2 request/response schemas for favorites endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from stayfinder.schemas.property import PropertyResponse


class FavoriteCreate(BaseModel):
    property_id: uuid.UUID


class FavoriteResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    property_id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FavoriteListResponse(BaseModel):
    """The user's saved properties, newest first."""

    items: list[PropertyResponse]
    count: int


class FavoriteStatusResponse(BaseModel):
    property_id: uuid.UUID
    is_favorite: bool
