"""Favorites — a per-user set of saved properties."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.exceptions import ConflictError, NotFoundError
from stayfinder.models.favorite import Favorite
from stayfinder.models.property import Property
from stayfinder.services.availability import get_property_or_404

logger = logging.getLogger(__name__)


async def _find(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> Favorite | None:
    result = await db.execute(
        select(Favorite).where(Favorite.user_id == user_id, Favorite.property_id == property_id)
    )
    return result.scalar_one_or_none()


async def add_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> Favorite:
    """Save a property for the user.

    Raises:
        NotFoundError: the property does not exist or is delisted.
        ConflictError: the property is already a favorite.
    """
    prop = await get_property_or_404(db, property_id)
    if not prop.is_active:
        raise NotFoundError("Property not found")
    if await _find(db, user_id, property_id) is not None:
        raise ConflictError("Property already in favorites")

    favorite = Favorite(user_id=user_id, property_id=property_id)
    db.add(favorite)
    try:
        await db.flush()
    except IntegrityError:
        # Lost a race with a concurrent add of the same pair.
        raise ConflictError("Property already in favorites") from None
    await db.refresh(favorite)
    logger.info("User %s favorited property %s", user_id, property_id)
    return favorite


async def remove_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> None:
    """Raises ``NotFoundError`` when the pair does not exist."""
    favorite = await _find(db, user_id, property_id)
    if favorite is None:
        raise NotFoundError("Favorite not found")
    await db.delete(favorite)
    await db.flush()
    logger.info("User %s removed property %s from favorites", user_id, property_id)


async def is_favorite(db: AsyncSession, user_id: uuid.UUID, property_id: uuid.UUID) -> bool:
    return await _find(db, user_id, property_id) is not None


async def list_favorites(db: AsyncSession, user_id: uuid.UUID) -> list[Property]:
    """The user's favorite properties, newest favorite first.

    Favorites pointing at properties that are gone or delisted are skipped.
    """
    result = await db.execute(
        select(Property)
        .join(Favorite, Favorite.property_id == Property.id)
        .where(Favorite.user_id == user_id, Property.is_active.is_(True))
        .order_by(Favorite.created_at.desc(), Favorite.id)
    )
    return list(result.scalars().all())
