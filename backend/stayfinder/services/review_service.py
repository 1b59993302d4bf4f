"""Review ledger — one review per completed booking, plus rating aggregates.

``Property.rating`` is a cache of the mean review rating. It has a single
writer, ``create_review``, which inserts the review and recomputes the mean
in the same transaction and commits it before releasing the property guard,
so concurrent reviews on one property cannot drop each other from the
aggregate.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.config import settings
from stayfinder.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
)
from stayfinder.models.booking import Booking
from stayfinder.models.review import CATEGORY_FIELDS, Review
from stayfinder.models.user import User
from stayfinder.schemas.review import ReviewCreate
from stayfinder.services.availability import get_property_or_404
from stayfinder.services.booking_service import sweep_completions
from stayfinder.services.locks import property_locks

logger = logging.getLogger(__name__)

_RATING_PLACES = Decimal("0.01")


async def _existing_review_id(db: AsyncSession, booking_id: uuid.UUID) -> uuid.UUID | None:
    result = await db.execute(select(Review.id).where(Review.booking_id == booking_id))
    return result.scalar_one_or_none()


async def recompute_property_rating(db: AsyncSession, property_id: uuid.UUID) -> Decimal:
    """Mean of all review ratings for the property, 0 when there are none."""
    result = await db.execute(select(func.avg(Review.rating)).where(Review.property_id == property_id))
    average = result.scalar_one_or_none()
    if average is None:
        return Decimal("0")
    return Decimal(str(average)).quantize(_RATING_PLACES, rounding=ROUND_HALF_UP)


async def create_review(db: AsyncSession, guest: User, data: ReviewCreate) -> Review:
    """Record a guest's review of a completed stay and refresh the property rating.

    Raises:
        NotFoundError: property or booking missing.
        InvalidInputError: the booking is for a different property.
        ForbiddenError: the booking belongs to someone else.
        InvalidStateError: the booking is not completed.
        ConflictError: the booking already has a review.
    """
    await get_property_or_404(db, data.property_id)

    # Stays that ended but were never swept still count as completed. Their
    # status change is committed before waiting on the property guard.
    if await sweep_completions(db, guest_id=guest.id):
        await db.commit()

    result = await db.execute(select(Booking).where(Booking.id == data.booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    if booking.property_id != data.property_id:
        raise InvalidInputError("Booking does not belong to this property")
    if booking.guest_id != guest.id:
        raise ForbiddenError("You can only review properties you have booked")
    if booking.status != "completed":
        raise InvalidStateError("You can only review completed bookings")

    async with property_locks.hold(
        data.property_id,
        timeout=settings.booking_lock_timeout_seconds,
        attempts=settings.booking_lock_retries,
    ):
        prop = await get_property_or_404(db, data.property_id, for_update=True)
        if await _existing_review_id(db, booking.id) is not None:
            raise ConflictError("You have already reviewed this booking")

        review = Review(
            property_id=prop.id,
            guest_id=guest.id,
            host_id=booking.host_id,
            booking_id=booking.id,
            is_verified=True,
            **data.model_dump(exclude={"property_id", "booking_id"}),
        )
        db.add(review)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("You have already reviewed this booking") from None

        prop.rating = await recompute_property_rating(db, prop.id)
        await db.flush()
        await db.refresh(review)
        await db.refresh(prop)
        # The next holder recomputes from committed reviews only.
        await db.commit()

    logger.info(
        "Review %s on property %s (rating=%d); property rating now %s",
        review.id,
        prop.id,
        review.rating,
        prop.rating,
    )
    return review


async def list_property_reviews(
    db: AsyncSession,
    property_id: uuid.UUID,
    skip: int = 0,
    limit: int = 10,
) -> tuple[list[Review], int]:
    """Reviews for a property, newest first."""
    await get_property_or_404(db, property_id)

    total_result = await db.execute(
        select(func.count()).select_from(Review).where(Review.property_id == property_id)
    )
    total = total_result.scalar_one()

    result = await db.execute(
        select(Review)
        .where(Review.property_id == property_id)
        .order_by(Review.created_at.desc(), Review.id)
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


def _as_float(value) -> float:
    return round(float(value), 2) if value is not None else 0.0


async def get_review_stats(db: AsyncSession, property_id: uuid.UUID) -> dict:
    """Count, mean, 1-5 distribution and per-category means for a property.

    Category means skip reviews that left the category blank (SQL ``AVG``
    ignores NULL) and are 0 only when no review rated that category.
    """
    await get_property_or_404(db, property_id)

    aggregates = [func.count(Review.id), func.avg(Review.rating)]
    aggregates.extend(func.avg(getattr(Review, field)) for field in CATEGORY_FIELDS)
    row = (await db.execute(select(*aggregates).where(Review.property_id == property_id))).one()
    total, average, *category_values = row

    distribution = {str(stars): 0 for stars in range(1, 6)}
    dist_result = await db.execute(
        select(Review.rating, func.count()).where(Review.property_id == property_id).group_by(Review.rating)
    )
    for stars, count in dist_result.all():
        distribution[str(stars)] = count

    return {
        "total_reviews": total,
        "average_rating": _as_float(average),
        "rating_distribution": distribution,
        "category_averages": {
            field: _as_float(value) for field, value in zip(CATEGORY_FIELDS, category_values)
        },
    }


async def can_review(db: AsyncSession, property_id: uuid.UUID, guest_id: uuid.UUID) -> dict:
    """Whether the guest has a completed, unreviewed stay at the property.

    The oldest such booking is returned so the client can attach the review to it.
    """
    await get_property_or_404(db, property_id)
    await sweep_completions(db, guest_id=guest_id)

    result = await db.execute(
        select(Booking.id)
        .outerjoin(Review, Review.booking_id == Booking.id)
        .where(
            Booking.property_id == property_id,
            Booking.guest_id == guest_id,
            Booking.status == "completed",
            Review.id.is_(None),
        )
        .order_by(Booking.check_in, Booking.id)
        .limit(1)
    )
    booking_id = result.scalar_one_or_none()
    if booking_id is not None:
        return {"can_review": True, "booking_id": booking_id, "message": "You can review this stay"}

    completed = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(
            Booking.property_id == property_id,
            Booking.guest_id == guest_id,
            Booking.status == "completed",
        )
    )
    if completed.scalar_one() > 0:
        message = "You have already reviewed this property"
    else:
        message = "You need to complete a booking to review this property"
    return {"can_review": False, "booking_id": None, "message": message}
