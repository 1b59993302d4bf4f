"""Availability checks — does a date range overlap an active booking?

Ranges are closed-open: a stay occupies ``[check_in, check_out)``, so a guest
checking out on the 15th and another checking in on the 15th do not clash.
Only ``pending`` and ``confirmed`` bookings hold dates.
"""

import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.exceptions import InvalidRangeError, NotFoundError
from stayfinder.models.booking import BLOCKING_STATUSES, Booking
from stayfinder.models.property import Property


def validate_range(check_in: date, check_out: date) -> None:
    if check_out <= check_in:
        raise InvalidRangeError("Check-out date must be after check-in date")


async def get_property_or_404(
    db: AsyncSession,
    property_id: uuid.UUID,
    *,
    for_update: bool = False,
) -> Property:
    """Load a property, optionally taking a row lock for the current transaction."""
    query = select(Property).where(Property.id == property_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFoundError("Property not found")
    return prop


async def find_conflicting_bookings(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
) -> list[Booking]:
    """Return active bookings on the property that overlap ``[check_in, check_out)``."""
    result = await db.execute(
        select(Booking).where(
            Booking.property_id == property_id,
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.check_in < check_out,
            Booking.check_out > check_in,
        )
    )
    return list(result.scalars().all())


async def is_available(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: date,
    check_out: date,
) -> bool:
    """True iff no pending or confirmed booking overlaps the requested range.

    Raises:
        NotFoundError: the property does not exist.
        InvalidRangeError: ``check_out`` is not after ``check_in``.
    """
    validate_range(check_in, check_out)
    await get_property_or_404(db, property_id)
    conflicts = await find_conflicting_bookings(db, property_id, check_in, check_out)
    return not conflicts
