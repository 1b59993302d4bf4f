"""Booking ledger — creation, status transitions and the completion sweep.

Status machine::

    pending ──host──▶ confirmed ──(check-out reached)──▶ completed
       │                  │
       └──guest/host──▶ cancelled ◀──guest/host──┘

``completed`` and ``cancelled`` are terminal. Completion is never requested
by a user; ``sweep_completions`` applies it once the check-out date arrives.

Creation is a check-then-insert sequence, so it runs under a per-property
guard: an in-process ``asyncio.Lock`` keyed by property id, plus a
``SELECT ... FOR UPDATE`` on the property row that makes creators in other
processes wait for the holder's transaction to commit. The booking is
committed inside the guard; a creator that reads after release always sees it.
"""

import logging
import uuid
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.config import settings
from stayfinder.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from stayfinder.models.booking import Booking
from stayfinder.models.user import User
from stayfinder.schemas.booking import BookingCreate
from stayfinder.services.availability import (
    find_conflicting_bookings,
    get_property_or_404,
    validate_range,
)
from stayfinder.services.locks import property_locks
from stayfinder.services.pricing import compute_total, count_nights

logger = logging.getLogger(__name__)

# (from, to) -> roles allowed to make the move
_TRANSITIONS: dict[tuple[str, str], frozenset[str]] = {
    ("pending", "confirmed"): frozenset({"host"}),
    ("pending", "cancelled"): frozenset({"guest", "host"}),
    ("confirmed", "cancelled"): frozenset({"guest", "host"}),
}


def _require_guest_details(data: BookingCreate) -> None:
    details = data.guest_details
    missing = [name for name in ("name", "email", "phone") if not getattr(details, name, "").strip()]
    if missing:
        raise InvalidInputError(f"Guest details incomplete: missing {', '.join(missing)}")


def _actor_relation(booking: Booking, actor: User) -> str | None:
    """Return "host" or "guest" for the actor's relation to the booking, else None."""
    if booking.host_id == actor.id:
        return "host"
    if booking.guest_id == actor.id:
        return "guest"
    return None


async def create_booking(db: AsyncSession, guest: User, data: BookingCreate) -> Booking:
    """Reserve a property for ``guest``.

    Raises:
        InvalidInputError: guest contact details incomplete, or too many guests.
        InvalidRangeError: check-out not after check-in.
        NotFoundError: the property does not exist or is no longer listed.
        ForbiddenError: a host booking their own listing.
        ConflictError: the dates overlap an active booking, or the property
            guard could not be taken in time.
    """
    _require_guest_details(data)
    validate_range(data.check_in, data.check_out)

    async with property_locks.hold(
        data.property_id,
        timeout=settings.booking_lock_timeout_seconds,
        attempts=settings.booking_lock_retries,
    ):
        prop = await get_property_or_404(db, data.property_id, for_update=True)
        if not prop.is_active:
            raise NotFoundError("Property not found")
        if prop.host_id == guest.id:
            raise ForbiddenError("Hosts cannot book their own property")
        if prop.max_guests is not None and data.num_guests > prop.max_guests:
            raise InvalidInputError(f"This property accommodates at most {prop.max_guests} guests")

        conflicts = await find_conflicting_bookings(db, prop.id, data.check_in, data.check_out)
        if conflicts:
            logger.info(
                "Rejected booking for property %s %s..%s: overlaps %d booking(s)",
                prop.id,
                data.check_in,
                data.check_out,
                len(conflicts),
            )
            raise ConflictError("Property is not available for these dates")

        nights = count_nights(data.check_in, data.check_out)
        details = data.guest_details
        booking = Booking(
            property_id=prop.id,
            guest_id=guest.id,
            host_id=prop.host_id,
            check_in=data.check_in,
            check_out=data.check_out,
            num_guests=data.num_guests,
            total_price=compute_total(prop.base_rate, prop.weekly_discount_rate, prop.tax_percent, nights),
            status="pending",
            payment_status="pending",
            special_requests=data.special_requests,
            guest_name=details.name.strip(),
            guest_email=str(details.email),
            guest_phone=details.phone.strip(),
            guest_address=details.address,
            guest_id_type="Government ID" if details.gov_id else None,
            guest_id_number=details.gov_id,
        )
        db.add(booking)
        await db.flush()
        await db.refresh(booking)
        # Other sessions only see committed rows: commit while still holding the guard.
        await db.commit()

    logger.info(
        "Booking %s created: property=%s guest=%s %s..%s total=%s",
        booking.id,
        booking.property_id,
        booking.guest_id,
        booking.check_in,
        booking.check_out,
        booking.total_price,
    )
    return booking


async def get_booking(db: AsyncSession, booking_id: uuid.UUID, actor: User) -> Booking:
    """Fetch a booking visible to ``actor`` (its guest or its host)."""
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")
    if _actor_relation(booking, actor) is None:
        raise ForbiddenError("Not authorized to view this booking")
    return booking


async def transition_status(
    db: AsyncSession,
    booking_id: uuid.UUID,
    actor: User,
    new_status: str,
    *,
    today: date | None = None,
) -> Booking:
    """Move a booking to ``new_status`` on behalf of its guest or host.

    A confirmed booking whose check-out has arrived is completed first, so
    it can no longer be cancelled.

    Raises:
        NotFoundError: the booking does not exist.
        ForbiddenError: the actor is neither guest nor host, or the actor's
            side may not make this move (only hosts confirm).
        InvalidTransitionError: the move is not in the state machine.
    """
    result = await db.execute(select(Booking).where(Booking.id == booking_id).with_for_update())
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking not found")

    relation = _actor_relation(booking, actor)
    if relation is None:
        raise ForbiddenError("Not authorized to update this booking")

    today = today or date.today()
    if booking.status == "confirmed" and booking.check_out <= today:
        booking.status = "completed"

    allowed = _TRANSITIONS.get((booking.status, new_status))
    if allowed is None:
        raise InvalidTransitionError(f"Cannot change booking status from {booking.status} to {new_status}")
    if relation not in allowed:
        raise ForbiddenError(f"Only the {' or '.join(sorted(allowed))} can set a booking to {new_status}")

    old_status = booking.status
    booking.status = new_status
    await db.flush()
    await db.refresh(booking)
    logger.info("Booking %s: %s -> %s by %s %s", booking.id, old_status, new_status, relation, actor.id)
    return booking


async def sweep_completions(
    db: AsyncSession,
    today: date | None = None,
    *,
    guest_id: uuid.UUID | None = None,
    host_id: uuid.UUID | None = None,
) -> list[Booking]:
    """Complete every confirmed booking whose check-out date has arrived.

    Idempotent: a second run over the same data finds nothing to do. The
    optional filters narrow the sweep to one guest's or one host's bookings
    for the lazy sweep run before listing.
    """
    today = today or date.today()
    query = select(Booking).where(Booking.status == "confirmed", Booking.check_out <= today)
    if guest_id is not None:
        query = query.where(Booking.guest_id == guest_id)
    if host_id is not None:
        query = query.where(Booking.host_id == host_id)

    result = await db.execute(query.with_for_update())
    due = list(result.scalars().all())
    if not due:
        return []

    for booking in due:
        booking.status = "completed"
    await db.flush()
    for booking in due:
        await db.refresh(booking)

    logger.info("Completion sweep marked %d booking(s) completed", len(due))
    return due


async def _list_bookings(
    db: AsyncSession,
    owner_filter,
    status_filter: str | None,
    skip: int,
    limit: int,
) -> tuple[list[Booking], int]:
    filters = [owner_filter]
    if status_filter is not None:
        filters.append(Booking.status == status_filter)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*filters))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Booking).where(*filters).order_by(Booking.created_at.desc(), Booking.id).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def list_guest_bookings(
    db: AsyncSession,
    guest: User,
    status_filter: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """The guest's own bookings, newest first, after a lazy completion sweep."""
    await sweep_completions(db, guest_id=guest.id)
    return await _list_bookings(db, Booking.guest_id == guest.id, status_filter, skip, limit)


async def list_host_bookings(
    db: AsyncSession,
    host: User,
    status_filter: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Bookings on the host's properties, newest first, after a lazy completion sweep."""
    await sweep_completions(db, host_id=host.id)
    return await _list_bookings(db, Booking.host_id == host.id, status_filter, skip, limit)


async def ensure_no_overlap(db: AsyncSession, property_id: uuid.UUID) -> None:
    """Raise ``ConflictError`` if any two non-cancelled bookings on the property overlap.

    Used by the seed script and tests to assert the ledger invariant.
    """
    result = await db.execute(
        select(Booking)
        .where(Booking.property_id == property_id, Booking.status != "cancelled")
        .order_by(Booking.check_in)
    )
    latest: Booking | None = None
    for booking in result.scalars().all():
        if latest is not None and booking.check_in < latest.check_out:
            raise ConflictError(f"Bookings {latest.id} and {booking.id} overlap")
        if latest is None or booking.check_out > latest.check_out:
            latest = booking
