"""Seed the database with StayFinder sample listings, stays and reviews.

Creates one demo host with four listings, three demo guests, bookings in
every status (past stays are inserted as ``confirmed`` and completed by the
sweep, just like real data) and reviews for some of the finished stays.

Run from the ``backend`` directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, or_, select

from stayfinder.auth.passwords import hash_password
from stayfinder.database import async_session_factory, engine
from stayfinder.models.booking import Booking
from stayfinder.models.favorite import Favorite
from stayfinder.models.property import Property
from stayfinder.models.review import Review
from stayfinder.models.user import User
from stayfinder.services.booking_service import ensure_no_overlap, sweep_completions
from stayfinder.services.pricing import compute_total, count_nights
from stayfinder.services.review_service import recompute_property_rating

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_PASSWORD = "demo1234"

DEMO_HOST = {"email": "host@stayfinder.dev", "name": "Priya Host", "phone": "+919800000001"}

DEMO_GUESTS = [
    {"email": "guest@stayfinder.dev", "name": "Arjun Mehta", "phone": "+919800000002"},
    {"email": "emma@stayfinder.dev", "name": "Emma Thompson", "phone": "+447700900123"},
    {"email": "kenji@stayfinder.dev", "name": "Kenji Sato", "phone": "+819012345678"},
]

PROPERTIES = [
    {
        "title": "Palm Grove Beach Cottage",
        "description": (
            "A two-bedroom cottage a short walk from Palolem beach, with a shaded "
            "verandah, outdoor shower and a kitchen stocked for long stays."
        ),
        "location": "Palolem, Goa",
        "latitude": 15.0100,
        "longitude": 74.0232,
        "base_rate": Decimal("4500.00"),
        "weekly_discount_rate": Decimal("3800.00"),
        "tax_percent": Decimal("12.00"),
        "max_guests": 4,
        "amenities": ["wifi", "kitchen", "ac", "beach_access", "parking"],
        "cover_photo": "/uploads/palm-grove-cover.jpg",
        "images": ["/uploads/palm-grove-1.jpg", "/uploads/palm-grove-2.jpg"],
    },
    {
        "title": "Old Town Heritage Haveli",
        "description": (
            "Restored 19th-century haveli with a rooftop terrace overlooking the "
            "fort. Three bedrooms around an open courtyard."
        ),
        "location": "Jaipur, Rajasthan",
        "latitude": 26.9239,
        "longitude": 75.8267,
        "base_rate": Decimal("7200.00"),
        "weekly_discount_rate": Decimal("6000.00"),
        "tax_percent": Decimal("18.00"),
        "max_guests": 6,
        "amenities": ["wifi", "ac", "rooftop", "breakfast"],
        "cover_photo": "/uploads/haveli-cover.jpg",
        "images": ["/uploads/haveli-1.jpg"],
    },
    {
        "title": "Tea Estate Hill Cabin",
        "description": (
            "A timber cabin among tea gardens with a wood stove and valley views. "
            "Good base for treks; the last stretch of road is unpaved."
        ),
        "location": "Munnar, Kerala",
        "latitude": 10.0889,
        "longitude": 77.0595,
        "base_rate": Decimal("3200.00"),
        "weekly_discount_rate": Decimal("2500.00"),
        "tax_percent": Decimal("12.00"),
        "max_guests": 2,
        "amenities": ["fireplace", "mountain_view", "parking"],
        "cover_photo": "/uploads/tea-cabin-cover.jpg",
        "images": [],
    },
    {
        "title": "Bandra Sea-Facing Studio",
        "description": "Compact studio on the promenade, walking distance to cafes and the sea link.",
        "location": "Mumbai, Maharashtra",
        "latitude": 19.0596,
        "longitude": 72.8295,
        "base_rate": Decimal("5600.00"),
        "weekly_discount_rate": Decimal("5000.00"),
        "tax_percent": Decimal("18.00"),
        "max_guests": 2,
        "amenities": ["wifi", "ac", "workspace", "elevator"],
        "cover_photo": "/uploads/bandra-cover.jpg",
        "images": ["/uploads/bandra-1.jpg", "/uploads/bandra-2.jpg", "/uploads/bandra-3.jpg"],
    },
]


def _build_bookings(properties: dict[str, Property], guests: list[User], today: date) -> list[dict]:
    """Return booking definitions relative to *today*."""
    arjun, emma, kenji = guests
    p = properties

    return [
        # --- Palm Grove Beach Cottage ---
        # Past: finished stay, reviewed
        {
            "property": p["Palm Grove Beach Cottage"],
            "guest": arjun,
            "check_in": today - timedelta(days=40),
            "check_out": today - timedelta(days=30),
            "num_guests": 2,
            "status": "confirmed",
            "review": {"rating": 5, "comment": "Wonderful cottage, steps from the sand.", "cleanliness": 5},
        },
        # Past: finished stay, reviewed
        {
            "property": p["Palm Grove Beach Cottage"],
            "guest": emma,
            "check_in": today - timedelta(days=20),
            "check_out": today - timedelta(days=15),
            "num_guests": 2,
            "status": "confirmed",
            "review": {"rating": 4, "comment": "Lovely spot. Wifi dropped in the evenings.", "value": 4},
        },
        # Future: confirmed
        {
            "property": p["Palm Grove Beach Cottage"],
            "guest": kenji,
            "check_in": today + timedelta(days=10),
            "check_out": today + timedelta(days=14),
            "num_guests": 1,
            "status": "confirmed",
        },
        # Future: pending
        {
            "property": p["Palm Grove Beach Cottage"],
            "guest": arjun,
            "check_in": today + timedelta(days=30),
            "check_out": today + timedelta(days=39),
            "num_guests": 3,
            "status": "pending",
            "special_requests": "Travelling with a toddler, is a cot available?",
        },
        # --- Old Town Heritage Haveli ---
        # Past: finished stay, not yet reviewed
        {
            "property": p["Old Town Heritage Haveli"],
            "guest": kenji,
            "check_in": today - timedelta(days=12),
            "check_out": today - timedelta(days=8),
            "num_guests": 2,
            "status": "confirmed",
        },
        # Future: cancelled
        {
            "property": p["Old Town Heritage Haveli"],
            "guest": emma,
            "check_in": today + timedelta(days=5),
            "check_out": today + timedelta(days=8),
            "num_guests": 4,
            "status": "cancelled",
        },
        # Future: pending on the dates the cancellation freed
        {
            "property": p["Old Town Heritage Haveli"],
            "guest": arjun,
            "check_in": today + timedelta(days=5),
            "check_out": today + timedelta(days=9),
            "num_guests": 5,
            "status": "pending",
        },
        # --- Tea Estate Hill Cabin ---
        # Current: confirmed, checks out in two days
        {
            "property": p["Tea Estate Hill Cabin"],
            "guest": emma,
            "check_in": today - timedelta(days=3),
            "check_out": today + timedelta(days=2),
            "num_guests": 2,
            "status": "confirmed",
            "special_requests": "Arriving late, around 11pm",
        },
        # Past: finished stay, reviewed
        {
            "property": p["Tea Estate Hill Cabin"],
            "guest": arjun,
            "check_in": today - timedelta(days=60),
            "check_out": today - timedelta(days=52),
            "num_guests": 2,
            "status": "confirmed",
            "review": {"rating": 4, "comment": "Cold nights, warm cabin. Bring boots.", "location": 5},
        },
    ]


async def _delete_demo_users(session) -> None:
    emails = [DEMO_HOST["email"], *(g["email"] for g in DEMO_GUESTS)]
    result = await session.execute(select(User.id).where(User.email.in_(emails)))
    user_ids = list(result.scalars().all())
    if not user_ids:
        return

    print("⚠️  Demo users already exist. Deleting and re-seeding...")
    property_ids = select(Property.id).where(Property.host_id.in_(user_ids))
    await session.execute(
        delete(Review).where(or_(Review.property_id.in_(property_ids), Review.guest_id.in_(user_ids)))
    )
    await session.execute(
        delete(Favorite).where(or_(Favorite.property_id.in_(property_ids), Favorite.user_id.in_(user_ids)))
    )
    await session.execute(
        delete(Booking).where(or_(Booking.property_id.in_(property_ids), Booking.guest_id.in_(user_ids)))
    )
    await session.execute(delete(Property).where(Property.host_id.in_(user_ids)))
    await session.execute(delete(User).where(User.id.in_(user_ids)))
    await session.flush()


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with StayFinder sample data.

    Idempotent: existing demo users and everything attached to them are
    deleted first.
    """
    async with async_session_factory() as session:
        await _delete_demo_users(session)

        # ------------------------------------------------------------------
        # 1. Users
        # ------------------------------------------------------------------
        host = User(hashed_password=hash_password(DEMO_PASSWORD), role="host", **DEMO_HOST)
        session.add(host)
        guests = []
        for guest_data in DEMO_GUESTS:
            guest = User(hashed_password=hash_password(DEMO_PASSWORD), role="guest", **guest_data)
            session.add(guest)
            guests.append(guest)
        await session.flush()

        print(f"✅ Created host {host.email} and {len(guests)} guests")

        # ------------------------------------------------------------------
        # 2. Properties
        # ------------------------------------------------------------------
        created_properties: dict[str, Property] = {}
        for prop_data in PROPERTIES:
            prop = Property(host_id=host.id, **prop_data)
            session.add(prop)
            await session.flush()
            created_properties[prop.title] = prop
            print(f"   🏠 {prop.title} ({prop.location}) ₹{prop.base_rate}/night")

        # ------------------------------------------------------------------
        # 3. Bookings
        # ------------------------------------------------------------------
        today = date.today()
        pending_reviews: list[tuple[Booking, dict]] = []
        for bdata in _build_bookings(created_properties, guests, today):
            prop: Property = bdata["property"]
            guest: User = bdata["guest"]
            nights = count_nights(bdata["check_in"], bdata["check_out"])

            booking = Booking(
                property_id=prop.id,
                guest_id=guest.id,
                host_id=host.id,
                check_in=bdata["check_in"],
                check_out=bdata["check_out"],
                num_guests=bdata["num_guests"],
                total_price=compute_total(prop.base_rate, prop.weekly_discount_rate, prop.tax_percent, nights),
                status=bdata["status"],
                payment_status="completed" if bdata["status"] == "confirmed" else "pending",
                special_requests=bdata.get("special_requests"),
                guest_name=guest.name,
                guest_email=guest.email,
                guest_phone=guest.phone,
            )
            session.add(booking)
            if "review" in bdata:
                pending_reviews.append((booking, bdata["review"]))
        await session.flush()

        for prop in created_properties.values():
            await ensure_no_overlap(session, prop.id)

        completed = await sweep_completions(session, today)
        print(f"✅ Created bookings ({len(completed)} past stays marked completed)")

        # ------------------------------------------------------------------
        # 4. Reviews and ratings
        # ------------------------------------------------------------------
        for booking, review_data in pending_reviews:
            session.add(
                Review(
                    property_id=booking.property_id,
                    guest_id=booking.guest_id,
                    host_id=booking.host_id,
                    booking_id=booking.id,
                    is_verified=True,
                    **review_data,
                )
            )
        await session.flush()

        for prop in created_properties.values():
            prop.rating = await recompute_property_rating(session, prop.id)
        await session.flush()

        # ------------------------------------------------------------------
        # 5. Favorites
        # ------------------------------------------------------------------
        arjun = guests[0]
        for title in ("Old Town Heritage Haveli", "Bandra Sea-Facing Studio"):
            session.add(Favorite(user_id=arjun.id, property_id=created_properties[title].id))

        await session.commit()

        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Host:        {DEMO_HOST['email']} / {DEMO_PASSWORD}")
        print(f"   Guests:      {', '.join(g['email'] for g in DEMO_GUESTS)} / {DEMO_PASSWORD}")
        print(f"   Properties:  {len(created_properties)}")
        print(f"   Reviews:     {len(pending_reviews)}")
        for prop in created_properties.values():
            print(f"      {prop.title}: rating {prop.rating}")
        print("=" * 60)
        print("🎉 Done! You can now log in at /api/v1/auth/login")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
