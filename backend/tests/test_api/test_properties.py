"""Tests for property endpoints: listings, search, availability and quotes."""

import uuid
from datetime import date, timedelta
from decimal import Decimal

from httpx import AsyncClient

from stayfinder.models.property import Property
from stayfinder.models.user import User


def _property_payload(**overrides) -> dict:
    payload = {
        "title": "Beach Villa",
        "description": "Sea views and a pool.",
        "location": "Bali, Indonesia",
        "latitude": -8.65,
        "longitude": 115.13,
        "base_rate": "150.00",
        "weekly_discount_rate": "120.00",
        "tax_percent": "11",
        "max_guests": 6,
        "amenities": ["pool", "wifi"],
        "cover_photo": "/uploads/villa.jpg",
        "images": ["/uploads/villa-1.jpg"],
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# POST /api/v1/properties
# ---------------------------------------------------------------------------


class TestCreateProperty:
    async def test_host_creates(self, client: AsyncClient, host_user: User, host_headers: dict):
        response = await client.post("/api/v1/properties", json=_property_payload(), headers=host_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["host_id"] == str(host_user.id)
        assert data["title"] == "Beach Villa"
        assert Decimal(data["base_rate"]) == Decimal("150")
        assert Decimal(data["rating"]) == 0
        assert data["is_active"] is True

    async def test_guest_forbidden(self, client: AsyncClient, guest_headers: dict):
        response = await client.post("/api/v1/properties", json=_property_payload(), headers=guest_headers)
        assert response.status_code == 403

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.post("/api/v1/properties", json=_property_payload())
        assert response.status_code in (401, 403)

    async def test_requires_amenities(self, client: AsyncClient, host_headers: dict):
        response = await client.post("/api/v1/properties", json=_property_payload(amenities=[]), headers=host_headers)
        assert response.status_code == 422

    async def test_image_limit(self, client: AsyncClient, host_headers: dict):
        images = [f"/uploads/{i}.jpg" for i in range(11)]
        response = await client.post("/api/v1/properties", json=_property_payload(images=images), headers=host_headers)
        assert response.status_code == 422

    async def test_rejects_non_positive_rate(self, client: AsyncClient, host_headers: dict):
        response = await client.post("/api/v1/properties", json=_property_payload(base_rate="0"), headers=host_headers)
        assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /api/v1/properties
# ---------------------------------------------------------------------------


class TestSearchProperties:
    async def test_public_listing(self, client: AsyncClient, test_property: Property):
        response = await client.get("/api/v1/properties")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["id"] == str(test_property.id)

    async def test_city_filter_is_case_insensitive(
        self, client: AsyncClient, test_property: Property, host_user: User, make_property
    ):
        await make_property(host_user, title="Alpine Chalet", location="Zermatt, Switzerland")
        response = await client.get("/api/v1/properties", params={"city": "goa"})
        titles = [p["title"] for p in response.json()["items"]]
        assert titles == [test_property.title]

    async def test_price_filters(self, client: AsyncClient, test_property: Property, host_user: User, make_property):
        await make_property(host_user, title="Budget Room", base_rate=Decimal("200"))
        await make_property(host_user, title="Penthouse", base_rate=Decimal("5000"))

        response = await client.get("/api/v1/properties", params={"min_price": "500", "max_price": "2000"})
        titles = [p["title"] for p in response.json()["items"]]
        assert titles == [test_property.title]

    async def test_pagination(self, client: AsyncClient, host_user: User, make_property):
        for i in range(3):
            await make_property(host_user, title=f"Flat {i}")
        response = await client.get("/api/v1/properties", params={"skip": 1, "limit": 2})
        data = response.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2

    async def test_delisted_hidden(self, client: AsyncClient, test_property: Property, host_headers: dict):
        await client.delete(f"/api/v1/properties/{test_property.id}", headers=host_headers)
        response = await client.get("/api/v1/properties")
        assert response.json()["total"] == 0


# ---------------------------------------------------------------------------
# GET /mine, GET /{id}
# ---------------------------------------------------------------------------


class TestGetProperty:
    async def test_get_by_id(self, client: AsyncClient, test_property: Property):
        response = await client.get(f"/api/v1/properties/{test_property.id}")
        assert response.status_code == 200
        assert response.json()["location"] == "Goa, India"

    async def test_not_found(self, client: AsyncClient):
        response = await client.get(f"/api/v1/properties/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["detail"] == "Property not found"

    async def test_mine_includes_delisted(
        self, client: AsyncClient, test_property: Property, host_user: User, make_property, host_headers: dict
    ):
        await make_property(host_user, title="Old Listing", is_active=False)
        response = await client.get("/api/v1/properties/mine", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["total"] == 2


# ---------------------------------------------------------------------------
# PUT / DELETE
# ---------------------------------------------------------------------------


class TestUpdateProperty:
    async def test_owner_updates(self, client: AsyncClient, test_property: Property, host_headers: dict):
        response = await client.put(
            f"/api/v1/properties/{test_property.id}",
            json={"title": "Renovated Cottage", "base_rate": "1200"},
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Renovated Cottage"
        assert Decimal(data["base_rate"]) == Decimal("1200")
        assert data["location"] == "Goa, India"

    async def test_rating_not_writable(self, client: AsyncClient, test_property: Property, host_headers: dict):
        response = await client.put(
            f"/api/v1/properties/{test_property.id}",
            json={"rating": "5.00"},
            headers=host_headers,
        )
        assert response.status_code == 200
        assert Decimal(response.json()["rating"]) == 0

    async def test_other_host_forbidden(self, client: AsyncClient, test_property: Property, make_user, headers_for):
        rival = await make_user(role="host", name="Rival Host")
        response = await client.put(
            f"/api/v1/properties/{test_property.id}",
            json={"title": "Hijacked"},
            headers=headers_for(rival),
        )
        assert response.status_code == 403


class TestDeleteProperty:
    async def test_soft_delete(self, client: AsyncClient, test_property: Property, host_headers: dict):
        response = await client.delete(f"/api/v1/properties/{test_property.id}", headers=host_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Property removed"

        detail = await client.get(f"/api/v1/properties/{test_property.id}", headers=host_headers)
        assert detail.status_code == 200
        assert detail.json()["is_active"] is False

    async def test_removed_listing_hidden_from_others(
        self, client: AsyncClient, test_property: Property, host_headers: dict, guest_headers: dict
    ):
        await client.delete(f"/api/v1/properties/{test_property.id}", headers=host_headers)

        anonymous = await client.get(f"/api/v1/properties/{test_property.id}")
        assert anonymous.status_code == 404
        as_guest = await client.get(f"/api/v1/properties/{test_property.id}", headers=guest_headers)
        assert as_guest.status_code == 404

    async def test_guest_forbidden(self, client: AsyncClient, test_property: Property, guest_headers: dict):
        response = await client.delete(f"/api/v1/properties/{test_property.id}", headers=guest_headers)
        assert response.status_code == 403

    async def test_not_found(self, client: AsyncClient, host_headers: dict):
        response = await client.delete(f"/api/v1/properties/{uuid.uuid4()}", headers=host_headers)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Availability and quote
# ---------------------------------------------------------------------------


class TestAvailabilityEndpoint:
    async def test_free_dates(self, client: AsyncClient, test_property: Property):
        check_in = date.today() + timedelta(days=30)
        response = await client.post(
            f"/api/v1/properties/{test_property.id}/availability",
            json={"check_in": check_in.isoformat(), "check_out": (check_in + timedelta(days=3)).isoformat()},
        )
        assert response.status_code == 200
        assert response.json()["available"] is True

    async def test_booked_dates(
        self, client: AsyncClient, test_property: Property, guest_headers: dict, guest_details: dict
    ):
        check_in = date.today() + timedelta(days=30)
        check_out = check_in + timedelta(days=5)
        booked = await client.post(
            "/api/v1/bookings",
            json={
                "property_id": str(test_property.id),
                "check_in": check_in.isoformat(),
                "check_out": check_out.isoformat(),
                "guest_details": guest_details,
            },
            headers=guest_headers,
        )
        assert booked.status_code == 201

        response = await client.post(
            f"/api/v1/properties/{test_property.id}/availability",
            json={
                "check_in": (check_in + timedelta(days=2)).isoformat(),
                "check_out": (check_out + timedelta(days=2)).isoformat(),
            },
        )
        assert response.json()["available"] is False

    async def test_reversed_range(self, client: AsyncClient, test_property: Property):
        response = await client.post(
            f"/api/v1/properties/{test_property.id}/availability",
            json={"check_in": "2024-01-15", "check_out": "2024-01-10"},
        )
        assert response.status_code == 422

    async def test_unknown_property(self, client: AsyncClient):
        response = await client.post(
            f"/api/v1/properties/{uuid.uuid4()}/availability",
            json={"check_in": "2024-01-10", "check_out": "2024-01-15"},
        )
        assert response.status_code == 404


class TestQuoteEndpoint:
    async def test_itemised_quote(self, client: AsyncClient, test_property: Property):
        response = await client.post(
            f"/api/v1/properties/{test_property.id}/quote",
            json={"check_in": "2024-01-01", "check_out": "2024-01-11"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["nights"] == 10
        assert data["standard_nights"] == 7
        assert data["discounted_nights"] == 3
        assert Decimal(data["subtotal"]) == Decimal("9400")
        assert Decimal(data["tax"]) == Decimal("940")
        assert Decimal(data["total"]) == Decimal("10340")
