"""Tests for favorites endpoints."""

import uuid

from httpx import AsyncClient

from stayfinder.models.property import Property
from stayfinder.models.user import User


class TestFavorites:
    async def test_add_and_list(self, client: AsyncClient, guest_headers: dict, test_property: Property):
        response = await client.post(
            "/api/v1/favorites", json={"property_id": str(test_property.id)}, headers=guest_headers
        )
        assert response.status_code == 201
        assert response.json()["property_id"] == str(test_property.id)

        listed = await client.get("/api/v1/favorites", headers=guest_headers)
        assert listed.status_code == 200
        data = listed.json()
        assert data["count"] == 1
        assert data["items"][0]["title"] == test_property.title

    async def test_duplicate_conflicts(self, client: AsyncClient, guest_headers: dict, test_property: Property):
        body = {"property_id": str(test_property.id)}
        await client.post("/api/v1/favorites", json=body, headers=guest_headers)
        response = await client.post("/api/v1/favorites", json=body, headers=guest_headers)
        assert response.status_code == 409

    async def test_unknown_property(self, client: AsyncClient, guest_headers: dict):
        response = await client.post(
            "/api/v1/favorites", json={"property_id": str(uuid.uuid4())}, headers=guest_headers
        )
        assert response.status_code == 404

    async def test_status(self, client: AsyncClient, guest_headers: dict, test_property: Property):
        before = await client.get(f"/api/v1/favorites/{test_property.id}", headers=guest_headers)
        assert before.json()["is_favorite"] is False

        await client.post("/api/v1/favorites", json={"property_id": str(test_property.id)}, headers=guest_headers)
        after = await client.get(f"/api/v1/favorites/{test_property.id}", headers=guest_headers)
        assert after.json() == {"property_id": str(test_property.id), "is_favorite": True}

    async def test_remove(self, client: AsyncClient, guest_headers: dict, test_property: Property):
        await client.post("/api/v1/favorites", json={"property_id": str(test_property.id)}, headers=guest_headers)

        response = await client.delete(f"/api/v1/favorites/{test_property.id}", headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Removed from favorites"

        listed = await client.get("/api/v1/favorites", headers=guest_headers)
        assert listed.json()["count"] == 0

    async def test_remove_missing(self, client: AsyncClient, guest_headers: dict, test_property: Property):
        response = await client.delete(f"/api/v1/favorites/{test_property.id}", headers=guest_headers)
        assert response.status_code == 404

    async def test_delisted_property_dropped_from_list(
        self,
        client: AsyncClient,
        guest_headers: dict,
        host_headers: dict,
        test_property: Property,
        host_user: User,
        make_property,
    ):
        other = await make_property(host_user, title="Lake House")
        for prop in (test_property, other):
            await client.post("/api/v1/favorites", json={"property_id": str(prop.id)}, headers=guest_headers)

        await client.delete(f"/api/v1/properties/{other.id}", headers=host_headers)

        data = (await client.get("/api/v1/favorites", headers=guest_headers)).json()
        assert data["count"] == 1
        assert data["items"][0]["id"] == str(test_property.id)

    async def test_favorites_are_per_user(
        self, client: AsyncClient, guest_headers: dict, other_guest_headers: dict, test_property: Property
    ):
        await client.post("/api/v1/favorites", json={"property_id": str(test_property.id)}, headers=guest_headers)
        data = (await client.get("/api/v1/favorites", headers=other_guest_headers)).json()
        assert data["count"] == 0

    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/favorites")
        assert response.status_code in (401, 403)
