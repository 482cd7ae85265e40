"""API tests for the garden shop, watering and plant health endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _item(client: AsyncClient, name: str) -> dict:
    items = (await client.get("/api/v1/garden/items")).json()["items"]
    return next(i for i in items if i["name"] == name)


class TestCatalogueEndpoint:

    @pytest.mark.asyncio
    async def test_items_filter(self, client: AsyncClient):
        response = await client.get("/api/v1/garden/items", params={"item_type": "plant"})

        assert response.status_code == 200
        items = response.json()["items"]
        assert {i["item_type"] for i in items} == {"plant"}
        assert len(items) == 4

    @pytest.mark.asyncio
    async def test_unknown_filter_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/garden/items", params={"item_type": "tree"})
        assert response.status_code == 422


class TestGardenEndpoints:

    @pytest.mark.asyncio
    async def test_new_garden(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/garden")

        assert response.status_code == 200
        data = response.json()
        assert data["plants"] == []
        assert data["background"]["name"] == "Chill Background"
        assert data["plant_health"]["plant_health"] == 3

    @pytest.mark.asyncio
    async def test_purchase_plant(self, authed_client: AsyncClient):
        await authed_client.patch("/api/v1/user/progress", json={"seeds": 100})
        cactus = await _item(authed_client, "Cactus")

        response = await authed_client.post("/api/v1/garden/purchase", json={"item_id": cactus["id"]})

        assert response.status_code == 200
        assert response.json()["seeds_remaining"] == 60
        plants = (await authed_client.get("/api/v1/garden")).json()["plants"]
        assert [p["name"] for p in plants] == ["Cactus"]

    @pytest.mark.asyncio
    async def test_purchase_without_seeds(self, authed_client: AsyncClient):
        bonsai = await _item(authed_client, "Bonsai")

        response = await authed_client.post("/api/v1/garden/purchase", json={"item_id": bonsai["id"]})

        assert response.status_code == 400
        assert response.json()["detail"] == "Insufficient seeds"

    @pytest.mark.asyncio
    async def test_purchase_unknown_item(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/v1/garden/purchase", json={"item_id": 99999})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_buy_background(self, authed_client: AsyncClient):
        await authed_client.patch("/api/v1/user/progress", json={"seeds": 300})
        night = await _item(authed_client, "Night Sky")

        response = await authed_client.post("/api/v1/garden/purchase", json={"item_id": night["id"]})

        assert response.status_code == 200
        assert (await authed_client.get("/api/v1/garden")).json()["background"]["name"] == "Night Sky"

    @pytest.mark.asyncio
    async def test_health_and_water(self, authed_client: AsyncClient):
        health = await authed_client.get("/api/v1/garden/health")
        assert health.status_code == 200
        assert health.json()["plant_health"] == 3
        assert health.json()["plants_deleted"] is False

        # The garden was created with today's watering
        water = await authed_client.post("/api/v1/garden/water")
        assert water.status_code == 200
        assert water.json()["already_watered"] is True
        assert water.json()["plant_health"] == 3
