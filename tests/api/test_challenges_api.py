"""API tests for streak, challenge and level endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


async def _first_available(client: AsyncClient) -> dict:
    response = await client.get("/api/v1/user/challenges/available")
    assert response.status_code == 200
    return response.json()["challenges"][0]


class TestStreakEndpoint:

    @pytest.mark.asyncio
    async def test_update_is_idempotent_within_a_day(self, authed_client: AsyncClient):
        first = await authed_client.post("/api/v1/user/streak/update")
        second = await authed_client.post("/api/v1/user/streak/update")

        assert first.status_code == 200
        assert second.json() == first.json()


class TestChallengeFlow:

    @pytest.mark.asyncio
    async def test_available_catalogue(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/user/challenges/available")

        challenges = response.json()["challenges"]
        assert len(challenges) == 8
        assert challenges[0]["difficulty"] == "Easy"

    @pytest.mark.asyncio
    async def test_start_progress_complete(self, authed_client: AsyncClient):
        challenge = await _first_available(authed_client)
        cid = challenge["id"]

        started = await authed_client.post(f"/api/v1/user/challenges/{cid}/start")
        assert started.status_code == 201
        assert started.json()["status"] == "active"
        assert started.json()["title"] == challenge["title"]

        progressed = await authed_client.patch(f"/api/v1/user/challenges/{cid}/progress", json={"progress": 3})
        assert progressed.status_code == 200
        assert progressed.json()["progress"] == 3

        completed = await authed_client.post(f"/api/v1/user/challenges/{cid}/complete")
        assert completed.status_code == 200
        assert completed.json()["points_earned"] == challenge["points"]
        assert completed.json()["xp_earned"] == challenge["points"] * 2

        mine = (await authed_client.get("/api/v1/user/challenges")).json()["challenges"]
        assert mine[0]["status"] == "completed"
        assert mine[0]["points_earned"] == challenge["points"]

        profile = (await authed_client.get("/api/v1/user/profile")).json()
        assert profile["points"] == challenge["points"]
        assert profile["xp"] == challenge["points"] * 2

    @pytest.mark.asyncio
    async def test_complete_twice(self, authed_client: AsyncClient):
        cid = (await _first_available(authed_client))["id"]
        await authed_client.post(f"/api/v1/user/challenges/{cid}/start")
        await authed_client.post(f"/api/v1/user/challenges/{cid}/complete")

        response = await authed_client.post(f"/api/v1/user/challenges/{cid}/complete")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_start_twice(self, authed_client: AsyncClient):
        cid = (await _first_available(authed_client))["id"]
        await authed_client.post(f"/api/v1/user/challenges/{cid}/start")

        response = await authed_client.post(f"/api/v1/user/challenges/{cid}/start")

        assert response.status_code == 400
        assert response.json()["detail"] == "Challenge already started"

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/v1/user/challenges/99999/start")

        assert response.status_code == 404
        assert response.json()["detail"] == "Challenge not found"

    @pytest.mark.asyncio
    async def test_negative_progress_rejected(self, authed_client: AsyncClient):
        cid = (await _first_available(authed_client))["id"]
        await authed_client.post(f"/api/v1/user/challenges/{cid}/start")

        response = await authed_client.patch(f"/api/v1/user/challenges/{cid}/progress", json={"progress": -1})

        assert response.status_code == 422


class TestLevels:

    @pytest.mark.asyncio
    async def test_level_table_is_public(self, client: AsyncClient):
        response = await client.get("/api/v1/levels")

        assert response.status_code == 200
        levels = response.json()["levels"]
        assert levels[0]["level"] == 1
        assert levels[-1]["level"] == 20

    @pytest.mark.asyncio
    async def test_my_level(self, authed_client: AsyncClient):
        await authed_client.patch("/api/v1/user/progress", json={"xp": 450})

        response = await authed_client.get("/api/v1/user/level")

        data = response.json()
        assert data["xp"] == 450
        assert data["level"] == 3
        assert data["xp_into_level"] == 150
        assert data["next_level"] == 4
