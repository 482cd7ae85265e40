"""API tests for friends, leaderboard and user directory endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.fixture
def friend(user):
    return user


class TestFriendsApi:

    @pytest.mark.asyncio
    async def test_add_list_remove(self, authed_client: AsyncClient, friend):
        added = await authed_client.post("/api/v1/user/friends/add", json={"friend_id": friend.id})
        assert added.status_code == 200
        assert added.json()["message"] == "Friend added successfully"

        again = await authed_client.post("/api/v1/user/friends/add", json={"friend_id": friend.id})
        assert again.json()["message"] == "Already friends"

        friends = (await authed_client.get("/api/v1/user/friends")).json()["friends"]
        assert [f["username"] for f in friends] == ["alex"]

        removed = await authed_client.delete(f"/api/v1/user/friends/{friend.id}")
        assert removed.status_code == 200
        assert (await authed_client.get("/api/v1/user/friends")).json()["friends"] == []

    @pytest.mark.asyncio
    async def test_add_self(self, authed_client: AsyncClient, registered_user: dict):
        response = await authed_client.post(
            "/api/v1/user/friends/add", json={"friend_id": registered_user["user_id"]}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot add yourself as a friend"

    @pytest.mark.asyncio
    async def test_add_unknown(self, authed_client: AsyncClient):
        response = await authed_client.post("/api/v1/user/friends/add", json={"friend_id": 99999})

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"


class TestLeaderboardApi:

    @pytest.mark.asyncio
    async def test_global_leaderboard(self, authed_client: AsyncClient, friend, auth_header):
        await authed_client.patch("/api/v1/user/progress", json={"points": 40})

        board = (await authed_client.get("/api/v1/user/leaderboard")).json()["leaderboard"]

        assert [row["username"] for row in board] == ["sam", "alex"]
        assert [row["rank"] for row in board] == [1, 2]

        rank = (await authed_client.get("/api/v1/user/leaderboard/rank", headers=auth_header(friend.id))).json()
        assert rank["rank"] == 2
        assert rank["total"] == 2

    @pytest.mark.asyncio
    async def test_friends_leaderboard(self, authed_client: AsyncClient, friend):
        await authed_client.post("/api/v1/user/friends/add", json={"friend_id": friend.id})

        board = (await authed_client.get("/api/v1/user/leaderboard/friends")).json()["leaderboard"]

        assert {row["username"] for row in board} == {"sam", "alex"}
        assert all(row["completed_tasks"] == 0 for row in board)

    @pytest.mark.asyncio
    async def test_leaderboard_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/user/leaderboard")
        assert response.status_code == 401


class TestUserDirectoryApi:

    @pytest.mark.asyncio
    async def test_search_then_add(self, authed_client: AsyncClient, friend):
        found = await authed_client.get("/api/v1/users/search", params={"query": "ale"})

        assert found.status_code == 200
        users = found.json()["users"]
        assert [u["username"] for u in users] == ["alex"]
        assert users[0]["is_friend"] is False

        await authed_client.post("/api/v1/user/friends/add", json={"friend_id": users[0]["id"]})
        again = (await authed_client.get("/api/v1/users/search", params={"query": "ale"})).json()["users"]
        assert again[0]["is_friend"] is True

    @pytest.mark.asyncio
    async def test_search_excludes_caller(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/users/search", params={"query": "sam"})
        assert response.json()["users"] == []

    @pytest.mark.asyncio
    async def test_short_query(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/users/search", params={"query": "a"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Search query must be at least 2 characters"

    @pytest.mark.asyncio
    async def test_public_profile(self, authed_client: AsyncClient, friend):
        response = await authed_client.get(f"/api/v1/users/{friend.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "alex"
        assert data["level"] == 1
        assert data["seeds"] == 0
        assert data["streak"] == 0
        assert data["ecobuddy"]["name"] == "EcoBuddy"
        assert data["achievements"] == []
        assert "email" not in data

    @pytest.mark.asyncio
    async def test_unknown_profile(self, authed_client: AsyncClient):
        response = await authed_client.get("/api/v1/users/99999")

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: AsyncClient):
        response = await client.get("/api/v1/users/search", params={"query": "alex"})
        assert response.status_code == 401
