"""Pydantic models for friends, leaderboard and user directory endpoints."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from ecotrack.users.schemas import EcoBuddyResponse


class FriendResponse(BaseModel):
    id: int
    name: str
    username: str
    level: int
    seeds: int
    streak: int
    accessories: list[Any] = []
    mood: str


class FriendsResponse(BaseModel):
    friends: list[FriendResponse]


class AddFriendRequest(BaseModel):
    friend_id: int


class MessageResponse(BaseModel):
    message: str


class LeaderboardEntry(BaseModel):
    rank: int
    id: int
    username: str
    name: str
    points: int
    total_savings: Decimal
    co2_saved: Decimal
    streak: int
    level: int


class LeaderboardResponse(BaseModel):
    leaderboard: list[LeaderboardEntry]


class FriendsLeaderboardEntry(FriendResponse):
    rank: int
    completed_tasks: int


class FriendsLeaderboardResponse(BaseModel):
    leaderboard: list[FriendsLeaderboardEntry]


class RankResponse(BaseModel):
    rank: int
    points: int
    total_savings: Decimal
    streak: int
    total: int


# --- User directory ---


class UserSearchResult(BaseModel):
    id: int
    username: str
    name: str
    level: int
    points: int
    streak: int
    is_friend: bool


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult]


class PublicAchievement(BaseModel):
    name: str
    description: str
    icon: str
    unlocked_at: dt.datetime | None = None


class PublicProfileResponse(BaseModel):
    id: int
    username: str
    name: str
    created_at: dt.datetime | None = None
    level: int
    points: int
    seeds: int
    streak: int
    best_streak: int
    total_savings: Decimal
    co2_saved: Decimal
    is_friend: bool
    ecobuddy: EcoBuddyResponse | None = None
    achievements: list[PublicAchievement] = []
