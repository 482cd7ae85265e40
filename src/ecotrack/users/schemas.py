"""Request/response schemas for /api/v1/user endpoints."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ecotrack.gamification.schemas import UserChallengeResponse


class ProgressResponse(BaseModel):
    level: int
    xp: int
    points: int
    seeds: int
    total_savings: Decimal
    co2_saved: Decimal
    streak: int
    best_streak: int
    last_login_date: dt.datetime | None = None
    completed_task_ids: list[Any] = []


class ProgressUpdateRequest(BaseModel):
    """Partial progress update. Omitted fields are left unchanged."""

    level: int | None = Field(None, ge=1)
    xp: int | None = Field(None, ge=0)
    points: int | None = Field(None, ge=0)
    seeds: int | None = Field(None, ge=0)
    total_savings: Decimal | None = Field(None, ge=0)
    co2_saved: Decimal | None = Field(None, ge=0)
    streak: int | None = Field(None, ge=0)
    best_streak: int | None = Field(None, ge=0)
    completed_task_ids: list[Any] | None = None


class EcoBuddyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    level: int
    accessories: list[Any] = []
    mood: str


class EcoBuddyUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    level: int | None = Field(None, ge=1)
    accessories: list[Any] | None = None
    mood: str | None = Field(None, min_length=1, max_length=20)


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    requirement_type: str
    requirement_value: int
    unlocked_at: dt.datetime | None = None


class ProfileResponse(ProgressResponse):
    """Full profile: user fields, progress, plant health, EcoBuddy and activity."""

    id: int
    email: str
    username: str
    name: str
    created_at: dt.datetime | None = None
    plant_health: int
    last_watered_at: dt.datetime | None = None
    ecobuddy: EcoBuddyResponse
    achievements: list[AchievementResponse]
    challenges: list[UserChallengeResponse]


class EnergyUsageRequest(BaseModel):
    date: dt.date
    category: str = Field(..., min_length=1, max_length=50)
    usage_kwh: Decimal = Field(..., ge=0)
    savings_kwh: Decimal | None = Field(None, ge=0)


class EnergyUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    date: dt.date
    category: str
    usage_kwh: Decimal
    savings_kwh: Decimal


class EnergyUsageListResponse(BaseModel):
    energy_usage: list[EnergyUsageResponse]
