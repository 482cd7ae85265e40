"""Pydantic models for streak and challenge endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ecotrack.db.models import Challenge, UserChallenge


# --- Streak ---


class StreakResponse(BaseModel):
    streak: int
    best_streak: int


# --- Challenges ---


class ChallengeResponse(BaseModel):
    id: int
    title: str
    description: str
    difficulty: str
    points: int
    category: str
    target_value: int | None = None
    duration_days: int

    @classmethod
    def of(cls, challenge: Challenge) -> ChallengeResponse:
        return cls(
            id=challenge.id,
            title=challenge.title,
            description=challenge.description,
            difficulty=challenge.difficulty,
            points=challenge.points,
            category=challenge.category,
            target_value=challenge.target_value,
            duration_days=challenge.duration_days,
        )


class AvailableChallengesResponse(BaseModel):
    challenges: list[ChallengeResponse]


class UserChallengeResponse(BaseModel):
    """A started challenge with its catalogue fields."""

    user_challenge_id: int
    challenge_id: int
    title: str
    description: str
    difficulty: str
    points: int
    category: str
    target_value: int | None = None
    duration_days: int
    status: str
    progress: int
    points_earned: int
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def of(cls, user_challenge: UserChallenge, challenge: Challenge) -> UserChallengeResponse:
        return cls(
            user_challenge_id=user_challenge.id,
            challenge_id=challenge.id,
            title=challenge.title,
            description=challenge.description,
            difficulty=challenge.difficulty,
            points=challenge.points,
            category=challenge.category,
            target_value=challenge.target_value,
            duration_days=challenge.duration_days,
            status=user_challenge.status,
            progress=user_challenge.progress,
            points_earned=user_challenge.points_earned,
            started_at=user_challenge.started_at,
            completed_at=user_challenge.completed_at,
        )


class UserChallengesResponse(BaseModel):
    challenges: list[UserChallengeResponse]


class ChallengeProgressRequest(BaseModel):
    progress: int = Field(..., ge=0)


class ChallengeCompleteResponse(BaseModel):
    message: str = "Challenge completed"
    points_earned: int
    xp_earned: int


# --- Levels ---


class LevelEntry(BaseModel):
    level: int
    title: str
    xp_required: int
    cumulative: int


class AllLevelsResponse(BaseModel):
    levels: list[LevelEntry]


class LevelResponse(BaseModel):
    xp: int
    level: int
    title: str
    xp_into_level: int
    xp_for_level: int
    next_level: int
    next_title: str
