"""Gamification API endpoints: streak, challenges and levels."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.dependencies import get_current_user
from ecotrack.database import get_session
from ecotrack.db.models import User, UserProgress
from ecotrack.gamification.challenge_service import (
    complete_challenge,
    get_challenge,
    list_available_challenges,
    list_user_challenges,
    start_challenge,
    update_challenge_progress,
)
from ecotrack.gamification.level_thresholds import LEVEL_THRESHOLDS, compute_level
from ecotrack.gamification.schemas import (
    AllLevelsResponse,
    AvailableChallengesResponse,
    ChallengeCompleteResponse,
    ChallengeProgressRequest,
    ChallengeResponse,
    LevelEntry,
    LevelResponse,
    StreakResponse,
    UserChallengeResponse,
    UserChallengesResponse,
)
from ecotrack.gamification.streak_service import update_streak

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


# ── Streak ──


@router.post("/user/streak/update", response_model=StreakResponse)
async def streak_update(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Record today's visit and return the login streak."""
    result = await update_streak(db, user.id)
    return StreakResponse(streak=result.streak, best_streak=result.best_streak)


# ── Challenges ──


@router.get("/user/challenges/available", response_model=AvailableChallengesResponse)
async def available_challenges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Challenges the user has not started yet."""
    challenges = await list_available_challenges(db, user.id)
    return AvailableChallengesResponse(challenges=[ChallengeResponse.of(c) for c in challenges])


@router.get("/user/challenges", response_model=UserChallengesResponse)
async def my_challenges(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Challenges the user has started or completed."""
    rows = await list_user_challenges(db, user.id)
    return UserChallengesResponse(challenges=[UserChallengeResponse.of(uc, uc.challenge) for uc in rows])


@router.post("/user/challenges/{challenge_id}/start", response_model=UserChallengeResponse, status_code=201)
async def start(
    challenge_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_challenge = await start_challenge(db, user.id, challenge_id)
    challenge = await get_challenge(db, challenge_id)
    return UserChallengeResponse.of(user_challenge, challenge)


@router.patch("/user/challenges/{challenge_id}/progress", response_model=UserChallengeResponse)
async def progress(
    challenge_id: int,
    body: ChallengeProgressRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user_challenge = await update_challenge_progress(db, user.id, challenge_id, body.progress)
    return UserChallengeResponse.of(user_challenge, user_challenge.challenge)


@router.post("/user/challenges/{challenge_id}/complete", response_model=ChallengeCompleteResponse)
async def complete(
    challenge_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Complete an active challenge and credit its points and XP."""
    reward = await complete_challenge(db, user.id, challenge_id)
    return ChallengeCompleteResponse(points_earned=reward.points_earned, xp_earned=reward.xp_earned)


# ── Levels ──


@router.get("/levels", response_model=AllLevelsResponse)
async def all_levels():
    """The level table."""
    return AllLevelsResponse(levels=[LevelEntry(**entry) for entry in LEVEL_THRESHOLDS])


@router.get("/user/level", response_model=LevelResponse)
async def my_level(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Level info derived from the user's XP."""
    result = await db.execute(select(UserProgress.xp).where(UserProgress.user_id == user.id))
    xp = result.scalar_one_or_none() or 0
    return LevelResponse(xp=xp, **compute_level(xp))
