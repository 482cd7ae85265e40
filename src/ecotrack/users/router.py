"""User router: profile, progress, EcoBuddy and energy usage under /api/v1/user."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.dependencies import get_current_user
from ecotrack.database import get_session
from ecotrack.db.models import User
from ecotrack.gamification.schemas import UserChallengeResponse
from ecotrack.users.schemas import (
    AchievementResponse,
    EcoBuddyResponse,
    EcoBuddyUpdateRequest,
    EnergyUsageListResponse,
    EnergyUsageRequest,
    EnergyUsageResponse,
    ProfileResponse,
    ProgressResponse,
    ProgressUpdateRequest,
)
from ecotrack.users.service import (
    get_full_profile,
    list_energy_usage,
    log_energy_usage,
    update_ecobuddy,
    update_progress,
)

router = APIRouter(prefix="/api/v1/user", tags=["User"])


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
async def profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileResponse:
    """Full profile of the authenticated user."""
    data = await get_full_profile(db, user)
    data["ecobuddy"] = EcoBuddyResponse.model_validate(data["ecobuddy"])
    data["achievements"] = [AchievementResponse(**a) for a in data["achievements"]]
    data["challenges"] = [UserChallengeResponse.of(uc, uc.challenge) for uc in data["challenges"]]
    return ProfileResponse(**data)


@router.patch("/progress", response_model=ProgressResponse)
async def patch_progress(
    body: ProgressUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProgressResponse:
    """Update one or more progress counters."""
    try:
        progress = await update_progress(db, user.id, body.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ProgressResponse(**progress)


@router.patch("/ecobuddy", response_model=EcoBuddyResponse)
async def patch_ecobuddy(
    body: EcoBuddyUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EcoBuddyResponse:
    """Rename, dress up or level the EcoBuddy."""
    try:
        buddy = await update_ecobuddy(db, user.id, body.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return EcoBuddyResponse.model_validate(buddy)


# ---------------------------------------------------------------------------
# Energy usage
# ---------------------------------------------------------------------------


@router.post("/energy-usage", response_model=EnergyUsageResponse)
async def post_energy_usage(
    body: EnergyUsageRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EnergyUsageResponse:
    entry = await log_energy_usage(
        db,
        user.id,
        body.date,
        body.category,
        body.usage_kwh,
        body.savings_kwh,
    )
    return EnergyUsageResponse.model_validate(entry)


@router.get("/energy-usage", response_model=EnergyUsageListResponse)
async def get_energy_usage(
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> EnergyUsageListResponse:
    """Logged usage, newest first, optionally limited to a date range."""
    entries = await list_energy_usage(db, user.id, start_date, end_date)
    return EnergyUsageListResponse(energy_usage=[EnergyUsageResponse.model_validate(e) for e in entries])
