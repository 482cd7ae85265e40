"""Authentication router: all /api/v1/auth/* endpoints."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.dependencies import get_current_user
from ecotrack.auth.jwt import create_access_token
from ecotrack.auth.password import PasswordStrengthError
from ecotrack.auth.schemas import (
    LoginRequest,
    LoginResponse,
    SignupRequest,
    StreakResponse,
    TokenResponse,
    UserResponse,
)
from ecotrack.auth.service import authenticate_user, register_user
from ecotrack.config import get_settings
from ecotrack.database import get_session
from ecotrack.db.models import User
from ecotrack.gamification.streak_service import update_streak

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        name=user.name,
        created_at=user.created_at,
    )


def _expires_in() -> int:
    return get_settings().jwt_access_token_expire_minutes * 60


@router.post("/signup", response_model=TokenResponse, status_code=201)
async def signup(
    body: SignupRequest,
    db: AsyncSession = Depends(get_session),
) -> TokenResponse:
    """Create an account and return an access token."""
    try:
        user = await register_user(db, body.email, body.username, body.name, body.password)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    return TokenResponse(
        token=create_access_token(user.id),
        expires_in=_expires_in(),
        user=_user_response(user),
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_session),
) -> LoginResponse:
    """Log in with email + password. Also records the daily login streak."""
    try:
        user = await authenticate_user(db, body.email, body.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e

    streak = await update_streak(db, user.id)
    logger.info("user_logged_in", user_id=user.id, streak=streak.streak)

    return LoginResponse(
        token=create_access_token(user.id),
        expires_in=_expires_in(),
        user=_user_response(user),
        streak=StreakResponse(streak=streak.streak, best_streak=streak.best_streak),
    )


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated user."""
    return _user_response(user)
