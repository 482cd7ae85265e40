"""
Authentication business logic: signup and email/password login.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, insert, or_, select
from sqlalchemy.exc import IntegrityError

from ecotrack.auth.password import (
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from ecotrack.config import get_settings
from ecotrack.database import commit
from ecotrack.db.models import EcoBuddy, GardenItem, User, UserGardenBackground, UserProgress
from ecotrack.errors import ConflictError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# User queries
# ---------------------------------------------------------------------------


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Fetch a user by email (case-insensitive)."""
    result = await db.execute(select(User).where(func.lower(User.email) == email.lower().strip()))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Signup
# ---------------------------------------------------------------------------


async def register_user(
    db: AsyncSession,
    email: str,
    username: str,
    name: str,
    password: str,
) -> User:
    """
    Create a user with its progress row, EcoBuddy and default garden background.

    All four rows commit together.

    Raises:
        PasswordStrengthError: Password too short or too long.
        ConflictError: Email or username already taken.
    """
    validate_password_strength(password)

    email = email.lower().strip()
    existing = await db.execute(
        select(User.id).where(or_(func.lower(User.email) == email, User.username == username))
    )
    if existing.first() is not None:
        msg = "User already exists"
        raise ConflictError(msg)

    user = User(email=email, username=username, name=name, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        msg = "User already exists"
        raise ConflictError(msg) from exc

    # Core insert: the statement names only the columns every schema has
    await db.execute(insert(UserProgress).values(user_id=user.id, completed_task_ids=[]))
    db.add(EcoBuddy(user_id=user.id, accessories=[]))

    background = await db.execute(
        select(GardenItem.id).where(
            GardenItem.name == get_settings().default_background_name,
            GardenItem.item_type == "background",
        )
    )
    background_id = background.scalar_one_or_none()
    if background_id is not None:
        db.add(UserGardenBackground(user_id=user.id, background_id=background_id))

    await commit(db)
    logger.info("user_created", user_id=user.id, username=username)
    return user


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Authenticate with email + password.

    Raises:
        ValueError: If the credentials are invalid.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        msg = "Invalid credentials"
        raise ValueError(msg)

    if check_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
        await commit(db)

    return user
