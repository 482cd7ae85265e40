"""Profile, progress, EcoBuddy and energy-usage business logic."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import select, update

from ecotrack.database import commit
from ecotrack.day_utils import utc_now
from ecotrack.db.models import Achievement, EcoBuddy, EnergyUsage, User, UserAchievement, UserProgress
from ecotrack.db.schema import ProgressSchema, execute_progress, progress_columns
from ecotrack.errors import NotFoundError
from ecotrack.gamification.challenge_service import list_user_challenges
from ecotrack.gamification.level_thresholds import level_for_xp
from ecotrack.garden.plant_health import check_plant_health

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

PROGRESS_FIELDS = (
    "level",
    "xp",
    "points",
    "seeds",
    "total_savings",
    "co2_saved",
    "streak",
    "best_streak",
    "completed_task_ids",
)


# ---------------------------------------------------------------------------
# Progress
# ---------------------------------------------------------------------------


async def get_progress(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Progress fields for ``user_id``; ``last_login_date`` is None on a legacy schema.

    Raises:
        NotFoundError: The user has no progress row.
    """

    def _read(schema: ProgressSchema):  # noqa: ANN202
        return select(*progress_columns(schema)).where(UserProgress.user_id == user_id)

    result, schema = await execute_progress(db, _read)
    row = result.one_or_none()
    if row is None:
        msg = "Progress not found"
        raise NotFoundError(msg)

    progress = {field: getattr(row, field) for field in PROGRESS_FIELDS}
    progress["completed_task_ids"] = progress["completed_task_ids"] or []
    progress["last_login_date"] = row.last_login_date if schema is ProgressSchema.FULL else None
    return progress


async def update_progress(db: AsyncSession, user_id: int, updates: dict[str, Any]) -> dict[str, Any]:
    """
    Apply a partial progress update.

    Setting ``xp`` without ``level`` recomputes the level from the XP
    thresholds. ``best_streak`` is raised to match ``streak`` when needed.

    Raises:
        ValueError: No fields supplied.
        NotFoundError: The user has no progress row.
    """
    values = {k: v for k, v in updates.items() if k in PROGRESS_FIELDS and v is not None}
    if not values:
        msg = "No fields to update"
        raise ValueError(msg)

    current = await db.execute(
        select(UserProgress.best_streak).where(UserProgress.user_id == user_id)
    )
    best_streak = current.scalar_one_or_none()
    if best_streak is None:
        msg = "Progress not found"
        raise NotFoundError(msg)

    if "xp" in values and "level" not in values:
        values["level"] = level_for_xp(values["xp"])
    if "streak" in values:
        values["best_streak"] = max(values.get("best_streak", best_streak), values["streak"])

    values["updated_at"] = utc_now()
    await db.execute(
        update(UserProgress)
        .where(UserProgress.user_id == user_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await commit(db)
    logger.info("progress_updated", user_id=user_id, fields=sorted(values))
    return await get_progress(db, user_id)


# ---------------------------------------------------------------------------
# EcoBuddy
# ---------------------------------------------------------------------------


async def get_ecobuddy(db: AsyncSession, user_id: int) -> EcoBuddy:
    result = await db.execute(select(EcoBuddy).where(EcoBuddy.user_id == user_id))
    buddy = result.scalar_one_or_none()
    if buddy is None:
        msg = "EcoBuddy not found"
        raise NotFoundError(msg)
    return buddy


async def update_ecobuddy(db: AsyncSession, user_id: int, updates: dict[str, Any]) -> EcoBuddy:
    """
    Apply a partial EcoBuddy update (name, level, accessories, mood).

    Raises:
        ValueError: No fields supplied.
    """
    values = {k: v for k, v in updates.items() if v is not None}
    if not values:
        msg = "No fields to update"
        raise ValueError(msg)

    buddy = await get_ecobuddy(db, user_id)
    for field, value in values.items():
        setattr(buddy, field, value)
    buddy.updated_at = utc_now()
    await commit(db)
    return buddy


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


async def list_achievements(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Every achievement, with ``unlocked_at`` set for the ones the user has."""
    result = await db.execute(
        select(Achievement, UserAchievement.unlocked_at)
        .outerjoin(
            UserAchievement,
            (UserAchievement.achievement_id == Achievement.id) & (UserAchievement.user_id == user_id),
        )
        .order_by(Achievement.id)
    )
    return [
        {
            "id": achievement.id,
            "name": achievement.name,
            "description": achievement.description,
            "icon": achievement.icon,
            "requirement_type": achievement.requirement_type,
            "requirement_value": achievement.requirement_value,
            "unlocked_at": unlocked_at,
        }
        for achievement, unlocked_at in result.all()
    ]


async def get_full_profile(db: AsyncSession, user: User) -> dict[str, Any]:
    """Everything the profile screen shows for ``user``."""
    plant = await check_plant_health(db, user.id)
    progress = await get_progress(db, user.id)
    buddy = await get_ecobuddy(db, user.id)
    challenges = await list_user_challenges(db, user.id)

    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "name": user.name,
        "created_at": user.created_at,
        **progress,
        "plant_health": plant.plant_health,
        "last_watered_at": plant.last_watered_at,
        "ecobuddy": buddy,
        "achievements": await list_achievements(db, user.id),
        "challenges": challenges,
    }


# ---------------------------------------------------------------------------
# Energy usage
# ---------------------------------------------------------------------------


async def log_energy_usage(
    db: AsyncSession,
    user_id: int,
    day: date,
    category: str,
    usage_kwh: Decimal,
    savings_kwh: Decimal | None = None,
) -> EnergyUsage:
    """Record usage for one (date, category); an existing entry is overwritten."""
    result = await db.execute(
        select(EnergyUsage).where(
            EnergyUsage.user_id == user_id,
            EnergyUsage.date == day,
            EnergyUsage.category == category,
        )
    )
    entry = result.scalar_one_or_none()
    if entry is None:
        entry = EnergyUsage(user_id=user_id, date=day, category=category)
        db.add(entry)
    entry.usage_kwh = usage_kwh
    entry.savings_kwh = savings_kwh if savings_kwh is not None else Decimal("0")
    await commit(db)
    return entry


async def list_energy_usage(
    db: AsyncSession,
    user_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[EnergyUsage]:
    """Energy entries in an optional inclusive date range, newest first."""
    stmt = select(EnergyUsage).where(EnergyUsage.user_id == user_id)
    if start_date is not None:
        stmt = stmt.where(EnergyUsage.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(EnergyUsage.date <= end_date)
    result = await db.execute(stmt.order_by(EnergyUsage.date.desc(), EnergyUsage.id.desc()))
    return list(result.scalars())
