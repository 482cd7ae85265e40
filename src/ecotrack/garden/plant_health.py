"""Plant health: lazy daily decay, watering, and the garden wipe.

Health is never ticked by a scheduler. Each check derives the current value
from ``last_watered_at`` and the health recorded at that watering, so the
same check can run any number of times without compounding decay.

Rules:
  * a check charges one health bar for every full 24h since the last
    watering, floored at 0
  * watering counts once per UTC day; it charges one bar for each whole
    UTC day skipped in between, so daily watering never loses health
  * watering on the third consecutive UTC day (and every consecutive day
    after) restores one bar, capped at the maximum
  * reaching 0 deletes the user's planted items; the health row stays at 0
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select

from ecotrack.config import get_settings
from ecotrack.database import commit
from ecotrack.day_utils import as_utc, calendar_days_between, full_days_elapsed, utc_date, utc_now
from ecotrack.db.models import PlantHealth, UserGardenItem

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class PlantState:
    """Stored plant fields the rules operate on."""

    plant_health: int
    health_baseline: int
    consecutive_water_days: int
    last_watered_at: datetime | None


@dataclass(frozen=True)
class PlantHealthStatus:
    """Result of a health check."""

    plant_health: int
    last_watered_at: datetime | None
    plants_deleted: bool


@dataclass(frozen=True)
class WateringResult:
    """Result of a watering action."""

    plant_health: int
    last_watered_at: datetime | None
    already_watered: bool
    plants_deleted: bool = False


def decayed_health(state: PlantState, now: datetime) -> int:
    """Health after applying decay since the last watering.

    Never higher than the stored value: decay only ever lowers health.
    """
    if state.last_watered_at is None:
        return 0
    days = max(0, full_days_elapsed(state.last_watered_at, now))
    return max(0, min(state.plant_health, state.health_baseline - days))


def apply_decay(state: PlantState, now: datetime) -> PlantState:
    """State with decay applied; baseline and watering history untouched."""
    return replace(state, plant_health=decayed_health(state, now))


def watered_today(state: PlantState, now: datetime) -> bool:
    """True when the last watering falls on the same UTC date as ``now``."""
    return state.last_watered_at is not None and utc_date(state.last_watered_at) == utc_date(now)


def apply_watering(
    state: PlantState,
    now: datetime,
    max_health: int = 3,
    recovery_days: int = 3,
) -> PlantState:
    """State after watering at ``now``. Callers check ``watered_today`` first.

    Only whole UTC days with no watering in between are charged, measured
    from the baseline. A garden that already died stays at 0 until the
    recovery run brings it back.
    """
    if state.last_watered_at is None or state.plant_health == 0:
        health = 0
    else:
        missed = max(0, calendar_days_between(state.last_watered_at, now) - 1)
        health = max(0, state.health_baseline - missed)

    if state.last_watered_at is not None and calendar_days_between(state.last_watered_at, now) == 1:
        consecutive = state.consecutive_water_days + 1
    else:
        consecutive = 1

    if consecutive >= recovery_days and health < max_health:
        health += 1

    return PlantState(
        plant_health=health,
        health_baseline=health,
        consecutive_water_days=consecutive,
        last_watered_at=now,
    )


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def _state_of(row: PlantHealth) -> PlantState:
    return PlantState(
        plant_health=row.plant_health,
        health_baseline=row.health_baseline,
        consecutive_water_days=row.consecutive_water_days,
        last_watered_at=as_utc(row.last_watered_at) if row.last_watered_at else None,
    )


async def get_or_create_plant_health(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> PlantHealth:
    """Get the plant health row, creating a healthy garden watered at ``now``."""
    result = await db.execute(select(PlantHealth).where(PlantHealth.user_id == user_id))
    row = result.scalar_one_or_none()
    if row is None:
        if now is None:
            now = utc_now()
        max_health = get_settings().plant_max_health
        row = PlantHealth(
            user_id=user_id,
            plant_health=max_health,
            health_baseline=max_health,
            consecutive_water_days=0,
            last_watered_at=now,
            updated_at=now,
        )
        db.add(row)
        await db.flush()
    return row


async def _store(db: AsyncSession, row: PlantHealth, state: PlantState, now: datetime) -> bool:
    """Write ``state`` onto ``row``; wipe planted items on the drop to 0.

    Returns True when the wipe happened.
    """
    previous = row.plant_health
    row.plant_health = state.plant_health
    row.health_baseline = state.health_baseline
    row.consecutive_water_days = state.consecutive_water_days
    row.last_watered_at = state.last_watered_at
    row.updated_at = now

    if state.plant_health == 0 and previous > 0:
        result = await db.execute(delete(UserGardenItem).where(UserGardenItem.user_id == row.user_id))
        logger.info("plants_wiped", user_id=row.user_id, deleted=result.rowcount)
        return True
    return False


async def check_plant_health(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> PlantHealthStatus:
    """Apply pending decay (never recovery) and report the current health.

    ``plants_deleted`` is True only on the check that brings health to 0.
    """
    if now is None:
        now = utc_now()
    row = await get_or_create_plant_health(db, user_id, now)
    state = _state_of(row)
    decayed = apply_decay(state, now)

    plants_deleted = False
    if decayed.plant_health != state.plant_health:
        plants_deleted = await _store(db, row, decayed, now)
    await commit(db)

    return PlantHealthStatus(
        plant_health=decayed.plant_health,
        last_watered_at=decayed.last_watered_at,
        plants_deleted=plants_deleted,
    )


async def water_plants(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> WateringResult:
    """Water the garden once for the current UTC day."""
    if now is None:
        now = utc_now()
    settings = get_settings()
    row = await get_or_create_plant_health(db, user_id, now)
    state = _state_of(row)

    if watered_today(state, now):
        await commit(db)
        return WateringResult(
            plant_health=state.plant_health,
            last_watered_at=state.last_watered_at,
            already_watered=True,
        )

    watered = apply_watering(
        state,
        now,
        max_health=settings.plant_max_health,
        recovery_days=settings.plant_recovery_streak_days,
    )
    plants_deleted = await _store(db, row, watered, now)
    await commit(db)

    logger.info(
        "plants_watered",
        user_id=user_id,
        plant_health=watered.plant_health,
        consecutive_days=watered.consecutive_water_days,
    )
    return WateringResult(
        plant_health=watered.plant_health,
        last_watered_at=watered.last_watered_at,
        already_watered=False,
        plants_deleted=plants_deleted,
    )
