"""Garden shop: catalogue, the user's garden and purchases paid in seeds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from ecotrack.database import commit
from ecotrack.db.models import GardenItem, UserGardenBackground, UserGardenItem, UserProgress
from ecotrack.errors import ConflictError, NotFoundError
from ecotrack.garden.plant_health import PlantHealthStatus, check_plant_health

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

ITEM_TYPE_PLANT = "plant"
ITEM_TYPE_BACKGROUND = "background"


@dataclass(frozen=True)
class GardenView:
    """Everything the garden screen renders."""

    plants: list[UserGardenItem]
    background: GardenItem | None
    plant_health: PlantHealthStatus


@dataclass(frozen=True)
class PurchaseResult:
    item: GardenItem
    seeds_remaining: int


async def list_items(db: AsyncSession, item_type: str | None = None) -> list[GardenItem]:
    """Shop catalogue, optionally filtered to plants or backgrounds."""
    stmt = select(GardenItem).order_by(GardenItem.item_type, GardenItem.sort_order, GardenItem.id)
    if item_type is not None:
        stmt = stmt.where(GardenItem.item_type == item_type)
    result = await db.execute(stmt)
    return list(result.scalars())


async def get_item(db: AsyncSession, item_id: int) -> GardenItem:
    result = await db.execute(select(GardenItem).where(GardenItem.id == item_id))
    item = result.scalar_one_or_none()
    if item is None:
        msg = "Item not found"
        raise NotFoundError(msg)
    return item


async def get_garden(db: AsyncSession, user_id: int, now: datetime | None = None) -> GardenView:
    """Current garden, with pending plant decay applied first.

    Decay runs before the planted items are read so a garden that has just
    died is returned empty.
    """
    health = await check_plant_health(db, user_id, now)

    plants = await db.execute(
        select(UserGardenItem)
        .where(UserGardenItem.user_id == user_id)
        .order_by(UserGardenItem.planted_at, UserGardenItem.id)
    )
    background = await db.execute(
        select(UserGardenBackground).where(UserGardenBackground.user_id == user_id)
    )
    selected = background.scalar_one_or_none()
    return GardenView(
        plants=list(plants.scalars()),
        background=selected.background if selected else None,
        plant_health=health,
    )


async def _spend_seeds(db: AsyncSession, user_id: int, cost: int) -> None:
    """Deduct ``cost`` seeds in one statement; the balance guard rejects overdrafts."""
    result = await db.execute(
        update(UserProgress)
        .where(UserProgress.user_id == user_id, UserProgress.seeds >= cost)
        .values(seeds=UserProgress.seeds - cost)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        msg = "Insufficient seeds"
        raise ConflictError(msg)


async def _seeds_of(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(select(UserProgress.seeds).where(UserProgress.user_id == user_id))
    return result.scalar_one_or_none() or 0


async def purchase_item(db: AsyncSession, user_id: int, item_id: int) -> PurchaseResult:
    """Buy a garden item.

    Plants are added to the garden; a background replaces the selected one.
    The seed deduction and the ownership change commit together.

    Raises:
        NotFoundError: Unknown item.
        ConflictError: Already owned, or not enough seeds.
    """
    item = await get_item(db, item_id)

    if item.item_type == ITEM_TYPE_BACKGROUND:
        result = await db.execute(
            select(UserGardenBackground).where(UserGardenBackground.user_id == user_id)
        )
        selected = result.scalar_one_or_none()
        if selected is not None and selected.background_id == item.id:
            msg = "Background already selected"
            raise ConflictError(msg)
        await _spend_seeds(db, user_id, item.cost_seeds)
        if selected is None:
            db.add(UserGardenBackground(user_id=user_id, background=item))
        else:
            selected.background = item
    else:
        owned = await db.execute(
            select(UserGardenItem.id).where(
                UserGardenItem.user_id == user_id,
                UserGardenItem.item_id == item.id,
            )
        )
        if owned.scalar_one_or_none() is not None:
            msg = "Item already owned"
            raise ConflictError(msg)
        await _spend_seeds(db, user_id, item.cost_seeds)
        db.add(UserGardenItem(user_id=user_id, item=item))

    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        msg = "Item already owned"
        raise ConflictError(msg) from exc
    await commit(db)

    seeds = await _seeds_of(db, user_id)
    logger.info("garden_item_purchased", user_id=user_id, item_id=item.id, cost=item.cost_seeds)
    return PurchaseResult(item=item, seeds_remaining=seeds)
