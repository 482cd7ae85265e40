"""Garden router: shop, planted items and plant health under /api/v1/garden."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.dependencies import get_current_user
from ecotrack.database import get_session
from ecotrack.db.models import User
from ecotrack.garden.plant_health import check_plant_health, water_plants
from ecotrack.garden.schemas import (
    GardenItemResponse,
    GardenItemsResponse,
    GardenResponse,
    PlantedItemResponse,
    PlantHealthResponse,
    PurchaseRequest,
    PurchaseResponse,
    WaterResponse,
)
from ecotrack.garden.service import get_garden, list_items, purchase_item

router = APIRouter(prefix="/api/v1/garden", tags=["Garden"])


@router.get("/items", response_model=GardenItemsResponse)
async def items(
    item_type: Literal["plant", "background"] | None = Query(None),
    db: AsyncSession = Depends(get_session),
):
    """Shop catalogue."""
    catalogue = await list_items(db, item_type)
    return GardenItemsResponse(items=[GardenItemResponse.model_validate(i) for i in catalogue])


@router.get("", response_model=GardenResponse)
async def garden(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    view = await get_garden(db, user.id)
    return GardenResponse(
        plants=[
            PlantedItemResponse(
                id=p.id,
                item_id=p.item_id,
                name=p.item.name,
                image_path=p.item.image_path,
                planted_at=p.planted_at,
            )
            for p in view.plants
        ],
        background=GardenItemResponse.model_validate(view.background) if view.background else None,
        plant_health=PlantHealthResponse(
            plant_health=view.plant_health.plant_health,
            last_watered_at=view.plant_health.last_watered_at,
            plants_deleted=view.plant_health.plants_deleted,
        ),
    )


@router.post("/purchase", response_model=PurchaseResponse)
async def purchase(
    body: PurchaseRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Buy a plant or a background with seeds."""
    result = await purchase_item(db, user.id, body.item_id)
    return PurchaseResponse(
        item=GardenItemResponse.model_validate(result.item),
        seeds_remaining=result.seeds_remaining,
    )


@router.get("/health", response_model=PlantHealthResponse)
async def health(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Current plant health, after any decay since the last watering."""
    status = await check_plant_health(db, user.id)
    return PlantHealthResponse(
        plant_health=status.plant_health,
        last_watered_at=status.last_watered_at,
        plants_deleted=status.plants_deleted,
    )


@router.post("/water", response_model=WaterResponse)
async def water(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Water the garden (once per UTC day)."""
    result = await water_plants(db, user.id)
    return WaterResponse(
        plant_health=result.plant_health,
        last_watered_at=result.last_watered_at,
        already_watered=result.already_watered,
        plants_deleted=result.plants_deleted,
    )
