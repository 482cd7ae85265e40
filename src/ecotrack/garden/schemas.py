"""Request/response schemas for garden endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class GardenItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    item_type: str
    cost_seeds: int
    image_path: str | None = None


class GardenItemsResponse(BaseModel):
    items: list[GardenItemResponse]


class PlantedItemResponse(BaseModel):
    id: int
    item_id: int
    name: str
    image_path: str | None = None
    planted_at: datetime | None = None


class PlantHealthResponse(BaseModel):
    plant_health: int
    last_watered_at: datetime | None = None
    plants_deleted: bool = False


class WaterResponse(BaseModel):
    plant_health: int
    last_watered_at: datetime | None = None
    already_watered: bool
    plants_deleted: bool = False


class GardenResponse(BaseModel):
    plants: list[PlantedItemResponse]
    background: GardenItemResponse | None = None
    plant_health: PlantHealthResponse


class PurchaseRequest(BaseModel):
    item_id: int


class PurchaseResponse(BaseModel):
    message: str = "Item purchased"
    item: GardenItemResponse
    seeds_remaining: int
