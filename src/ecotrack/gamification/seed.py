"""Catalogue seed data: achievements, challenges and garden shop items."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.db.models import Achievement, Challenge, GardenItem

logger = logging.getLogger(__name__)

ACHIEVEMENT_SEED_DATA: list[dict] = [
    {"name": "First Place", "description": "Reached #1 on leaderboard", "icon": "\U0001f947",
     "requirement_type": "rank", "requirement_value": 1},
    {"name": "Hot Streak", "description": "30-day consecutive streak", "icon": "\U0001f525",
     "requirement_type": "streak", "requirement_value": 30},
    {"name": "Century Club", "description": "Saved $100 or more", "icon": "\U0001f4af",
     "requirement_type": "savings", "requirement_value": 100},
    {"name": "Planet Protector", "description": "Saved 200kg CO₂", "icon": "\U0001f30d",
     "requirement_type": "co2", "requirement_value": 200},
    {"name": "Energy Expert", "description": "Complete 50 challenges", "icon": "⚡",
     "requirement_type": "challenges", "requirement_value": 50},
    {"name": "Eco Royalty", "description": "Reach level 20", "icon": "\U0001f451",
     "requirement_type": "level", "requirement_value": 20},
]

CHALLENGE_SEED_DATA: list[dict] = [
    {"title": "Unplug Unused Devices", "description": "Unplug 5 devices when not in use",
     "difficulty": "Easy", "points": 50, "category": "appliances", "target_value": 5, "duration_days": 7},
    {"title": "Natural Light Day", "description": "Use only natural light during daytime",
     "difficulty": "Medium", "points": 100, "category": "lighting", "target_value": 1, "duration_days": 1},
    {"title": "Thermostat Challenge", "description": "Lower thermostat by 2°F for a week",
     "difficulty": "Medium", "points": 150, "category": "heating", "target_value": 7, "duration_days": 7},
    {"title": "Vampire Power Hunt", "description": "Find and eliminate 10 standby power sources",
     "difficulty": "Hard", "points": 200, "category": "appliances", "target_value": 10, "duration_days": 14},
    {"title": "LED Upgrade", "description": "Replace 5 bulbs with LED",
     "difficulty": "Easy", "points": 75, "category": "lighting", "target_value": 5, "duration_days": 30},
    {"title": "Cold Wash Week", "description": "Use cold water for laundry for 7 days",
     "difficulty": "Medium", "points": 100, "category": "appliances", "target_value": 7, "duration_days": 7},
    {"title": "Shower Timer", "description": "Take 5-minute showers for a week",
     "difficulty": "Medium", "points": 120, "category": "water", "target_value": 7, "duration_days": 7},
    {"title": "Zero Phantom Load", "description": "Eliminate all phantom power for 24 hours",
     "difficulty": "Hard", "points": 250, "category": "appliances", "target_value": 1, "duration_days": 1},
]

GARDEN_ITEM_SEED_DATA: list[dict] = [
    # Backgrounds; the free one is assigned at signup
    {"name": "Chill Background", "description": "A calm meadow to start your garden",
     "item_type": "background", "cost_seeds": 0, "image_path": "/garden/backgrounds/chill.png", "sort_order": 1},
    {"name": "Sunset Hills", "description": "Warm evening light over rolling hills",
     "item_type": "background", "cost_seeds": 150, "image_path": "/garden/backgrounds/sunset.png", "sort_order": 2},
    {"name": "Night Sky", "description": "A starry sky for night owls",
     "item_type": "background", "cost_seeds": 250, "image_path": "/garden/backgrounds/night.png", "sort_order": 3},
    # Plants
    {"name": "Sunflower", "description": "Always facing the sun",
     "item_type": "plant", "cost_seeds": 25, "image_path": "/garden/plants/sunflower.png", "sort_order": 1},
    {"name": "Cactus", "description": "Thrives on very little water",
     "item_type": "plant", "cost_seeds": 40, "image_path": "/garden/plants/cactus.png", "sort_order": 2},
    {"name": "Fern", "description": "Loves the shade",
     "item_type": "plant", "cost_seeds": 60, "image_path": "/garden/plants/fern.png", "sort_order": 3},
    {"name": "Bonsai", "description": "Patience, grown into a tree",
     "item_type": "plant", "cost_seeds": 120, "image_path": "/garden/plants/bonsai.png", "sort_order": 4},
]


async def _insert_missing(
    db: AsyncSession,
    model: type[Any],
    rows: list[dict],
    key: tuple[str, ...],
) -> int:
    """Insert catalogue rows whose natural key is not present yet."""
    columns = [getattr(model, k) for k in key]
    existing = {tuple(row) for row in (await db.execute(select(*columns))).all()}
    inserted = 0
    for data in rows:
        if tuple(data[k] for k in key) in existing:
            continue
        db.add(model(**data))
        inserted += 1
    return inserted


async def seed_catalogue(db: AsyncSession) -> int:
    """Insert the achievement, challenge and garden catalogues. Returns rows inserted.

    Existing rows are left untouched, so running it on every startup is safe.
    """
    inserted = await _insert_missing(db, Achievement, ACHIEVEMENT_SEED_DATA, ("name",))
    inserted += await _insert_missing(db, Challenge, CHALLENGE_SEED_DATA, ("title",))
    inserted += await _insert_missing(db, GardenItem, GARDEN_ITEM_SEED_DATA, ("name", "item_type"))
    await db.commit()
    logger.info("Seeded %d catalogue rows", inserted)
    return inserted
