"""Level thresholds and computation.

Levels are derived from cumulative XP. Challenge completion credits
``2 x points`` XP, so the first few levels arrive after a handful of easy
challenges.
"""

from __future__ import annotations

LEVEL_THRESHOLDS: list[dict] = [
    {"level": 1, "title": "Seedling", "xp_required": 0, "cumulative": 0},
    {"level": 2, "title": "Sprout", "xp_required": 100, "cumulative": 100},
    {"level": 3, "title": "Switch Flipper", "xp_required": 200, "cumulative": 300},
    {"level": 4, "title": "Watt Watcher", "xp_required": 300, "cumulative": 600},
    {"level": 5, "title": "Power Saver", "xp_required": 400, "cumulative": 1000},
    {"level": 6, "title": "Phantom Hunter", "xp_required": 500, "cumulative": 1500},
    {"level": 7, "title": "Grid Guardian", "xp_required": 750, "cumulative": 2250},
    {"level": 8, "title": "Carbon Cutter", "xp_required": 1000, "cumulative": 3250},
    {"level": 9, "title": "Solar Scout", "xp_required": 1250, "cumulative": 4500},
    {"level": 10, "title": "Eco Champion", "xp_required": 1500, "cumulative": 6000},
    {"level": 15, "title": "Planet Protector", "xp_required": 4000, "cumulative": 10000},
    {"level": 20, "title": "Eco Royalty", "xp_required": 10000, "cumulative": 20000},
]


def level_for_xp(total_xp: int) -> int:
    """Level number reached with ``total_xp`` cumulative XP."""
    return compute_level(total_xp)["level"]


def compute_level(total_xp: int) -> dict:
    """Compute level info (current tier, progress into it, next tier) from total XP."""
    index = 0
    for i, tier in enumerate(LEVEL_THRESHOLDS):
        if total_xp >= tier["cumulative"]:
            index = i

    current = LEVEL_THRESHOLDS[index]
    upcoming = LEVEL_THRESHOLDS[min(index + 1, len(LEVEL_THRESHOLDS) - 1)]
    # Max level has no next tier; keep the span non-zero for progress bars
    span = (upcoming["cumulative"] - current["cumulative"]) or 1

    return {
        "level": current["level"],
        "title": current["title"],
        "xp_into_level": max(0, total_xp - current["cumulative"]),
        "xp_for_level": span,
        "next_level": upcoming["level"],
        "next_title": upcoming["title"],
    }
