"""Leaderboards computed straight from user_progress."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import func, or_, select

from ecotrack.config import get_settings
from ecotrack.db.models import EcoBuddy, User, UserChallenge, UserFriend, UserProgress
from ecotrack.gamification.challenge_service import STATUS_COMPLETED
from ecotrack.social.friends_service import STATUS_ACCEPTED

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def get_leaderboard(db: AsyncSession, limit: int | None = None) -> list[dict[str, Any]]:
    """Top users by points. Ties keep signup order."""
    if limit is None:
        limit = get_settings().leaderboard_limit
    result = await db.execute(
        select(
            User.id,
            User.username,
            User.name,
            UserProgress.points,
            UserProgress.total_savings,
            UserProgress.co2_saved,
            UserProgress.streak,
            UserProgress.level,
        )
        .join(UserProgress, UserProgress.user_id == User.id)
        .order_by(UserProgress.points.desc(), User.id)
        .limit(limit)
    )
    return [{"rank": i, **row._mapping} for i, row in enumerate(result.all(), start=1)]


async def get_friends_leaderboard(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """The user and their friends, ranked by completed challenges then seeds."""
    completed = (
        select(func.count(UserChallenge.id))
        .where(UserChallenge.user_id == User.id, UserChallenge.status == STATUS_COMPLETED)
        .correlate(User)
        .scalar_subquery()
        .label("completed_tasks")
    )
    friend_ids = select(UserFriend.friend_id).where(
        UserFriend.user_id == user_id,
        UserFriend.status == STATUS_ACCEPTED,
    )
    result = await db.execute(
        select(
            User.id,
            User.name,
            User.username,
            UserProgress.level,
            UserProgress.seeds,
            UserProgress.streak,
            EcoBuddy.accessories,
            EcoBuddy.mood,
            completed,
        )
        .join(UserProgress, UserProgress.user_id == User.id)
        .join(EcoBuddy, EcoBuddy.user_id == User.id)
        .where(or_(User.id == user_id, User.id.in_(friend_ids)))
        .order_by(completed.desc(), UserProgress.seeds.desc(), User.id)
        .limit(get_settings().friends_leaderboard_limit)
    )
    return [{"rank": i, **row._mapping} for i, row in enumerate(result.all(), start=1)]


async def get_user_rank(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """Rank = 1 + number of users with strictly more points."""
    result = await db.execute(
        select(UserProgress.points, UserProgress.total_savings, UserProgress.streak).where(
            UserProgress.user_id == user_id
        )
    )
    row = result.one_or_none()
    if row is None:
        return {"rank": 0, "points": 0, "total_savings": 0, "streak": 0, "total": 0}

    ahead = await db.scalar(select(func.count()).select_from(UserProgress).where(UserProgress.points > row.points))
    total = await db.scalar(select(func.count()).select_from(UserProgress))
    return {
        "rank": (ahead or 0) + 1,
        "points": row.points,
        "total_savings": row.total_savings,
        "streak": row.streak,
        "total": total or 0,
    }
