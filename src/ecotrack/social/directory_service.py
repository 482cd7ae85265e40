"""Finding other players: username search and public profiles.

Both views are what any signed-in player may see about another one, so
neither exposes email, XP or the watering state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import and_, or_, select

from ecotrack.config import get_settings
from ecotrack.db.models import Achievement, EcoBuddy, User, UserAchievement, UserFriend, UserProgress
from ecotrack.errors import ConflictError, NotFoundError
from ecotrack.social.friends_service import STATUS_ACCEPTED

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


def _friend_join(viewer_id: int) -> Any:  # noqa: ANN401
    return and_(
        UserFriend.user_id == viewer_id,
        UserFriend.friend_id == User.id,
        UserFriend.status == STATUS_ACCEPTED,
    )


async def search_users(db: AsyncSession, viewer_id: int, query: str) -> list[dict[str, Any]]:
    """Players whose username or name contains ``query``, case-insensitively.

    The caller is never listed. Each row says whether the caller already
    counts the player as a friend, so the client can offer "add".

    Raises:
        ConflictError: The trimmed query is shorter than the configured minimum.
    """
    settings = get_settings()
    query = query.strip()
    if len(query) < settings.user_search_min_length:
        msg = f"Search query must be at least {settings.user_search_min_length} characters"
        raise ConflictError(msg)

    result = await db.execute(
        select(
            User.id,
            User.username,
            User.name,
            UserProgress.level,
            UserProgress.points,
            UserProgress.streak,
            UserFriend.friend_id.is_not(None).label("is_friend"),
        )
        .join(UserProgress, UserProgress.user_id == User.id)
        .outerjoin(UserFriend, _friend_join(viewer_id))
        .where(
            User.id != viewer_id,
            or_(
                User.username.icontains(query, autoescape=True),
                User.name.icontains(query, autoescape=True),
            ),
        )
        .order_by(User.username)
        .limit(settings.user_search_limit)
    )
    return [dict(row._mapping) for row in result.all()]


async def get_public_profile(db: AsyncSession, viewer_id: int, user_id: int) -> dict[str, Any]:
    """Another player's public card: progress, EcoBuddy and unlocked achievements.

    Raises:
        NotFoundError: No such user.
    """
    result = await db.execute(
        select(
            User.id,
            User.username,
            User.name,
            User.created_at,
            UserProgress.level,
            UserProgress.points,
            UserProgress.seeds,
            UserProgress.streak,
            UserProgress.best_streak,
            UserProgress.total_savings,
            UserProgress.co2_saved,
            UserFriend.friend_id.is_not(None).label("is_friend"),
        )
        .join(UserProgress, UserProgress.user_id == User.id)
        .outerjoin(UserFriend, _friend_join(viewer_id))
        .where(User.id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        msg = "User not found"
        raise NotFoundError(msg)
    profile = dict(row._mapping)

    buddy = await db.execute(select(EcoBuddy).where(EcoBuddy.user_id == user_id))
    profile["ecobuddy"] = buddy.scalar_one_or_none()

    unlocked = await db.execute(
        select(Achievement.name, Achievement.description, Achievement.icon, UserAchievement.unlocked_at)
        .join(UserAchievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.unlocked_at, Achievement.id)
    )
    profile["achievements"] = [dict(a._mapping) for a in unlocked.all()]
    return profile
