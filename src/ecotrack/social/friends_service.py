"""Friend list management. Friendships are mutual and stored in both directions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import and_, delete, or_, select

from ecotrack.database import commit
from ecotrack.db.models import EcoBuddy, User, UserFriend, UserProgress
from ecotrack.errors import ConflictError, NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

STATUS_ACCEPTED = "accepted"


async def list_friends(db: AsyncSession, user_id: int) -> list[dict[str, Any]]:
    """Accepted friends with their progress and EcoBuddy look, most seeds first."""
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
        )
        .join(UserFriend, UserFriend.friend_id == User.id)
        .join(UserProgress, UserProgress.user_id == User.id)
        .join(EcoBuddy, EcoBuddy.user_id == User.id)
        .where(UserFriend.user_id == user_id, UserFriend.status == STATUS_ACCEPTED)
        .order_by(UserProgress.seeds.desc(), User.id)
    )
    return [dict(row._mapping) for row in result.all()]


async def add_friend(db: AsyncSession, user_id: int, friend_id: int) -> bool:
    """
    Befriend ``friend_id`` in both directions.

    Returns True when a new friendship was created, False if it already existed.

    Raises:
        ConflictError: ``friend_id`` is the caller.
        NotFoundError: No such user.
    """
    if friend_id == user_id:
        msg = "Cannot add yourself as a friend"
        raise ConflictError(msg)

    exists = await db.execute(select(User.id).where(User.id == friend_id))
    if exists.scalar_one_or_none() is None:
        msg = "User not found"
        raise NotFoundError(msg)

    result = await db.execute(
        select(UserFriend.user_id, UserFriend.friend_id).where(
            or_(
                and_(UserFriend.user_id == user_id, UserFriend.friend_id == friend_id),
                and_(UserFriend.user_id == friend_id, UserFriend.friend_id == user_id),
            )
        )
    )
    present = {tuple(row) for row in result.all()}

    created = False
    for a, b in ((user_id, friend_id), (friend_id, user_id)):
        if (a, b) not in present:
            db.add(UserFriend(user_id=a, friend_id=b, status=STATUS_ACCEPTED))
            created = True
    await commit(db)

    if created:
        logger.info("friend_added", user_id=user_id, friend_id=friend_id)
    return created


async def remove_friend(db: AsyncSession, user_id: int, friend_id: int) -> int:
    """Delete the friendship in both directions. Returns the number of rows removed."""
    result = await db.execute(
        delete(UserFriend).where(
            or_(
                and_(UserFriend.user_id == user_id, UserFriend.friend_id == friend_id),
                and_(UserFriend.user_id == friend_id, UserFriend.friend_id == user_id),
            )
        )
    )
    await commit(db)
    return result.rowcount
