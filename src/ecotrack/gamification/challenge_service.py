"""Challenge lifecycle: start, progress, and the atomic completion reward."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ecotrack.config import get_settings
from ecotrack.database import commit
from ecotrack.day_utils import utc_now
from ecotrack.db.models import Challenge, UserChallenge, UserProgress
from ecotrack.errors import ConflictError, NotFoundError, StorageError
from ecotrack.gamification.level_thresholds import level_for_xp

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"

# Ordering used by the catalogue: Easy < Medium < Hard
_DIFFICULTY_RANK = {"Easy": 0, "Medium": 1, "Hard": 2}


@dataclass(frozen=True)
class ChallengeReward:
    """Amounts credited by a completed challenge."""

    points_earned: int
    xp_earned: int


async def get_challenge(db: AsyncSession, challenge_id: int) -> Challenge:
    """Fetch a catalogue challenge or raise NotFoundError."""
    result = await db.execute(select(Challenge).where(Challenge.id == challenge_id))
    challenge = result.scalar_one_or_none()
    if challenge is None:
        msg = "Challenge not found"
        raise NotFoundError(msg)
    return challenge


async def list_available_challenges(db: AsyncSession, user_id: int) -> list[Challenge]:
    """Challenges the user has never started, easiest and cheapest first."""
    started = select(UserChallenge.challenge_id).where(UserChallenge.user_id == user_id)
    result = await db.execute(select(Challenge).where(Challenge.id.not_in(started)))
    challenges = list(result.scalars())
    challenges.sort(key=lambda c: (_DIFFICULTY_RANK.get(c.difficulty, len(_DIFFICULTY_RANK)), c.points, c.id))
    return challenges


async def list_user_challenges(db: AsyncSession, user_id: int) -> list[UserChallenge]:
    """All challenges the user has started, most recent first."""
    result = await db.execute(
        select(UserChallenge)
        .where(UserChallenge.user_id == user_id)
        .order_by(UserChallenge.started_at.desc(), UserChallenge.id.desc())
    )
    return list(result.scalars())


async def start_challenge(
    db: AsyncSession,
    user_id: int,
    challenge_id: int,
    now: datetime | None = None,
) -> UserChallenge:
    """Add a challenge to the user's active list.

    Raises:
        NotFoundError: Unknown challenge.
        ConflictError: The user already started (or finished) this challenge.
    """
    if now is None:
        now = utc_now()
    await get_challenge(db, challenge_id)

    existing = await db.execute(
        select(UserChallenge.id).where(
            UserChallenge.user_id == user_id,
            UserChallenge.challenge_id == challenge_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        msg = "Challenge already started"
        raise ConflictError(msg)

    user_challenge = UserChallenge(
        user_id=user_id,
        challenge_id=challenge_id,
        status=STATUS_ACTIVE,
        progress=0,
        started_at=now,
        updated_at=now,
    )
    db.add(user_challenge)
    try:
        await db.flush()
        await db.commit()
    except IntegrityError as exc:
        # Lost a race against a concurrent start for the same pair
        await db.rollback()
        msg = "Challenge already started"
        raise ConflictError(msg) from exc
    logger.info("challenge_started", user_id=user_id, challenge_id=challenge_id)
    return user_challenge


async def update_challenge_progress(
    db: AsyncSession,
    user_id: int,
    challenge_id: int,
    progress: int,
    now: datetime | None = None,
) -> UserChallenge:
    """Set the progress counter on a started challenge."""
    if now is None:
        now = utc_now()
    result = await db.execute(
        select(UserChallenge).where(
            UserChallenge.user_id == user_id,
            UserChallenge.challenge_id == challenge_id,
        )
    )
    user_challenge = result.scalar_one_or_none()
    if user_challenge is None:
        msg = "Challenge not found"
        raise NotFoundError(msg)

    user_challenge.progress = progress
    user_challenge.updated_at = now
    await commit(db)
    return user_challenge


async def _mark_completed(
    db: AsyncSession,
    user_id: int,
    challenge: Challenge,
    now: datetime,
) -> None:
    """Transition active -> completed. The status predicate rejects repeats."""
    result = await db.execute(
        update(UserChallenge)
        .where(
            UserChallenge.user_id == user_id,
            UserChallenge.challenge_id == challenge.id,
            UserChallenge.status == STATUS_ACTIVE,
        )
        .values(
            status=STATUS_COMPLETED,
            completed_at=now,
            points_earned=challenge.points,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        msg = "Active challenge not found"
        raise NotFoundError(msg)


async def _credit_reward(
    db: AsyncSession,
    user_id: int,
    reward: ChallengeReward,
    now: datetime,
) -> None:
    """Add points and XP to the progress row, raising the level if XP crosses a threshold."""
    result = await db.execute(
        select(UserProgress.xp, UserProgress.level).where(UserProgress.user_id == user_id)
    )
    row = result.one_or_none()
    if row is None:
        msg = "Progress row missing"
        raise StorageError(msg)

    new_xp = row.xp + reward.xp_earned
    await db.execute(
        update(UserProgress)
        .where(UserProgress.user_id == user_id)
        .values(
            points=UserProgress.points + reward.points_earned,
            xp=UserProgress.xp + reward.xp_earned,
            level=max(row.level, level_for_xp(new_xp)),
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )


async def complete_challenge(
    db: AsyncSession,
    user_id: int,
    challenge_id: int,
    now: datetime | None = None,
) -> ChallengeReward:
    """Complete an active challenge and credit its reward in one transaction.

    The reward value is copied onto the user-challenge row so later catalogue
    edits do not change what was earned. Either both the status transition
    and the progress credit commit, or neither does.

    A second call for the same pair raises NotFoundError because the row is
    no longer active; callers should re-fetch the profile after any error
    rather than retry.

    Raises:
        NotFoundError: Unknown challenge or no active instance for the user.
        StorageError: Any store failure; nothing is committed.
    """
    if now is None:
        now = utc_now()

    try:
        challenge = await get_challenge(db, challenge_id)
        reward = ChallengeReward(
            points_earned=challenge.points,
            xp_earned=challenge.points * get_settings().challenge_xp_multiplier,
        )
        await _mark_completed(db, user_id, challenge, now)
        await _credit_reward(db, user_id, reward, now)
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        msg = "Failed to complete challenge"
        raise StorageError(msg) from exc
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "challenge_completed",
        user_id=user_id,
        challenge_id=challenge_id,
        points_earned=reward.points_earned,
        xp_earned=reward.xp_earned,
    )
    return reward
