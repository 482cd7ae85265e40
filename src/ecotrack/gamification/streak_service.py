"""Daily login streak: continuity rule and persistence.

The streak is evaluated per UTC calendar day. ``compute_streak`` is the
pure rule; ``update_streak`` reads the stored fields through the schema
capability probe, applies the rule and writes the result back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update

from ecotrack.database import commit
from ecotrack.day_utils import calendar_days_between, utc_now
from ecotrack.db.models import UserProgress
from ecotrack.db.schema import ProgressSchema, execute_progress, to_progress_row

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass(frozen=True)
class StreakResult:
    """Streak values after an update."""

    streak: int
    best_streak: int


def compute_streak(
    streak: int,
    best_streak: int,
    last_login_date: datetime | None,
    now: datetime,
) -> StreakResult:
    """Apply the daily continuity rule.

    - unknown previous login: unchanged
    - same UTC day: unchanged
    - previous UTC day: streak + 1
    - any other gap, including a login dated in the future: restart at 1

    ``best_streak`` never drops below ``streak``.
    """
    if last_login_date is not None:
        diff_days = calendar_days_between(last_login_date, now)
        if diff_days == 1:
            streak += 1
        elif diff_days != 0:
            streak = 1
    return StreakResult(streak=streak, best_streak=max(best_streak, streak))


async def update_streak(
    db: AsyncSession,
    user_id: int,
    now: datetime | None = None,
) -> StreakResult:
    """Recompute and persist the login streak for ``user_id``.

    Safe to call any number of times per day. On a schema without
    ``last_login_date`` the previous login is unknown, so the streak is
    left as stored.

    Raises:
        StorageError: On any store failure other than the missing column.
    """
    if now is None:
        now = utc_now()

    def _read(schema: ProgressSchema):  # noqa: ANN202
        columns = [UserProgress.streak, UserProgress.best_streak]
        if schema is ProgressSchema.FULL:
            columns.append(UserProgress.last_login_date)
        return select(*columns).where(UserProgress.user_id == user_id)

    result, schema = await execute_progress(db, _read)
    row = to_progress_row(schema, result.one_or_none())

    new = compute_streak(row.streak, row.best_streak, row.last_login_date, now)

    def _write(schema: ProgressSchema):  # noqa: ANN202
        values: dict[str, object] = {
            "streak": new.streak,
            "best_streak": new.best_streak,
            "updated_at": now,
        }
        if schema is ProgressSchema.FULL:
            values["last_login_date"] = now
        return update(UserProgress).where(UserProgress.user_id == user_id).values(**values)

    await execute_progress(db, _write)
    await commit(db)

    if new.streak != row.streak:
        logger.info(
            "streak_updated",
            user_id=user_id,
            previous=row.streak,
            streak=new.streak,
            best_streak=new.best_streak,
        )
    return new
