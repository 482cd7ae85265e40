"""Integration tests for the login streak engine against a real database."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import select, text, update

from ecotrack.auth.service import register_user
from ecotrack.db.models import UserProgress
from ecotrack.db.schema import ProgressSchema, get_progress_schema, reset_schema_cache
from ecotrack.gamification.streak_service import update_streak
from ecotrack.users.service import get_progress

JAN_1 = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)

LEGACY_PROGRESS_DDL = """
CREATE TABLE user_progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
    level INTEGER NOT NULL DEFAULT 1,
    xp INTEGER NOT NULL DEFAULT 0,
    points INTEGER NOT NULL DEFAULT 0,
    seeds INTEGER NOT NULL DEFAULT 0,
    total_savings NUMERIC(10, 2) NOT NULL DEFAULT 0,
    co2_saved NUMERIC(10, 2) NOT NULL DEFAULT 0,
    streak INTEGER NOT NULL DEFAULT 0,
    best_streak INTEGER NOT NULL DEFAULT 0,
    completed_task_ids JSON NOT NULL DEFAULT '[]',
    updated_at DATETIME
)
"""


async def _set_streak(db, user_id: int, streak: int, best: int, last_login: datetime | None) -> None:
    await db.execute(
        update(UserProgress)
        .where(UserProgress.user_id == user_id)
        .values(streak=streak, best_streak=best, last_login_date=last_login)
    )
    await db.commit()


async def _stored(db, user_id: int):
    result = await db.execute(
        select(UserProgress.streak, UserProgress.best_streak).where(UserProgress.user_id == user_id)
    )
    return result.one()


async def _downgrade_progress_table(db, user_id: int | None = None, streak: int = 0) -> None:
    """Rebuild user_progress without last_login_date, as before migration 002."""
    await db.execute(text("DROP TABLE user_progress"))
    await db.execute(text(LEGACY_PROGRESS_DDL))
    if user_id is not None:
        await db.execute(
            text("INSERT INTO user_progress (user_id, streak, best_streak) VALUES (:uid, :s, :s)"),
            {"uid": user_id, "s": streak},
        )
    await db.commit()


class TestUpdateStreak:

    @pytest.mark.asyncio
    async def test_next_day_login_extends_streak(self, db_session, user):
        await _set_streak(db_session, user.id, 5, 5, JAN_1)

        result = await update_streak(db_session, user.id, datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc))

        assert (result.streak, result.best_streak) == (6, 6)
        assert tuple(await _stored(db_session, user.id)) == (6, 6)

    @pytest.mark.asyncio
    async def test_same_day_is_idempotent(self, db_session, user):
        await _set_streak(db_session, user.id, 5, 5, JAN_1)
        now = datetime(2024, 1, 2, 8, 0, tzinfo=timezone.utc)

        first = await update_streak(db_session, user.id, now)
        second = await update_streak(db_session, user.id, now.replace(hour=22))

        assert first.streak == 6
        assert second.streak == 6
        assert tuple(await _stored(db_session, user.id)) == (6, 6)

    @pytest.mark.asyncio
    async def test_gap_resets_but_keeps_best(self, db_session, user):
        await _set_streak(db_session, user.id, 12, 20, JAN_1)

        result = await update_streak(db_session, user.id, datetime(2024, 1, 5, tzinfo=timezone.utc))

        assert (result.streak, result.best_streak) == (1, 20)

    @pytest.mark.asyncio
    async def test_first_login_leaves_streak_and_records_date(self, db_session, user):
        now = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

        result = await update_streak(db_session, user.id, now)

        assert (result.streak, result.best_streak) == (0, 0)
        progress = await get_progress(db_session, user.id)
        assert progress["last_login_date"] is not None

        follow_up = await update_streak(db_session, user.id, datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc))
        assert follow_up.streak == 1

    @pytest.mark.asyncio
    async def test_missing_progress_row_returns_zeroes(self, db_session, database):
        result = await update_streak(db_session, 9999, JAN_1)
        assert (result.streak, result.best_streak) == (0, 0)


class TestStreakSchemaDrift:

    @pytest.mark.asyncio
    async def test_legacy_schema_detected_on_first_use(self, db_session, user):
        await _downgrade_progress_table(db_session, user.id, streak=5)
        reset_schema_cache()

        result = await update_streak(db_session, user.id, datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc))

        assert (result.streak, result.best_streak) == (5, 5)
        assert await get_progress_schema(db_session) is ProgressSchema.LEGACY

        progress = await get_progress(db_session, user.id)
        assert progress["streak"] == 5
        assert progress["last_login_date"] is None

    @pytest.mark.asyncio
    async def test_column_dropped_after_detection_falls_back(self, db_session, user):
        assert await get_progress_schema(db_session) is ProgressSchema.FULL
        await _downgrade_progress_table(db_session, user.id, streak=3)

        result = await update_streak(db_session, user.id, datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc))

        assert (result.streak, result.best_streak) == (3, 3)
        assert await get_progress_schema(db_session) is ProgressSchema.LEGACY

    @pytest.mark.asyncio
    async def test_signup_on_legacy_schema(self, db_session, database):
        await _downgrade_progress_table(db_session)
        reset_schema_cache()

        user = await register_user(db_session, "lee@example.com", "lee", "Lee", "greenpass")

        progress = await get_progress(db_session, user.id)
        assert progress["level"] == 1
        assert progress["last_login_date"] is None
