"""Schema capability probe for ``user_progress``.

``last_login_date`` arrived in migration 002. A database that is still
mid-migration serves the reduced (legacy) row shape, and everything that
reads or writes progress branches on :class:`ProgressSchema` instead of
string-matching driver errors at each call site.

The probe runs once per engine. If a statement later fails with an
"undefined column" error the cached capability is downgraded to LEGACY and
the statement is rebuilt in the reduced shape.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import inspect
from sqlalchemy.exc import DBAPIError, NoSuchTableError

from ecotrack.db.models import UserProgress
from ecotrack.errors import SchemaDriftError, StorageError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine, Result
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.sql import Executable

logger = structlog.get_logger()

OPTIONAL_PROGRESS_COLUMN = "last_login_date"

# PostgreSQL SQLSTATE for undefined_column
_PG_UNDEFINED_COLUMN = "42703"


class ProgressSchema(enum.Enum):
    """Which shape of ``user_progress`` the live database serves."""

    FULL = "full"
    LEGACY = "legacy"


@dataclass(frozen=True)
class FullProgressRow:
    """Streak fields read from an upgraded schema."""

    streak: int
    best_streak: int
    last_login_date: datetime | None


@dataclass(frozen=True)
class LegacyProgressRow:
    """Streak fields read from a schema without ``last_login_date``."""

    streak: int
    best_streak: int

    @property
    def last_login_date(self) -> None:
        return None


ProgressRow = FullProgressRow | LegacyProgressRow

_capabilities: dict[Engine, ProgressSchema] = {}


def reset_schema_cache() -> None:
    """Forget every probed capability (used by tests and after migrations)."""
    _capabilities.clear()


def _probe(sync_conn: Any) -> ProgressSchema:  # noqa: ANN401
    try:
        columns = {c["name"] for c in inspect(sync_conn).get_columns(UserProgress.__tablename__)}
    except NoSuchTableError:
        # No table at all: callers fail later with a StorageError; the full
        # shape is the one a fresh migration will create.
        return ProgressSchema.FULL
    if OPTIONAL_PROGRESS_COLUMN in columns:
        return ProgressSchema.FULL
    return ProgressSchema.LEGACY


async def get_progress_schema(db: AsyncSession) -> ProgressSchema:
    """Return the cached capability for this session's engine, probing once."""
    conn = await db.connection()
    engine = conn.sync_engine
    schema = _capabilities.get(engine)
    if schema is None:
        schema = await conn.run_sync(_probe)
        _capabilities[engine] = schema
        if schema is ProgressSchema.LEGACY:
            logger.warning("schema_drift_detected", table="user_progress", missing=OPTIONAL_PROGRESS_COLUMN)
    return schema


def is_undefined_column(exc: DBAPIError) -> bool:
    """True when a driver error means a referenced column does not exist."""
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _PG_UNDEFINED_COLUMN:
        return True
    message = str(orig).lower()
    return "no such column" in message or "has no column named" in message


async def _execute(db: AsyncSession, stmt: Executable) -> Result[Any]:
    try:
        return await db.execute(stmt)
    except DBAPIError as exc:
        if is_undefined_column(exc):
            raise SchemaDriftError(str(exc.orig)) from exc
        msg = "Progress store failure"
        raise StorageError(msg) from exc


async def execute_progress(
    db: AsyncSession,
    build: Callable[[ProgressSchema], Executable],
) -> tuple[Result[Any], ProgressSchema]:
    """Execute a progress statement built for the live schema shape.

    Returns the result together with the shape that was actually used. A
    drift error on the full shape rolls back the session, downgrades the
    cached capability and retries once with the legacy shape.
    """
    schema = await get_progress_schema(db)
    engine = (await db.connection()).sync_engine
    try:
        return await _execute(db, build(schema)), schema
    except SchemaDriftError:
        if schema is ProgressSchema.LEGACY:
            msg = "Progress store failure"
            raise StorageError(msg) from None
        await db.rollback()
        _capabilities[engine] = ProgressSchema.LEGACY
        logger.warning("schema_drift_detected", table="user_progress", missing=OPTIONAL_PROGRESS_COLUMN)
        return await _execute(db, build(ProgressSchema.LEGACY)), ProgressSchema.LEGACY


def progress_columns(schema: ProgressSchema) -> list[Any]:
    """Columns of ``user_progress`` that are safe to select for ``schema``."""
    columns = [
        UserProgress.level,
        UserProgress.xp,
        UserProgress.points,
        UserProgress.seeds,
        UserProgress.total_savings,
        UserProgress.co2_saved,
        UserProgress.streak,
        UserProgress.best_streak,
        UserProgress.completed_task_ids,
    ]
    if schema is ProgressSchema.FULL:
        columns.append(UserProgress.last_login_date)
    return columns


def to_progress_row(schema: ProgressSchema, row: Any | None) -> ProgressRow:  # noqa: ANN401
    """Build the tagged streak row for ``schema`` (zero defaults when missing)."""
    if schema is ProgressSchema.FULL:
        if row is None:
            return FullProgressRow(streak=0, best_streak=0, last_login_date=None)
        return FullProgressRow(
            streak=row.streak or 0,
            best_streak=row.best_streak or 0,
            last_login_date=row.last_login_date,
        )
    if row is None:
        return LegacyProgressRow(streak=0, best_streak=0)
    return LegacyProgressRow(streak=row.streak or 0, best_streak=row.best_streak or 0)
