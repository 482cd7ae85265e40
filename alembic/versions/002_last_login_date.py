"""Add user_progress.last_login_date for the daily login streak.

Until this runs, the API falls back to the legacy progress shape and
leaves streaks unchanged (see ecotrack.db.schema).

Revision ID: 002_last_login_date
Revises: 001_baseline
Create Date: 2025-11-21
"""

from collections.abc import Sequence

from alembic import op

revision: str = "002_last_login_date"
down_revision: str | None = "001_baseline"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("""
        ALTER TABLE user_progress
        ADD COLUMN IF NOT EXISTS last_login_date TIMESTAMPTZ
    """)


def downgrade() -> None:
    op.execute("ALTER TABLE user_progress DROP COLUMN IF EXISTS last_login_date")
