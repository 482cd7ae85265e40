"""Drop the fixed upper bound on plant_health.

The maximum comes from ECO_PLANT_MAX_HEALTH, so the table only keeps
health from going negative.

Revision ID: 003_plant_health_bound
Revises: 002_last_login_date
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "003_plant_health_bound"
down_revision: str | None = "002_last_login_date"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute("ALTER TABLE plant_health DROP CONSTRAINT IF EXISTS plant_health_range")
    op.execute("""
        ALTER TABLE plant_health
        ADD CONSTRAINT plant_health_non_negative CHECK (plant_health >= 0)
    """)


def downgrade() -> None:
    op.execute("ALTER TABLE plant_health DROP CONSTRAINT IF EXISTS plant_health_non_negative")
    op.execute("UPDATE plant_health SET plant_health = 3 WHERE plant_health > 3")
    op.execute("UPDATE plant_health SET health_baseline = 3 WHERE health_baseline > 3")
    op.execute("""
        ALTER TABLE plant_health
        ADD CONSTRAINT plant_health_range CHECK (plant_health BETWEEN 0 AND 3)
    """)
