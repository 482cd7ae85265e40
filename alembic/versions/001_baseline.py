"""Baseline schema: users, progress, EcoBuddy, catalogues, garden, social.

``user_progress.last_login_date`` is intentionally absent; it arrives in
002. Databases stamped at this revision serve the legacy progress shape.

Revision ID: 001_baseline
Revises: None
Create Date: 2025-11-01
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id SERIAL PRIMARY KEY,
            email VARCHAR(255) UNIQUE NOT NULL,
            username VARCHAR(50) UNIQUE NOT NULL,
            password_hash VARCHAR(255) NOT NULL,
            name VARCHAR(255) NOT NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # --- Progress ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_progress (
            id SERIAL PRIMARY KEY,
            user_id INTEGER UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            level INTEGER NOT NULL DEFAULT 1,
            xp INTEGER NOT NULL DEFAULT 0,
            points INTEGER NOT NULL DEFAULT 0,
            seeds INTEGER NOT NULL DEFAULT 0,
            total_savings NUMERIC(10, 2) NOT NULL DEFAULT 0,
            co2_saved NUMERIC(10, 2) NOT NULL DEFAULT 0,
            streak INTEGER NOT NULL DEFAULT 0,
            best_streak INTEGER NOT NULL DEFAULT 0,
            completed_task_ids JSON NOT NULL DEFAULT '[]',
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_progress_points
        ON user_progress(points DESC)
    """)

    # --- EcoBuddy ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_ecobuddy (
            id SERIAL PRIMARY KEY,
            user_id INTEGER UNIQUE NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            name VARCHAR(50) NOT NULL DEFAULT 'EcoBuddy',
            level INTEGER NOT NULL DEFAULT 1,
            accessories JSON NOT NULL DEFAULT '[]',
            mood VARCHAR(20) NOT NULL DEFAULT 'happy',
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # --- Achievements ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS achievements (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) UNIQUE NOT NULL,
            description TEXT NOT NULL,
            icon VARCHAR(10) NOT NULL,
            requirement_type VARCHAR(50) NOT NULL,
            requirement_value INTEGER NOT NULL
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievements (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            achievement_id INTEGER NOT NULL REFERENCES achievements(id) ON DELETE CASCADE,
            unlocked_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT user_achievements_user_achievement_key UNIQUE (user_id, achievement_id)
        )
    """)

    # --- Challenges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS challenges (
            id SERIAL PRIMARY KEY,
            title VARCHAR(255) UNIQUE NOT NULL,
            description TEXT NOT NULL,
            difficulty VARCHAR(20) NOT NULL,
            points INTEGER NOT NULL,
            category VARCHAR(50) NOT NULL,
            target_value INTEGER,
            duration_days INTEGER NOT NULL DEFAULT 7
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_challenges (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            challenge_id INTEGER NOT NULL REFERENCES challenges(id) ON DELETE CASCADE,
            status VARCHAR(20) NOT NULL DEFAULT 'active',
            progress INTEGER NOT NULL DEFAULT 0,
            points_earned INTEGER NOT NULL DEFAULT 0,
            started_at TIMESTAMPTZ DEFAULT NOW(),
            completed_at TIMESTAMPTZ,
            updated_at TIMESTAMPTZ,
            CONSTRAINT user_challenges_user_challenge_key UNIQUE (user_id, challenge_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_user_challenges_status
        ON user_challenges(user_id, status)
    """)

    # --- Garden ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS garden_items (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            description TEXT,
            item_type VARCHAR(20) NOT NULL,
            cost_seeds INTEGER NOT NULL DEFAULT 0,
            image_path VARCHAR(255),
            sort_order INTEGER NOT NULL DEFAULT 0,
            CONSTRAINT garden_items_name_type_key UNIQUE (name, item_type)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_garden_items (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            item_id INTEGER NOT NULL REFERENCES garden_items(id) ON DELETE CASCADE,
            planted_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT user_garden_items_user_item_key UNIQUE (user_id, item_id)
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_garden_background (
            user_id INTEGER PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            background_id INTEGER NOT NULL REFERENCES garden_items(id) ON DELETE CASCADE
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS plant_health (
            user_id INTEGER PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            plant_health INTEGER NOT NULL DEFAULT 3,
            health_baseline INTEGER NOT NULL DEFAULT 3,
            consecutive_water_days INTEGER NOT NULL DEFAULT 0,
            last_watered_at TIMESTAMPTZ,
            updated_at TIMESTAMPTZ,
            CONSTRAINT plant_health_range CHECK (plant_health BETWEEN 0 AND 3)
        )
    """)

    # --- Social ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_friends (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            friend_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            status VARCHAR(20) NOT NULL DEFAULT 'accepted',
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT user_friends_user_friend_key UNIQUE (user_id, friend_id),
            CONSTRAINT user_friends_no_self CHECK (user_id != friend_id)
        )
    """)

    # --- Energy usage ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS energy_usage (
            id SERIAL PRIMARY KEY,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            date DATE NOT NULL,
            category VARCHAR(50) NOT NULL,
            usage_kwh NUMERIC(10, 2) NOT NULL,
            savings_kwh NUMERIC(10, 2) NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            CONSTRAINT energy_usage_user_date_category_key UNIQUE (user_id, date, category)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_energy_usage_user_date
        ON energy_usage(user_id, date DESC)
    """)


def downgrade() -> None:
    for table in (
        "energy_usage",
        "user_friends",
        "plant_health",
        "user_garden_background",
        "user_garden_items",
        "garden_items",
        "user_challenges",
        "challenges",
        "user_achievements",
        "achievements",
        "user_ecobuddy",
        "user_progress",
        "users",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")  # noqa: S608
