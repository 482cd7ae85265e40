"""ORM models for the EcoTrack schema.

Table layout follows alembic/versions. ``user_progress.last_login_date``
was added by a later migration and may be missing on databases that have
not been upgraded; it is mapped as a deferred column so entity loads never
select it implicitly (see ``ecotrack.db.schema``).
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ecotrack.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(Base):
    """Maps to the 'users' table."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )


class UserProgress(Base):
    """Derived gamification state, one row per user."""

    __tablename__ = "user_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    seeds: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    total_savings: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), server_default="0"
    )
    co2_saved: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), server_default="0"
    )
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    best_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    # Added by migration 002; never part of implicit entity loads
    last_login_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, deferred=True, deferred_raiseload=True
    )
    completed_task_ids: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )


class EcoBuddy(Base):
    """The user's virtual pet."""

    __tablename__ = "user_ecobuddy"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, default="EcoBuddy", server_default="EcoBuddy")
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")
    accessories: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    mood: Mapped[str] = mapped_column(String(20), nullable=False, default="happy", server_default="happy")
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Achievements
# ---------------------------------------------------------------------------


class Achievement(Base):
    """Achievement catalogue, seeded on startup."""

    __tablename__ = "achievements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str] = mapped_column(String(10), nullable=False)
    requirement_type: Mapped[str] = mapped_column(String(50), nullable=False)
    requirement_value: Mapped[int] = mapped_column(Integer, nullable=False)


class UserAchievement(Base):
    """Achievements unlocked by a user; UNIQUE(user_id, achievement_id)."""

    __tablename__ = "user_achievements"
    __table_args__ = (UniqueConstraint("user_id", "achievement_id", name="user_achievements_user_achievement_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    achievement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False
    )
    unlocked_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Challenges
# ---------------------------------------------------------------------------


class Challenge(Base):
    """Challenge catalogue, seeded on startup."""

    __tablename__ = "challenges"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    target_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    duration_days: Mapped[int] = mapped_column(Integer, nullable=False, default=7, server_default="7")


class UserChallenge(Base):
    """A challenge started by a user; at most one row per (user_id, challenge_id)."""

    __tablename__ = "user_challenges"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="user_challenges_user_challenge_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    challenge_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active", server_default="active")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    challenge: Mapped[Challenge] = relationship("Challenge", lazy="joined")


# ---------------------------------------------------------------------------
# Garden
# ---------------------------------------------------------------------------


class GardenItem(Base):
    """Shop catalogue of plants and backgrounds."""

    __tablename__ = "garden_items"
    __table_args__ = (UniqueConstraint("name", "item_type", name="garden_items_name_type_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    item_type: Mapped[str] = mapped_column(String(20), nullable=False)
    cost_seeds: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    image_path: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class UserGardenItem(Base):
    """A plant placed in a user's garden. Wiped when plant health reaches 0."""

    __tablename__ = "user_garden_items"
    __table_args__ = (UniqueConstraint("user_id", "item_id", name="user_garden_items_user_item_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    item_id: Mapped[int] = mapped_column(Integer, ForeignKey("garden_items.id", ondelete="CASCADE"), nullable=False)
    planted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )

    item: Mapped[GardenItem] = relationship("GardenItem", lazy="joined")


class UserGardenBackground(Base):
    """The background currently selected for a user's garden."""

    __tablename__ = "user_garden_background"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    background_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("garden_items.id", ondelete="CASCADE"), nullable=False
    )

    background: Mapped[GardenItem] = relationship("GardenItem", lazy="joined")


class PlantHealth(Base):
    """Per-user plant health and watering state.

    ``health_baseline`` is the health recorded at the last watering; decay is
    always measured from it so repeated checks on the same day are no-ops.
    """

    __tablename__ = "plant_health"
    __table_args__ = (CheckConstraint("plant_health >= 0", name="plant_health_non_negative"),)

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    plant_health: Mapped[int] = mapped_column(Integer, nullable=False, default=3, server_default="3")
    health_baseline: Mapped[int] = mapped_column(Integer, nullable=False, default=3, server_default="3")
    consecutive_water_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_watered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------


class UserFriend(Base):
    """Directed friendship row; accepted friendships are stored in both directions."""

    __tablename__ = "user_friends"
    __table_args__ = (
        UniqueConstraint("user_id", "friend_id", name="user_friends_user_friend_key"),
        CheckConstraint("user_id != friend_id", name="user_friends_no_self"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="accepted", server_default="accepted")
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )


# ---------------------------------------------------------------------------
# Energy analytics
# ---------------------------------------------------------------------------


class EnergyUsage(Base):
    """Daily energy usage per category; UNIQUE(user_id, date, category)."""

    __tablename__ = "energy_usage"
    __table_args__ = (UniqueConstraint("user_id", "date", "category", name="energy_usage_user_date_category_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    date: Mapped[Any] = mapped_column(Date, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    usage_kwh: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    savings_kwh: Mapped[Decimal] = mapped_column(
        Numeric(10, 2), nullable=False, default=Decimal("0"), server_default="0"
    )
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, default=_utcnow, server_default=func.now()
    )
