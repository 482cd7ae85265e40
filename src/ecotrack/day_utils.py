"""UTC day arithmetic shared by the streak and plant-health rules."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    """Current wall-clock time, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC. Naive values are taken as UTC.

    SQLite hands back naive datetimes even for ``DateTime(timezone=True)``.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_date(dt: datetime) -> date:
    """Calendar date of ``dt`` in UTC."""
    return as_utc(dt).date()


def utc_midnight(dt: datetime) -> datetime:
    """Midnight (00:00 UTC) of the UTC calendar day containing ``dt``."""
    d = utc_date(dt)
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def calendar_days_between(earlier: datetime, later: datetime) -> int:
    """Whole UTC calendar days from ``earlier`` to ``later``. Negative if reversed."""
    return (utc_midnight(later) - utc_midnight(earlier)) // ONE_DAY


def full_days_elapsed(earlier: datetime, later: datetime) -> int:
    """Whole 24-hour periods elapsed between two instants (floored)."""
    return (as_utc(later) - as_utc(earlier)) // ONE_DAY
