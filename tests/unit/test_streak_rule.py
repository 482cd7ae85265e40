"""Daily streak continuity rule: UTC calendar-day boundaries."""

from datetime import datetime, timezone

from ecotrack.gamification.streak_service import StreakResult, compute_streak


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestComputeStreak:
    def test_next_day_increments(self):
        """Last login 2024-01-01T00:00Z, now 2024-01-02T10:00Z: 5 -> 6."""
        result = compute_streak(5, 5, _utc(2024, 1, 1, 0, 0), _utc(2024, 1, 2, 10, 0))
        assert result == StreakResult(streak=6, best_streak=6)

    def test_same_day_unchanged(self):
        result = compute_streak(4, 7, _utc(2024, 1, 1, 0, 5), _utc(2024, 1, 1, 23, 59))
        assert result == StreakResult(streak=4, best_streak=7)

    def test_gap_resets_to_one(self):
        result = compute_streak(9, 9, _utc(2024, 1, 1, 12), _utc(2024, 1, 3, 12))
        assert result == StreakResult(streak=1, best_streak=9)

    def test_future_login_resets_to_one(self):
        """A stored login after ``now`` (clock skew) restarts the streak."""
        result = compute_streak(3, 3, _utc(2024, 1, 5), _utc(2024, 1, 4))
        assert result == StreakResult(streak=1, best_streak=3)

    def test_unknown_last_login_unchanged(self):
        result = compute_streak(2, 6, None, _utc(2024, 1, 4))
        assert result == StreakResult(streak=2, best_streak=6)

    def test_midnight_boundary_counts_as_next_day(self):
        """23:59:59 and 00:00:00 are one calendar day apart even one second later."""
        result = compute_streak(1, 1, _utc(2024, 1, 1, 23, 59, 59), _utc(2024, 1, 2, 0, 0, 0))
        assert result.streak == 2

    def test_best_streak_never_below_streak(self):
        """A best_streak lagging behind the stored streak is repaired."""
        result = compute_streak(5, 2, _utc(2024, 1, 1), _utc(2024, 1, 1, 8))
        assert result.best_streak == 5

    def test_naive_datetimes_are_utc(self):
        result = compute_streak(1, 1, datetime(2024, 2, 28, 22), _utc(2024, 2, 29, 1))
        assert result.streak == 2

    def test_idempotent_within_a_day(self):
        first = compute_streak(5, 5, _utc(2024, 1, 1), _utc(2024, 1, 2, 10))
        second = compute_streak(first.streak, first.best_streak, _utc(2024, 1, 2, 10), _utc(2024, 1, 2, 18))
        assert second == first
