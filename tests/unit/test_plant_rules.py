"""Plant decay and watering rules."""

from datetime import datetime, timezone

from ecotrack.garden.plant_health import (
    PlantState,
    apply_decay,
    apply_watering,
    decayed_health,
    watered_today,
)


def _utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def _state(health: int = 3, baseline: int | None = None, days: int = 0, last: datetime | None = None) -> PlantState:
    return PlantState(
        plant_health=health,
        health_baseline=health if baseline is None else baseline,
        consecutive_water_days=days,
        last_watered_at=last,
    )


class TestDecay:
    def test_three_full_days_kill_the_plant(self):
        """Watered 2024-01-01T00:00Z, checked 2024-01-04T00:00Z: health 0."""
        state = _state(3, last=_utc(2024, 1, 1))
        assert decayed_health(state, _utc(2024, 1, 4)) == 0

    def test_partial_day_does_not_decay(self):
        state = _state(3, last=_utc(2024, 1, 1, 12))
        assert decayed_health(state, _utc(2024, 1, 2, 11, 59)) == 3

    def test_one_bar_per_full_day(self):
        state = _state(3, last=_utc(2024, 1, 1, 12))
        assert decayed_health(state, _utc(2024, 1, 2, 12)) == 2
        assert decayed_health(state, _utc(2024, 1, 3, 13)) == 1

    def test_never_below_zero(self):
        state = _state(2, last=_utc(2024, 1, 1))
        assert decayed_health(state, _utc(2024, 3, 1)) == 0

    def test_never_watered_is_dead(self):
        assert decayed_health(_state(3, last=None), _utc(2024, 1, 1)) == 0

    def test_repeated_checks_do_not_compound(self):
        """Decay is measured from the watering baseline, not from the last check."""
        state = _state(3, last=_utc(2024, 1, 1))
        once = apply_decay(state, _utc(2024, 1, 2, 1))
        twice = apply_decay(once, _utc(2024, 1, 2, 2))
        assert once.plant_health == 2
        assert twice.plant_health == 2

    def test_decay_never_raises_health(self):
        """A stored value below the baseline stays put."""
        state = _state(1, baseline=3, last=_utc(2024, 1, 1))
        assert decayed_health(state, _utc(2024, 1, 1, 6)) == 1

    def test_future_watering_treated_as_fresh(self):
        state = _state(3, last=_utc(2024, 1, 5))
        assert decayed_health(state, _utc(2024, 1, 4)) == 3


class TestWatering:
    def test_same_utc_day_detected(self):
        state = _state(3, last=_utc(2024, 1, 1, 0, 1))
        assert watered_today(state, _utc(2024, 1, 1, 23, 59))
        assert not watered_today(state, _utc(2024, 1, 2, 0, 0))

    def test_never_watered_is_not_today(self):
        assert not watered_today(_state(last=None), _utc(2024, 1, 1))

    def test_consecutive_day_extends_run(self):
        state = _state(2, days=1, last=_utc(2024, 1, 1, 20))
        watered = apply_watering(state, _utc(2024, 1, 2, 8))
        assert watered.consecutive_water_days == 2
        assert watered.plant_health == 2
        assert watered.health_baseline == 2
        assert watered.last_watered_at == _utc(2024, 1, 2, 8)

    def test_third_consecutive_day_restores_one_bar(self):
        state = _state(1, days=2, last=_utc(2024, 1, 2, 9))
        watered = apply_watering(state, _utc(2024, 1, 3, 8))
        assert watered.consecutive_water_days == 3
        assert watered.plant_health == 2

    def test_recovery_capped_at_max(self):
        state = _state(3, days=5, last=_utc(2024, 1, 2, 9))
        watered = apply_watering(state, _utc(2024, 1, 3, 8))
        assert watered.plant_health == 3

    def test_gap_resets_run(self):
        """Jan 2 was skipped: one bar lost and the run starts over."""
        state = _state(3, days=4, last=_utc(2024, 1, 1, 9))
        watered = apply_watering(state, _utc(2024, 1, 3, 9))
        assert watered.consecutive_water_days == 1
        assert watered.plant_health == 2

    def test_each_skipped_day_costs_a_bar(self):
        state = _state(3, days=1, last=_utc(2024, 1, 1, 23))
        assert apply_watering(state, _utc(2024, 1, 4, 0, 30)).plant_health == 1
        assert apply_watering(state, _utc(2024, 1, 5, 0, 30)).plant_health == 0

    def test_late_next_day_watering_keeps_health(self):
        """More than 24h passed, but no calendar day went without water."""
        state = _state(2, days=1, last=_utc(2024, 1, 2, 0, 0))
        watered = apply_watering(state, _utc(2024, 1, 3, 23, 0))
        assert watered.consecutive_water_days == 2
        assert watered.plant_health == 2

    def test_watering_restores_bar_lost_to_a_check(self):
        """A check between waterings lowered the stored value below the baseline."""
        state = _state(2, baseline=3, days=1, last=_utc(2024, 1, 1, 9))
        watered = apply_watering(state, _utc(2024, 1, 2, 10))
        assert watered.plant_health == 3
        assert watered.health_baseline == 3

    def test_same_time_every_day_never_decays(self):
        state = _state(3, days=0, last=_utc(2024, 1, 1, 9))
        for day in range(2, 9):
            state = apply_watering(state, _utc(2024, 1, day, 9))
            assert state.plant_health == 3
        assert state.consecutive_water_days == 7

    def test_dead_plant_stays_dead_without_a_run(self):
        state = _state(0, baseline=3, days=0, last=_utc(2024, 1, 1, 9))
        watered = apply_watering(state, _utc(2024, 1, 2, 9))
        assert watered.plant_health == 0

    def test_dead_plant_can_recover(self):
        state = _state(0, baseline=0, days=2, last=_utc(2024, 1, 1, 9))
        watered = apply_watering(state, _utc(2024, 1, 2, 9))
        assert watered.plant_health == 1

    def test_custom_recovery_threshold(self):
        state = _state(1, days=0, last=None)
        watered = apply_watering(state, _utc(2024, 1, 1), recovery_days=1)
        assert watered.plant_health == 1
