"""Tests for spawn timing and new object placement."""

import random

import pytest

from popcorn.game.models import PlayField
from popcorn.game.spawner import (
    FIRST_SPAWN_GRACE_MS,
    INITIAL_SPAWN_DELAY_MS,
    MIN_SPAWN_DELAY_MS,
    SpawnScheduler,
    spawn_delay,
    speed_boost,
)


class TestSpawnDelay:
    def test_initial_delay_at_start(self):
        assert spawn_delay(0.0) == pytest.approx(INITIAL_SPAWN_DELAY_MS)

    def test_never_increases(self):
        delays = [spawn_delay(t / 2) for t in range(0, 400)]
        assert all(a >= b for a, b in zip(delays, delays[1:]))

    def test_never_below_floor(self):
        for t in (0, 10, 60, 120, 600, 10_000):
            assert spawn_delay(t) >= MIN_SPAWN_DELAY_MS

    def test_reaches_floor_late_in_a_session(self):
        assert spawn_delay(300.0) == MIN_SPAWN_DELAY_MS


def test_speed_boost_is_capped():
    assert speed_boost(0.0) == pytest.approx(1.0)
    assert speed_boost(1e9) == pytest.approx(1.35)


class TestScheduler:
    def test_first_spawn_waits_for_grace_and_delay(self, field, rng):
        scheduler = SpawnScheduler(field, rng=rng)
        scheduler.reset(1000.0)

        grace_end = 1000.0 + FIRST_SPAWN_GRACE_MS
        assert scheduler.next_spawn_at == pytest.approx(grace_end + spawn_delay(0.3))
        assert scheduler.maybe_spawn(grace_end) is None

    def test_spawns_once_deadline_passes(self, field, rng):
        scheduler = SpawnScheduler(field, rng=rng)
        scheduler.reset(0.0)

        now = scheduler.next_spawn_at
        obj = scheduler.maybe_spawn(now)

        assert obj is not None
        assert scheduler.next_spawn_at > now
        assert scheduler.maybe_spawn(now) is None

    def test_reset_forgets_previous_session(self, field, rng):
        scheduler = SpawnScheduler(field, rng=rng)
        scheduler.reset(0.0)
        scheduler.reset(50_000.0)
        assert scheduler.elapsed_seconds(50_000.0) == 0.0
        assert scheduler.next_spawn_at > 50_000.0


class TestCreateObject:
    def test_shape_and_band(self):
        field = PlayField(width=840, height=1440, ratio=2.0)
        scheduler = SpawnScheduler(field, rng=random.Random(7))

        for _ in range(200):
            obj = scheduler.create_object(elapsed_seconds=0.0)
            assert 0.15 * field.width <= obj.x <= 0.85 * field.width
            assert obj.y == pytest.approx(40.0)
            assert obj.radius == pytest.approx(28.0)
            assert obj.vy == pytest.approx(0.7)
            assert 4.0 <= abs(obj.vx) <= 16.0
            assert not obj.dead and not obj.caught

    def test_both_directions_occur(self, field):
        scheduler = SpawnScheduler(field, rng=random.Random(3))
        signs = {scheduler.create_object(0.0).vx > 0 for _ in range(50)}
        assert signs == {True, False}

    def test_horizontal_speed_grows_with_time(self, field):
        early = SpawnScheduler(field, rng=random.Random(5)).create_object(0.0)
        late = SpawnScheduler(field, rng=random.Random(5)).create_object(120.0)
        assert abs(late.vx) > abs(early.vx)
