"""Tests for object motion, catching and the catcher."""

import pytest

from conftest import about_to_land, catchable
from popcorn.game.models import FallingObject, PlayField
from popcorn.game.physics import (
    CATCH_BAND_MIN,
    PhysicsWorld,
    band_thickness,
    bounce_walls,
    catch_band,
    gravity_at,
    intersects_catch_band,
)


def test_gravity_grows_with_time():
    assert gravity_at(0.0) == pytest.approx(0.32)
    assert gravity_at(10.0) == pytest.approx(0.38)
    assert gravity_at(10.0, ratio=2.0) == pytest.approx(0.76)


class TestCatchBand:
    def test_thickness_has_a_floor(self):
        assert band_thickness(0.0, 1.0) == CATCH_BAND_MIN
        assert band_thickness(5.0, 1.0) == CATCH_BAND_MIN

    def test_thickness_covers_one_frame_of_fall(self):
        assert band_thickness(30.0, 1.0) == pytest.approx(36.0)
        assert band_thickness(-30.0, 1.0) == pytest.approx(36.0)

    def test_thickness_is_monotone_in_speed(self):
        values = [band_thickness(vy, 1.5) for vy in range(0, 100)]
        assert all(a <= b for a, b in zip(values, values[1:]))

    def test_band_sits_in_the_mouth(self, field):
        world = PhysicsWorld(field)
        band = catch_band(world.catcher, vy=1.0, frame_factor=1.0)

        # Catcher is 120px square at (150, 580)
        assert band.y + band.height == pytest.approx(580 + 102)
        assert band.height == CATCH_BAND_MIN
        assert band.x == pytest.approx(150 + 7.2)
        assert band.width == pytest.approx(120 - 14.4)


class TestIntersects:
    def test_falling_object_in_band(self, field):
        world = PhysicsWorld(field)
        obj = FallingObject(x=210, y=656, vx=0, vy=1, radius=14)
        assert intersects_catch_band(obj, world.catcher, 1.0)

    @pytest.mark.parametrize("vy", [0.0, -1.0, -20.0])
    def test_rising_or_still_objects_are_never_caught(self, field, vy):
        world = PhysicsWorld(field)
        obj = FallingObject(x=210, y=656, vx=0, vy=vy, radius=14)
        assert not intersects_catch_band(obj, world.catcher, 1.0)

    def test_object_beside_the_catcher(self, field):
        world = PhysicsWorld(field)
        obj = FallingObject(x=60, y=656, vx=0, vy=1, radius=14)
        assert not intersects_catch_band(obj, world.catcher, 1.0)

    def test_fast_object_cannot_tunnel(self, field):
        """The band stretches to one frame of travel at high speed."""
        world = PhysicsWorld(field)
        # Bottom point well above the minimal band, but within one frame of fall
        obj = FallingObject(x=210, y=600, vx=0, vy=60, radius=14)
        assert intersects_catch_band(obj, world.catcher, 1.0)


class TestBounceWalls:
    def test_left_wall(self):
        obj = FallingObject(x=10, y=100, vx=5, vy=0, radius=14)
        assert bounce_walls(obj, left=20, right=400)
        assert obj.x == 20
        assert obj.vx == pytest.approx(-4.9)

    def test_right_wall(self):
        obj = FallingObject(x=405, y=100, vx=6, vy=0, radius=14)
        assert bounce_walls(obj, left=20, right=400)
        assert obj.x == 400
        assert obj.vx == pytest.approx(-5.88)

    def test_resting_on_the_bound_is_untouched(self):
        obj = FallingObject(x=20, y=100, vx=-3, vy=0, radius=14)
        assert not bounce_walls(obj, left=20, right=400)
        assert obj.x == 20 and obj.vx == -3

        obj = FallingObject(x=400, y=100, vx=3, vy=0, radius=14)
        assert not bounce_walls(obj, left=20, right=400)
        assert obj.vx == 3

    def test_inside_is_untouched(self):
        obj = FallingObject(x=200, y=100, vx=3, vy=0, radius=14)
        assert not bounce_walls(obj, left=20, right=400)
        assert obj.x == 200 and obj.vx == 3

    def test_world_keeps_objects_inside(self, field):
        world = PhysicsWorld(field)
        obj = FallingObject(x=25, y=100, vx=-30, vy=0, radius=14)
        world.add(obj)
        world.step(1.0, 0.0)
        assert obj.x == pytest.approx(field.min_x + obj.radius)
        assert obj.vx > 0

    def test_zero_length_frame_does_not_bounce_again(self, field):
        world = PhysicsWorld(field)
        obj = FallingObject(x=25, y=100, vx=-30, vy=0, radius=14)
        world.add(obj)

        world.step(1.0, 0.0)
        assert obj.x == 20
        assert obj.vx == pytest.approx(29.4)

        world.step(0.0, 0.0)
        assert obj.x == 20
        assert obj.vx == pytest.approx(29.4)


class TestStep:
    def test_integration(self, field):
        world = PhysicsWorld(field)
        obj = FallingObject(x=200, y=100, vx=2, vy=1, radius=14)
        world.add(obj)

        world.step(2.0, 0.0)

        assert obj.vy == pytest.approx(1 + 0.32 * 2)
        assert obj.x == pytest.approx(204)
        assert obj.y == pytest.approx(100 + obj.vy * 2)

    def test_catch_marks_object_and_calls_hook(self, field):
        hooked = []
        world = PhysicsWorld(field, on_catch=lambda obj, catcher: hooked.append(obj))
        obj = catchable()
        world.add(obj)

        result = world.step(1.0, 0.0)

        assert result.caught == [obj]
        assert obj.caught and obj.dead
        assert hooked == [obj]
        assert not result.ended

    def test_caught_object_is_not_simulated_again(self, field):
        world = PhysicsWorld(field)
        obj = catchable()
        world.add(obj)
        world.step(1.0, 0.0)
        y = obj.y

        result = world.step(1.0, 0.0)

        assert result.caught == []
        assert obj.y == y

    def test_floor_hit_wins_over_catch(self, field):
        """An object touching the floor ends the session even inside the band."""
        world = PhysicsWorld(field)
        world.catcher.y = 620  # Band spans 700..722, across the floor at 712
        obj = FallingObject(x=210, y=699, vx=0, vy=1, radius=14)
        world.add(obj)

        result = world.step(1.0, 0.0)

        assert result.floor_hit is obj
        assert result.caught == []
        assert not obj.caught

    def test_floor_hit_stops_the_frame(self, field):
        world = PhysicsWorld(field)
        lander = about_to_land()
        later = catchable()
        world.add(lander)
        world.add(later)

        result = world.step(1.0, 0.0)

        assert result.ended
        assert not later.caught
        assert later.y == 640.0

    def test_catch_before_floor_hit_counts(self, field):
        world = PhysicsWorld(field)
        first = catchable()
        world.add(first)
        world.add(about_to_land())

        result = world.step(1.0, 0.0)

        assert result.caught == [first]
        assert result.ended


class TestCompaction:
    def test_dead_objects_dropped_past_limit(self, field):
        world = PhysicsWorld(field, retention_limit=3)
        for _ in range(5):
            world.add(FallingObject(x=100, y=100, vx=0, vy=0, radius=14, dead=True))
        live = FallingObject(x=210, y=100, vx=0, vy=0, radius=14)
        world.add(live)

        world.step(1.0, 0.0)

        assert world.objects == [live]

    def test_kept_below_limit(self, field):
        world = PhysicsWorld(field)
        for _ in range(5):
            world.add(FallingObject(x=100, y=100, vx=0, vy=0, radius=14, dead=True))

        world.step(1.0, 0.0)

        assert len(world.objects) == 5


class TestCatcher:
    def test_placed_centred_above_bottom_margin(self, field):
        world = PhysicsWorld(field)
        assert world.catcher.x == 150
        assert world.catcher.y == 580
        assert world.catcher.width == 120

    def test_scaled_by_pixel_ratio(self):
        world = PhysicsWorld(PlayField(width=840, height=1440, ratio=2.0))
        assert world.catcher.width == 240
        assert world.catcher.y == 1440 - 240 - 40

    def test_follows_pointer_while_held(self, field):
        world = PhysicsWorld(field)
        world.press(200)
        world.step(1.0, 0.0)
        assert world.catcher.x == 140

    def test_eases_after_release(self, field):
        world = PhysicsWorld(field)
        world.press(250)
        world.release()
        world.step(1.0, 0.0)
        # Target 190, a quarter of the way from 150
        assert world.catcher.x == pytest.approx(160)

    def test_clamped_to_edges(self, field):
        world = PhysicsWorld(field)
        world.press(0)
        world.step(1.0, 0.0)
        assert world.catcher.x == 4

        world.drag(1000)
        world.step(1.0, 0.0)
        assert world.catcher.x == 420 - 120 - 4

    def test_drag_without_press_is_ignored(self, field):
        world = PhysicsWorld(field)
        world.drag(300)
        world.step(1.0, 0.0)
        assert world.catcher.x == 150
        assert world.catcher.target_x is None

    def test_reset_recentres(self, field):
        world = PhysicsWorld(field)
        world.press(0)
        world.step(1.0, 0.0)
        world.add(catchable())

        world.reset()

        assert world.catcher.x == 150
        assert world.objects == []
