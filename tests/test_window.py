"""Tests for the window's screen flow (no display needed)."""

import asyncio
import logging

import pygame
import pytest

from conftest import RecordingSleep, about_to_land
from popcorn.core.events import Event, EventType
from popcorn.errors import StoreUnavailable
from popcorn.graphics.assets import AssetCache
from popcorn.leaderboard.store import InMemoryStore
from popcorn.leaderboard.sync import LeaderboardSync
from popcorn.simulator.window import GameWindow, Screen, WindowConfig
from popcorn.utils.profile import PlayerProfile, Skin


@pytest.fixture
def window(tmp_path):
    win = GameWindow(
        leaderboard=LeaderboardSync(InMemoryStore()),
        assets=AssetCache(tmp_path),
        skins=[Skin("Blue.png"), Skin("Red.png")],
        profile=PlayerProfile(name="Ana", skin="Red.png"),
        profile_path=tmp_path / "profile.json",
        config=WindowConfig(width=420, height=720, pixel_ratio=2.0),
    )
    yield win
    logging.getLogger().removeHandler(win._log_handler)


def test_field_uses_device_pixels(window):
    assert (window.field.width, window.field.height) == (840, 1440)
    assert window._pointer_x(210) == 420


def test_restores_selected_skin(window):
    assert window._skin_index == 1


def test_skin_cycling_saves_profile(window):
    window._select_skin(1)
    assert window.profile.skin == "Blue.png"
    assert PlayerProfile.load(window.profile_path).skin == "Blue.png"


def test_session_end_shows_game_over(window):
    window.event_bus.emit(Event(EventType.SESSION_ENDED, data={"name": "Ana", "score": 9, "session": 1}))

    assert window.screen == Screen.OVER
    assert window._final_score == 9
    assert window._save_status[0] == "Saving score..."


def test_save_result_for_current_session(window):
    window.event_bus.emit(Event(EventType.SESSION_ENDED, data={"name": "Ana", "score": 9, "session": 1}))
    window.event_bus.emit(Event(EventType.SCORE_SAVE_FAILED, data={"name": "Ana", "score": 9, "session": 1}))

    assert window._save_status[0] == "Your score could not be confirmed as saved."


def test_stale_save_result_ignored(window):
    window.event_bus.emit(Event(EventType.SESSION_ENDED, data={"name": "Ana", "score": 9, "session": 1}))
    window.event_bus.emit(Event(EventType.SCORE_SAVED, data={"name": "Ana", "score": 9, "session": 0}))

    assert window._save_status[0] == "Saving score..."


def test_catch_starts_a_burst(window):
    window.event_bus.emit(Event(EventType.OBJECT_CAUGHT, data={"x": 100.0, "y": 200.0}))
    assert len(window.effects.bursts) == 1


def test_uninstalled_skin_is_forgotten(tmp_path):
    win = GameWindow(
        leaderboard=LeaderboardSync(InMemoryStore()),
        assets=AssetCache(tmp_path),
        skins=[Skin("Blue.png")],
        profile=PlayerProfile(name="Ana", skin="Gone.png"),
        profile_path=tmp_path / "profile.json",
    )
    try:
        assert win.profile.skin == ""
        assert not win.profile.is_valid
    finally:
        logging.getLogger().removeHandler(win._log_handler)


class SlowThenDownStore(InMemoryStore):
    """First write waits on ``gate``; every later write fails."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()
        self.attempted = 0

    async def write(self, document):
        self.attempted += 1
        if self.attempted > 1:
            raise StoreUnavailable("store is down")
        await self.gate.wait()
        return await super().write(document)


def test_late_save_of_earlier_session_with_same_score(tmp_path):
    """Two sessions end as ("Ana", 0); only the second one's outcome is shown."""
    store = SlowThenDownStore()
    win = GameWindow(
        leaderboard=LeaderboardSync(store, sleep=RecordingSleep()),
        assets=AssetCache(tmp_path),
        skins=[Skin("Red.png")],
        profile=PlayerProfile(name="Ana", skin="Red.png"),
        profile_path=tmp_path / "profile.json",
    )
    profile = PlayerProfile(name="Ana", skin="Red.png")

    async def play_twice():
        win.session.start(profile, 0.0)
        win.session.world.add(about_to_land())
        win.session.tick(16.67)

        win.session.start(profile, 5000.0)
        win.session.world.add(about_to_land())
        win.session.tick(5016.67)

        # Second submission gives up while the first write is still pending
        while store.attempted < 1 + win.session.leaderboard.max_attempts:
            await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert win._save_status[0] == "Your score could not be confirmed as saved."

        store.gate.set()
        await win.session.wait_for_submissions()

    try:
        asyncio.run(play_twice())

        assert store.writes == 1
        assert win._save_status[0] == "Your score could not be confirmed as saved."
    finally:
        logging.getLogger().removeHandler(win._log_handler)


@pytest.mark.parametrize("release", [
    pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(10, 10)),
    pygame.event.Event(pygame.FINGERUP, x=0.1, y=0.1, finger_id=0),
])
def test_release_off_the_game_screen(window, release):
    window.session.press(100)
    window.screen = Screen.OVER

    window._handle_event(release)

    assert window.session.catcher.holding is False


def test_right_button_release_keeps_holding(window):
    window.session.press(100)

    window._handle_event(pygame.event.Event(pygame.MOUSEBUTTONUP, button=3, pos=(10, 10)))

    assert window.session.catcher.holding is True
