"""Shared fixtures."""

import random

import pytest

from popcorn.game.models import FallingObject, PlayField
from popcorn.utils.profile import PlayerProfile


class RecordingSleep:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def field() -> PlayField:
    return PlayField(width=420, height=720, ratio=1.0)


@pytest.fixture
def profile() -> PlayerProfile:
    return PlayerProfile(name="Ana", skin="Red.png")


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


def catchable(x: float = 210.0) -> FallingObject:
    """An object falling into the mouth of a centred catcher on a 420x720 field."""
    return FallingObject(x=x, y=640.0, vx=0.0, vy=2.0, radius=14.0)


def about_to_land(x: float = 40.0) -> FallingObject:
    """An object that crosses the floor on the next nominal frame."""
    return FallingObject(x=x, y=699.0, vx=0.0, vy=1.0, radius=14.0)
