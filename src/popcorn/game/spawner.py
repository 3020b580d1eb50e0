"""Spawn scheduling for falling popcorn.

The delay between spawns decays exponentially with session time and is
clamped to a hard floor, so the spawn rate only ever increases.
"""

import math
import random
import logging
from typing import Optional

from popcorn.game.models import FallingObject, PlayField

logger = logging.getLogger(__name__)


# Spawn timing (milliseconds)
INITIAL_SPAWN_DELAY_MS = 1400.0
MIN_SPAWN_DELAY_MS = 120.0
SPAWN_ACCEL = 0.035               # Per second of session time
FIRST_SPAWN_GRACE_MS = 300.0

# New object shape and motion (CSS pixels, scaled by the pixel ratio)
SPAWN_BAND = (0.15, 0.85)         # Fraction of the field width
SPAWN_Y = 20.0
OBJECT_RADIUS = 14.0
BASE_VX_RANGE = (2.0, 8.0)
MAX_VX_BOOST = 0.35
VX_BOOST_RATE = 0.08
SEED_VY = 0.35


def spawn_delay(
    elapsed_seconds: float,
    initial_delay_ms: float = INITIAL_SPAWN_DELAY_MS,
    min_delay_ms: float = MIN_SPAWN_DELAY_MS,
    accel: float = SPAWN_ACCEL,
) -> float:
    """Delay before the next spawn, ``initial_delay_ms`` at t=0."""
    return max(min_delay_ms, initial_delay_ms * math.exp(-accel * elapsed_seconds))


def speed_boost(elapsed_seconds: float) -> float:
    """Slow logarithmic multiplier for horizontal speed, capped."""
    return 1.0 + min(MAX_VX_BOOST, VX_BOOST_RATE * math.log1p(elapsed_seconds))


class SpawnScheduler:
    """Decides when a new falling object appears and creates it."""

    def __init__(
        self,
        field: PlayField,
        rng: Optional[random.Random] = None,
        initial_delay_ms: float = INITIAL_SPAWN_DELAY_MS,
        min_delay_ms: float = MIN_SPAWN_DELAY_MS,
        accel: float = SPAWN_ACCEL,
        grace_ms: float = FIRST_SPAWN_GRACE_MS,
    ):
        self.field = field
        self.rng = rng or random.Random()
        self.initial_delay_ms = initial_delay_ms
        self.min_delay_ms = min_delay_ms
        self.accel = accel
        self.grace_ms = grace_ms

        self.started_at = 0.0
        self.next_spawn_at = 0.0

    def reset(self, started_at: float) -> None:
        """Start a new session; the first spawn gets an extra grace delay."""
        self.started_at = started_at
        self.schedule(started_at + self.grace_ms)

    def elapsed_seconds(self, now_ms: float) -> float:
        return max(0.0, (now_ms - self.started_at) / 1000.0)

    def delay_at(self, elapsed_seconds: float) -> float:
        return spawn_delay(
            elapsed_seconds,
            initial_delay_ms=self.initial_delay_ms,
            min_delay_ms=self.min_delay_ms,
            accel=self.accel,
        )

    def schedule(self, now_ms: float) -> None:
        """Set the next spawn deadline counting from ``now_ms``."""
        self.next_spawn_at = now_ms + self.delay_at(self.elapsed_seconds(now_ms))

    def maybe_spawn(self, now_ms: float) -> Optional[FallingObject]:
        """Create one object if the deadline has passed, else return None."""
        if now_ms < self.next_spawn_at:
            return None

        obj = self.create_object(self.elapsed_seconds(now_ms))
        self.schedule(now_ms)
        return obj

    def create_object(self, elapsed_seconds: float) -> FallingObject:
        """Build a new object near the top, away from the side walls."""
        ratio = self.field.ratio
        low, high = SPAWN_BAND

        x = (self.rng.random() * (high - low) + low) * self.field.width
        vx_base = self.rng.uniform(*BASE_VX_RANGE)
        direction = -1 if self.rng.random() < 0.5 else 1

        return FallingObject(
            x=x,
            y=SPAWN_Y * ratio,
            vx=direction * vx_base * speed_boost(elapsed_seconds) * ratio,
            vy=SEED_VY * ratio,
            radius=OBJECT_RADIUS * ratio,
        )
