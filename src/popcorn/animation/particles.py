"""Cosmetic catch effects.

Effects are fire-and-forget: the session only reports where a catch
happened and the window advances and draws the bursts on its own. Nothing
here is awaited by, or feeds back into, the simulation.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from popcorn.graphics.primitives import Buffer, draw_circle

logger = logging.getLogger(__name__)

BURST_COLOR: Tuple[int, int, int] = (255, 215, 130)
BURST_STEP_MS = 16.0
BURST_STEPS = 12


@dataclass
class CatchBurst:
    """A ring that grows by one pixel per step and fades out.

    Only the starting radius follows the pixel ratio.
    """

    x: float
    y: float
    radius: float
    age: float = 0.0  # milliseconds

    @property
    def step(self) -> int:
        return int(self.age // BURST_STEP_MS)

    @property
    def alpha(self) -> float:
        return max(0.0, 1.0 - self.step / BURST_STEPS)

    @property
    def is_dead(self) -> bool:
        return self.alpha <= 0.0

    def update(self, delta_ms: float) -> None:
        self.age += delta_ms

    def current_radius(self) -> float:
        return self.radius + self.step


class EffectLayer:
    """Holds the bursts currently on screen."""

    def __init__(self, ratio: float = 1.0, max_effects: int = 64):
        self.ratio = ratio
        self.max_effects = max_effects
        self.bursts: List[CatchBurst] = []

    def burst(self, x: float, y: float) -> None:
        """Start a burst at ``(x, y)``."""
        if len(self.bursts) >= self.max_effects:
            self.bursts.pop(0)
        self.bursts.append(CatchBurst(x=x, y=y, radius=2 * self.ratio))

    def update(self, delta_ms: float) -> None:
        for burst in self.bursts:
            burst.update(delta_ms)
        self.bursts = [b for b in self.bursts if not b.is_dead]

    def clear(self) -> None:
        self.bursts.clear()

    def render(self, buffer: Buffer) -> None:
        for burst in self.bursts:
            draw_circle(buffer, burst.x, burst.y, burst.current_radius(), BURST_COLOR, alpha=burst.alpha)
