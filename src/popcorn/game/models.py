"""Data structures for the play field."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class FallingObject:
    """A popcorn kernel falling towards the floor.

    ``dead`` is never reset once set, and ``caught`` implies ``dead``.
    """
    x: float
    y: float
    vx: float
    vy: float
    radius: float
    caught: bool = False
    dead: bool = False

    def mark_caught(self) -> None:
        self.caught = True
        self.dead = True


@dataclass
class Catcher:
    """The player's square bucket."""
    x: float = 0.0
    y: float = 0.0
    size: float = 120.0

    # Latest pointer/touch position and whether it is actively held
    target_x: Optional[float] = None
    holding: bool = False

    @property
    def width(self) -> float:
        return self.size

    @property
    def height(self) -> float:
        return self.size


@dataclass
class SessionState:
    """Mutable state of a single play-through.

    The live objects belong to the PhysicsWorld and the next spawn
    deadline to the SpawnScheduler; both are reset together with this.
    """
    player_name: str = ""
    skin: str = ""
    score: int = 0
    running: bool = False
    started_at: float = 0.0  # ms, frame clock


@dataclass(frozen=True)
class PlayField:
    """Play field in device pixels.

    ``ratio`` is the device pixel ratio every length constant is scaled by.
    """
    width: float
    height: float
    ratio: float = 1.0

    @property
    def min_x(self) -> float:
        return 6 * self.ratio

    @property
    def max_x(self) -> float:
        return self.width - 6 * self.ratio

    @property
    def floor_y(self) -> float:
        return self.height - 8 * self.ratio
