"""Per-frame physics for falling popcorn and the catcher.

Motion is explicit Euler scaled by a frame factor (frame delta divided
by the nominal frame period), so the constants below hold at any frame
rate. Lengths are CSS pixels and get multiplied by the field's pixel
ratio.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from popcorn.game.models import Catcher, FallingObject, PlayField

logger = logging.getLogger(__name__)


# Gravity grows linearly with session time
BASE_GRAVITY = 0.32
GRAVITY_GROWTH = 0.006

WALL_RESTITUTION = 0.98

# Catcher placement and movement
CATCHER_SIZE = 120.0
CATCHER_BOTTOM_MARGIN = 20.0
CATCHER_EDGE_MARGIN = 4.0
CATCHER_EASING = 0.25

# Catch band near the top of the catcher
CATCH_MOUTH_RATIO = 0.85          # Band bottom, as a fraction of catcher height
CATCH_BAND_MIN = 22.0
CATCH_VY_SCALE = 1.2
CATCH_INSET_RATIO = 0.06
CATCH_INSET_MIN = 6.0

# Dead objects are compacted away past this many entries
RETENTION_LIMIT = 150


def gravity_at(elapsed_seconds: float, ratio: float = 1.0) -> float:
    """Downward acceleration per nominal frame at a given session time."""
    return (BASE_GRAVITY + GRAVITY_GROWTH * elapsed_seconds) * ratio


@dataclass(frozen=True)
class CatchBand:
    """Axis-aligned hit rectangle."""
    x: float
    y: float
    width: float
    height: float


def band_thickness(vy: float, frame_factor: float, ratio: float = 1.0) -> float:
    """Band height: at least the minimum, or one frame of vertical travel.

    A band thinner than one frame's fall would let fast objects skip it.
    """
    return max(CATCH_BAND_MIN * ratio, abs(vy) * frame_factor * CATCH_VY_SCALE)


def catch_band(
    catcher: Catcher,
    vy: float,
    frame_factor: float,
    ratio: float = 1.0,
) -> CatchBand:
    """Hit rectangle for an object falling at ``vy`` this frame."""
    mouth_bottom = catcher.y + catcher.height * CATCH_MOUTH_RATIO
    height = band_thickness(vy, frame_factor, ratio)
    inset = max(CATCH_INSET_MIN * ratio, CATCH_INSET_RATIO * catcher.width)
    return CatchBand(
        x=catcher.x + inset,
        y=mouth_bottom - height,
        width=catcher.width - inset * 2,
        height=height,
    )


def intersects_catch_band(
    obj: FallingObject,
    catcher: Catcher,
    frame_factor: float,
    ratio: float = 1.0,
) -> bool:
    """Check the object's lowest point against the catch band.

    Only falling objects can be caught.
    """
    if obj.vy <= 0:
        return False

    band = catch_band(catcher, obj.vy, frame_factor, ratio)

    cx = obj.x
    cy = obj.y + obj.radius

    nearest_x = max(band.x, min(cx, band.x + band.width))
    nearest_y = max(band.y, min(cy, band.y + band.height))
    dx = cx - nearest_x
    dy = cy - nearest_y

    return dx * dx + dy * dy <= obj.radius * obj.radius


def bounce_walls(obj: FallingObject, left: float, right: float) -> bool:
    """Reflect an object at the side walls with a small energy loss.

    ``left``/``right`` are bounds for the object's centre. An object past a
    bound is clamped onto it; one resting exactly on it is left alone.
    Returns True on a bounce.
    """
    if obj.x < left:
        obj.x = left
        obj.vx *= -WALL_RESTITUTION
        return True
    if obj.x > right:
        obj.x = right
        obj.vx *= -WALL_RESTITUTION
        return True
    return False


@dataclass
class StepResult:
    """What happened during one physics step."""
    caught: List[FallingObject] = field(default_factory=list)
    floor_hit: Optional[FallingObject] = None

    @property
    def ended(self) -> bool:
        return self.floor_hit is not None


CatchHook = Callable[[FallingObject, Catcher], None]


class PhysicsWorld:
    """Owns the live falling objects and the catcher for one session."""

    def __init__(
        self,
        play_field: PlayField,
        on_catch: Optional[CatchHook] = None,
        retention_limit: int = RETENTION_LIMIT,
    ):
        self.field = play_field
        self.on_catch = on_catch
        self.retention_limit = retention_limit

        self.objects: List[FallingObject] = []
        self.catcher = Catcher(size=CATCHER_SIZE * play_field.ratio)
        self.place_catcher()

    def reset(self) -> None:
        """Clear all objects and put the catcher back in the middle."""
        self.objects = []
        self.place_catcher()

    def place_catcher(self) -> None:
        catcher = self.catcher
        catcher.size = CATCHER_SIZE * self.field.ratio
        catcher.x = (self.field.width - catcher.width) / 2
        catcher.y = self.field.height - catcher.height - CATCHER_BOTTOM_MARGIN * self.field.ratio

    def add(self, obj: FallingObject) -> None:
        self.objects.append(obj)

    # Pointer input

    def press(self, x: float) -> None:
        """Pointer/touch went down at ``x``."""
        self.catcher.holding = True
        self.catcher.target_x = x

    def drag(self, x: float) -> None:
        """Pointer/touch moved; ignored unless held."""
        if self.catcher.holding:
            self.catcher.target_x = x

    def release(self) -> None:
        """Pointer/touch lifted; the catcher keeps easing to the last target."""
        self.catcher.holding = False

    def move_catcher(self) -> None:
        """Track the pointer directly while held, ease towards it otherwise."""
        catcher = self.catcher
        if catcher.target_x is None:
            return

        margin = CATCHER_EDGE_MARGIN * self.field.ratio
        target = catcher.target_x - catcher.width / 2
        target = max(margin, min(self.field.width - catcher.width - margin, target))

        if catcher.holding:
            catcher.x = target
        else:
            catcher.x += (target - catcher.x) * CATCHER_EASING

    # Simulation

    def step(self, frame_factor: float, elapsed_seconds: float) -> StepResult:
        """Advance every live object by one frame.

        Stops at the first object touching the floor; that ends the
        session and nothing else is resolved for the frame.
        """
        result = StepResult()
        ratio = self.field.ratio
        gravity = gravity_at(elapsed_seconds, ratio)

        self.move_catcher()

        for obj in self.objects:
            if obj.dead:
                continue

            obj.vy += gravity * frame_factor
            obj.x += obj.vx * frame_factor
            obj.y += obj.vy * frame_factor

            bounce_walls(
                obj,
                self.field.min_x + obj.radius,
                self.field.max_x - obj.radius,
            )

            if obj.y + obj.radius >= self.field.floor_y:
                result.floor_hit = obj
                return result

            if not obj.caught and intersects_catch_band(obj, self.catcher, frame_factor, ratio):
                obj.mark_caught()
                result.caught.append(obj)
                if self.on_catch:
                    self.on_catch(obj, self.catcher)

        if len(self.objects) > self.retention_limit:
            self.compact()

        return result

    def compact(self) -> None:
        """Drop dead objects from the set."""
        before = len(self.objects)
        self.objects = [obj for obj in self.objects if not obj.dead]
        logger.debug(f"Compacted objects: {before} -> {len(self.objects)}")
