"""Play-field renderer.

Draws one frame of a session into a numpy RGB buffer, back to front:
background and border, the shared inside of the bucket, the falling
popcorn, the skin's front layer, then the catch bursts.
"""

import logging
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from popcorn.animation.particles import EffectLayer
from popcorn.game.models import Catcher, FallingObject, PlayField
from popcorn.graphics.assets import AssetCache
from popcorn.graphics.primitives import (
    Color, clear, draw_circle, draw_image, draw_rect, draw_ring, new_buffer
)
from popcorn.utils.profile import BACK_IMAGE_FILE, OBJECT_IMAGE_FILE

logger = logging.getLogger(__name__)

BG_COLOR: Color = (18, 16, 28)
BORDER_COLOR: Color = (33, 31, 42)   # White at 6% over the background
OBJECT_FILL: Color = (255, 233, 179)
OBJECT_STROKE: Color = (230, 199, 122)


class GameRenderer:
    """Renders sessions for one play field."""

    def __init__(self, play_field: PlayField, assets: AssetCache):
        self.field = play_field
        self.assets = assets
        self.buffer = new_buffer(int(play_field.width), int(play_field.height), BG_COLOR)

    def render(
        self,
        objects: list[FallingObject],
        catcher: Catcher,
        skin: str,
        effects: Optional[EffectLayer] = None,
    ) -> NDArray[np.uint8]:
        """Draw a frame and return the buffer (reused between calls)."""
        ratio = self.field.ratio
        clear(self.buffer, BG_COLOR)

        inset = int(2 * ratio)
        draw_rect(
            self.buffer,
            inset,
            inset,
            int(self.field.width - 2 * inset),
            int(self.field.height - 2 * inset),
            BORDER_COLOR,
            filled=False,
            thickness=max(1, int(2 * ratio)),
        )

        self._draw_catcher_layer(catcher, BACK_IMAGE_FILE)

        for obj in objects:
            if not obj.dead:
                self._draw_object(obj)

        self._draw_catcher_layer(catcher, skin)

        if effects is not None:
            effects.render(self.buffer)

        return self.buffer

    def clear(self) -> NDArray[np.uint8]:
        clear(self.buffer, BG_COLOR)
        return self.buffer

    def _draw_catcher_layer(self, catcher: Catcher, asset_id: str) -> None:
        image = self.assets.get(asset_id, catcher.width, catcher.height)
        if image is None:
            return  # Missing layers are transparent
        draw_image(self.buffer, image, int(catcher.x), int(catcher.y))

    def _draw_object(self, obj: FallingObject) -> None:
        size = obj.radius * 2
        sprite = self.assets.get(OBJECT_IMAGE_FILE, size, size)
        if sprite is not None:
            draw_image(self.buffer, sprite, int(obj.x - obj.radius), int(obj.y - obj.radius))
            return

        draw_circle(self.buffer, obj.x, obj.y, obj.radius, OBJECT_FILL)
        draw_ring(self.buffer, obj.x, obj.y, obj.radius, 3 * self.field.ratio, OBJECT_STROKE)
