"""Graphics for the Popcorn Catcher play field."""

from popcorn.graphics.assets import AssetCache
from popcorn.graphics.primitives import (
    clear,
    draw_circle,
    draw_image,
    draw_rect,
    draw_ring,
    new_buffer,
)

__all__ = [
    "AssetCache",
    "clear",
    "draw_circle",
    "draw_image",
    "draw_rect",
    "draw_ring",
    "new_buffer",
]
