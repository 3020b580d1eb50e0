"""Basic drawing primitives for the play-field buffer."""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray

# Type aliases
Color = Tuple[int, int, int]
Buffer = NDArray[np.uint8]


def new_buffer(width: int, height: int, color: Color = (0, 0, 0)) -> Buffer:
    """Create an RGB buffer of shape (height, width, 3)."""
    buffer = np.zeros((height, width, 3), dtype=np.uint8)
    buffer[:, :] = color
    return buffer


def clear(buffer: Buffer, color: Color = (0, 0, 0)) -> None:
    """Clear buffer to a solid color."""
    buffer[:, :] = color


def draw_rect(
    buffer: Buffer,
    x: int,
    y: int,
    width: int,
    height: int,
    color: Color,
    filled: bool = True,
    thickness: int = 1,
) -> None:
    """Draw a rectangle on the buffer.

    Args:
        buffer: Target numpy array (height, width, 3)
        x: Left edge x coordinate
        y: Top edge y coordinate
        width: Rectangle width
        height: Rectangle height
        color: RGB color tuple
        filled: If True, fill rectangle; if False, draw outline only
        thickness: Line thickness for outline (when filled=False)
    """
    h, w = buffer.shape[:2]

    # Clamp to buffer bounds
    x1 = max(0, min(x, w))
    y1 = max(0, min(y, h))
    x2 = max(0, min(x + width, w))
    y2 = max(0, min(y + height, h))

    if filled:
        buffer[y1:y2, x1:x2] = color
        return

    t = max(1, thickness)
    buffer[y1:min(y1 + t, y2), x1:x2] = color
    buffer[max(y2 - t, y1):y2, x1:x2] = color
    buffer[y1:y2, x1:min(x1 + t, x2)] = color
    buffer[y1:y2, max(x2 - t, x1):x2] = color


def _circle_mask(
    buffer: Buffer, cx: float, cy: float, radius: float
) -> Tuple[slice, slice, NDArray[np.bool_]]:
    """Bounding-box slices and disc mask for a circle, clipped to the buffer."""
    h, w = buffer.shape[:2]
    x1 = max(0, int(cx - radius))
    y1 = max(0, int(cy - radius))
    x2 = min(w, int(cx + radius) + 2)
    y2 = min(h, int(cy + radius) + 2)
    if x2 <= x1 or y2 <= y1:
        return slice(0, 0), slice(0, 0), np.zeros((0, 0), dtype=bool)

    ys, xs = np.ogrid[y1:y2, x1:x2]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2
    return slice(y1, y2), slice(x1, x2), mask


def draw_circle(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    color: Color,
    alpha: float = 1.0,
) -> None:
    """Draw a filled circle, optionally blended with ``alpha``."""
    if radius <= 0 or alpha <= 0:
        return

    rows, cols, mask = _circle_mask(buffer, cx, cy, radius)
    if not mask.any():
        return

    region = buffer[rows, cols]
    if alpha >= 1.0:
        region[mask] = color
    else:
        src = np.array(color, dtype=np.float32)
        region[mask] = (src * alpha + region[mask] * (1 - alpha)).astype(np.uint8)


def draw_ring(
    buffer: Buffer,
    cx: float,
    cy: float,
    radius: float,
    thickness: float,
    color: Color,
) -> None:
    """Draw a circle outline of the given thickness."""
    if radius <= 0:
        return

    rows, cols, outer = _circle_mask(buffer, cx, cy, radius)
    if not outer.any():
        return

    inner_radius = max(0.0, radius - thickness)
    ys, xs = np.ogrid[rows, cols]
    inner = (xs - cx) ** 2 + (ys - cy) ** 2 < inner_radius ** 2
    buffer[rows, cols][outer & ~inner] = color


def draw_image(
    buffer: Buffer,
    image: Buffer,
    x: int,
    y: int,
    alpha: float = 1.0,
) -> None:
    """Draw an image onto the buffer with optional alpha blending.

    Args:
        buffer: Target numpy array (height, width, 3)
        image: Source image array (height, width, 3 or 4)
        x: Top-left x coordinate
        y: Top-left y coordinate
        alpha: Global alpha multiplier (0.0 to 1.0)
    """
    buf_h, buf_w = buffer.shape[:2]
    img_h, img_w = image.shape[:2]

    # Calculate visible region
    src_x1 = max(0, -x)
    src_y1 = max(0, -y)
    src_x2 = min(img_w, buf_w - x)
    src_y2 = min(img_h, buf_h - y)

    dst_x1 = max(0, x)
    dst_y1 = max(0, y)
    dst_x2 = dst_x1 + (src_x2 - src_x1)
    dst_y2 = dst_y1 + (src_y2 - src_y1)

    if src_x2 <= src_x1 or src_y2 <= src_y1:
        return  # Nothing to draw

    src_region = image[src_y1:src_y2, src_x1:src_x2]

    if alpha >= 1.0 and image.shape[2] == 3:
        # Fast path: direct copy
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = src_region
    else:
        dst_region = buffer[dst_y1:dst_y2, dst_x1:dst_x2]

        if image.shape[2] == 4:
            # RGBA image with per-pixel alpha
            img_alpha = (src_region[:, :, 3:4] / 255.0) * alpha
            src_rgb = src_region[:, :, :3]
        else:
            img_alpha = alpha
            src_rgb = src_region

        blended = (src_rgb * img_alpha + dst_region * (1 - img_alpha)).astype(np.uint8)
        buffer[dst_y1:dst_y2, dst_x1:dst_x2] = blended
