"""
Outpaint Canvas Compositor

Expands an image's canvas before the provider fills the new area.

Geometry (factor f = 0.5 by default):
    left      width  x (1+f), original at x = floor(w*f)
    right     width  x (1+f), original at x = 0
    up        height x (1+f), original at y = floor(h*f)
    down      height x (1+f), original at y = 0
    zoom-out  both   x (1+f), original centred at ((W-w)//2, (H-h)//2)

New dimensions are floored to whole pixels. The added region is fully
transparent and the output is always re-encoded as PNG. The transform is
local and deterministic: the same input and direction give the same pixels.
"""

import io
import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image, UnidentifiedImageError

from storyforge.core.constants import OUTPAINT_EXPANSION_FACTOR
from storyforge.core.exceptions import CompositingError
from storyforge.core.logging_config import get_logger
from storyforge.storyboard.media import parse_data_uri, to_data_uri

logger = get_logger("storyboard.outpaint")


class OutpaintDirection(Enum):
    """Side of the frame to extend."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    ZOOM_OUT = "zoom-out"


@dataclass(frozen=True)
class CanvasPlan:
    """Target canvas size and where the original is pasted."""
    width: int
    height: int
    offset_x: int
    offset_y: int


def plan_expansion(
    width: int,
    height: int,
    direction: OutpaintDirection,
    factor: float = OUTPAINT_EXPANSION_FACTOR,
) -> CanvasPlan:
    """Compute the expanded canvas for a ``width`` x ``height`` source."""
    if width <= 0 or height <= 0:
        raise CompositingError(f"Cannot expand an empty image ({width}x{height})")

    direction = OutpaintDirection(direction)
    grown_w = math.floor(width * (1 + factor))
    grown_h = math.floor(height * (1 + factor))

    if direction is OutpaintDirection.LEFT:
        return CanvasPlan(grown_w, height, math.floor(width * factor), 0)
    if direction is OutpaintDirection.RIGHT:
        return CanvasPlan(grown_w, height, 0, 0)
    if direction is OutpaintDirection.UP:
        return CanvasPlan(width, grown_h, 0, math.floor(height * factor))
    if direction is OutpaintDirection.DOWN:
        return CanvasPlan(width, grown_h, 0, 0)
    return CanvasPlan(grown_w, grown_h, (grown_w - width) // 2, (grown_h - height) // 2)


def expand_canvas(
    image: Image.Image,
    direction: OutpaintDirection,
    factor: float = OUTPAINT_EXPANSION_FACTOR,
) -> Image.Image:
    """Return a new RGBA image with ``image`` placed on the expanded canvas."""
    plan = plan_expansion(image.width, image.height, direction, factor)
    canvas = Image.new("RGBA", (plan.width, plan.height), (0, 0, 0, 0))
    canvas.paste(image.convert("RGBA"), (plan.offset_x, plan.offset_y))
    return canvas


def expand_image_bytes(
    data: bytes,
    direction: OutpaintDirection,
    factor: float = OUTPAINT_EXPANSION_FACTOR,
) -> bytes:
    """Decode, expand and re-encode an image as PNG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            expanded = expand_canvas(img, direction, factor)
    except (UnidentifiedImageError, OSError) as e:
        raise CompositingError(f"Could not decode image for outpainting: {e}")

    buffer = io.BytesIO()
    expanded.save(buffer, format="PNG")
    logger.debug(f"Expanded canvas {OutpaintDirection(direction).value} to {expanded.width}x{expanded.height}")
    return buffer.getvalue()


def expand_data_uri(
    media_ref: str,
    direction: OutpaintDirection,
    factor: float = OUTPAINT_EXPANSION_FACTOR,
) -> str:
    """Expand a data-URI image; the result is a PNG data URI."""
    _, data = parse_data_uri(media_ref)
    return to_data_uri(expand_image_bytes(data, direction, factor), "image/png")
