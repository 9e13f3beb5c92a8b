"""
Tests for Outpaint Canvas Compositor

Tests for storyforge/storyboard/outpaint.py
"""

import io
import pytest

from PIL import Image

from storyforge.core.exceptions import CompositingError
from storyforge.storyboard.media import parse_data_uri, to_data_uri
from storyforge.storyboard.outpaint import (
    CanvasPlan,
    OutpaintDirection,
    expand_data_uri,
    expand_image_bytes,
    plan_expansion,
)


class TestPlanExpansion:
    """Tests for canvas geometry."""

    @pytest.mark.parametrize("direction,expected", [
        (OutpaintDirection.LEFT, CanvasPlan(150, 50, 50, 0)),
        (OutpaintDirection.RIGHT, CanvasPlan(150, 50, 0, 0)),
        (OutpaintDirection.UP, CanvasPlan(100, 75, 0, 25)),
        (OutpaintDirection.DOWN, CanvasPlan(100, 75, 0, 0)),
        (OutpaintDirection.ZOOM_OUT, CanvasPlan(150, 75, 25, 12)),
    ])
    def test_geometry(self, direction, expected):
        assert plan_expansion(100, 50, direction) == expected

    def test_odd_dimensions_are_floored(self):
        plan = plan_expansion(3, 5, OutpaintDirection.ZOOM_OUT)

        assert (plan.width, plan.height) == (4, 7)
        assert (plan.offset_x, plan.offset_y) == (0, 1)

    def test_accepts_string_direction(self):
        assert plan_expansion(10, 10, "zoom-out").width == 15

    def test_empty_image_rejected(self):
        with pytest.raises(CompositingError):
            plan_expansion(0, 10, OutpaintDirection.LEFT)


class TestExpandImage:
    """Tests for pixel output."""

    def test_left_expansion_places_original_on_right(self, png_factory):
        output = expand_image_bytes(png_factory(4, 2), OutpaintDirection.LEFT)

        with Image.open(io.BytesIO(output)) as img:
            assert img.format == "PNG"
            assert img.size == (6, 2)
            assert img.mode == "RGBA"
            assert img.getpixel((0, 0))[3] == 0
            assert img.getpixel((2, 0)) == (255, 0, 0, 255)
            assert img.getpixel((5, 1)) == (255, 0, 0, 255)

    def test_zoom_out_centres_original(self, png_factory):
        output = expand_image_bytes(png_factory(4, 4), OutpaintDirection.ZOOM_OUT)

        with Image.open(io.BytesIO(output)) as img:
            assert img.size == (6, 6)
            assert img.getpixel((0, 0))[3] == 0
            assert img.getpixel((1, 1)) == (255, 0, 0, 255)
            assert img.getpixel((5, 5))[3] == 0

    def test_deterministic(self, png_factory):
        data = png_factory(5, 3)

        assert expand_image_bytes(data, "down") == expand_image_bytes(data, "down")

    def test_undecodable_bytes(self):
        with pytest.raises(CompositingError):
            expand_image_bytes(b"not an image", OutpaintDirection.UP)

    def test_data_uri_output_is_png(self, png_factory):
        jpeg = io.BytesIO()
        Image.new("RGB", (4, 4), (0, 0, 255)).save(jpeg, format="JPEG")

        result = expand_data_uri(to_data_uri(jpeg.getvalue(), "image/jpeg"), OutpaintDirection.RIGHT)
        mime_type, data = parse_data_uri(result)

        assert mime_type == "image/png"
        with Image.open(io.BytesIO(data)) as img:
            assert img.size == (6, 4)

    def test_invalid_base64_raises(self):
        with pytest.raises(CompositingError):
            expand_data_uri("data:image/png;base64,@@@", OutpaintDirection.LEFT)
