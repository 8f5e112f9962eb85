"""Tests for gridillusion.core.splitter — quadrant extraction."""

from __future__ import annotations

import pytest
from PIL import Image

from gridillusion.core.errors import DecodeError
from gridillusion.core.profiles import CUSTOM_GRID, TWITTER_GRID, TWITTER_GRID_NATIVE
from gridillusion.core.slots import QuadrantTag
from gridillusion.core.splitter import QuadrantBox, quadrant_boxes, split_quadrants

TL, TR, BL, BR = QuadrantTag.TL, QuadrantTag.TR, QuadrantTag.BL, QuadrantTag.BR


def _four_colour(width: int, height: int) -> Image.Image:
    """Image whose four native quadrants are painted different colours."""
    half_w, half_h = width // 2, height // 2
    image = Image.new("RGB", (width, height), (255, 0, 0))
    image.paste((0, 255, 0), (half_w, 0, width, half_h))
    image.paste((0, 0, 255), (0, half_h, half_w, height))
    image.paste((255, 255, 0), (half_w, half_h, width, height))
    return image


class TestQuadrantBoxes:
    """Test the rectangle arithmetic."""

    def test_even_dimensions_split_equally(self):
        boxes = quadrant_boxes(2160, 1280)
        assert boxes[TL] == QuadrantBox(0, 0, 1080, 640)
        assert boxes[TR] == QuadrantBox(1080, 0, 1080, 640)
        assert boxes[BL] == QuadrantBox(0, 640, 1080, 640)
        assert boxes[BR] == QuadrantBox(1080, 640, 1080, 640)

    def test_odd_remainder_goes_right_and_bottom(self):
        boxes = quadrant_boxes(2161, 1281)
        assert (boxes[TL].width, boxes[TL].height) == (1080, 640)
        assert (boxes[TR].width, boxes[TR].height) == (1081, 640)
        assert (boxes[BL].width, boxes[BL].height) == (1080, 641)
        assert (boxes[BR].width, boxes[BR].height) == (1081, 641)

    @pytest.mark.parametrize("size", [(2, 2), (3, 5), (1001, 7), (2160, 1280), (4097, 3)])
    def test_boxes_tile_source_exactly(self, size):
        width, height = size
        boxes = quadrant_boxes(width, height)

        # Each row sums to the source width, each column to the source height.
        assert boxes[TL].width + boxes[TR].width == width
        assert boxes[BL].width + boxes[BR].width == width
        assert boxes[TL].height + boxes[BL].height == height
        assert boxes[TR].height + boxes[BR].height == height

        # Neighbours start exactly where the previous quadrant ends.
        assert boxes[TR].left == boxes[TL].width
        assert boxes[BL].top == boxes[TL].height
        assert (boxes[BR].left, boxes[BR].top) == (boxes[TR].left, boxes[BL].top)

        assert sum(box.width * box.height for box in boxes.values()) == width * height

    @pytest.mark.parametrize("size", [(1, 10), (10, 1), (0, 0)])
    def test_too_small_raises(self, size):
        with pytest.raises(DecodeError):
            quadrant_boxes(*size)


class TestNativePolicy:
    """Test the native-size split policy."""

    def test_odd_source_sizes(self, make_image):
        quadrants = split_quadrants(make_image(2161, 1281), TWITTER_GRID_NATIVE)
        assert quadrants[TL].size == (1080, 640)
        assert quadrants[TR].size == (1081, 640)
        assert quadrants[BL].size == (1080, 641)
        assert quadrants[BR].size == (1081, 641)

    def test_quadrant_content_matches_position(self):
        quadrants = split_quadrants(_four_colour(101, 61), TWITTER_GRID_NATIVE)
        assert quadrants[TL].getpixel((0, 0)) == (255, 0, 0)
        assert quadrants[TR].getpixel((0, 0)) == (0, 255, 0)
        assert quadrants[BL].getpixel((0, 0)) == (0, 0, 255)
        assert quadrants[BR].getpixel((0, 0)) == (255, 255, 0)

    def test_single_pixel_wide_source_raises(self, make_image):
        with pytest.raises(DecodeError):
            split_quadrants(make_image(1, 50), TWITTER_GRID_NATIVE)


class TestFixedGridPolicy:
    """Test the fixed-grid split policy."""

    @pytest.mark.parametrize("source_size", [(2160, 1280), (500, 500), (3000, 900), (7, 9)])
    def test_twitter_quadrants_are_one_strip(self, make_image, source_size):
        quadrants = split_quadrants(make_image(*source_size), TWITTER_GRID)
        assert set(quadrants) == {TL, TR, BL, BR}
        for quadrant in quadrants.values():
            assert quadrant.size == (1080, 640)

    def test_custom_quadrants_are_one_strip(self, make_image):
        quadrants = split_quadrants(make_image(1920, 1080), CUSTOM_GRID)
        for quadrant in quadrants.values():
            assert quadrant.size == (600, 337)

    def test_accepts_decoded_image(self):
        quadrants = split_quadrants(_four_colour(2160, 1280), TWITTER_GRID)
        assert quadrants[BR].getpixel((540, 320)) == (255, 255, 0)


def test_corrupt_source_raises_decode_error():
    with pytest.raises(DecodeError):
        split_quadrants(b"\x89PNG not really", TWITTER_GRID)
