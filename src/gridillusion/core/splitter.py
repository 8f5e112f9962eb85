"""Split a source image into the four quadrants of a 2x2 grid.

Two policies are supported, chosen by :attr:`GridProfile.split_policy`:

fixed-grid
    The source is first resized to :attr:`GridProfile.grid_size` (twice the
    tile width by twice the strip height) so every quadrant comes out at
    exactly one strip.
native
    The source is halved at its natural size.  With odd dimensions the
    right column and bottom row absorb the extra pixel.

In both cases the four rectangles tile the source with no gap and no
overlap.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image

from gridillusion.core import raster
from gridillusion.core.errors import DecodeError
from gridillusion.core.profiles import GridProfile
from gridillusion.core.slots import QuadrantTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuadrantBox:
    """Rectangle in source pixel coordinates."""

    left: int
    top: int
    width: int
    height: int


def quadrant_boxes(width: int, height: int) -> dict[QuadrantTag, QuadrantBox]:
    """Compute the four quadrant rectangles for a ``width`` x ``height`` grid.

    Raises:
        DecodeError: If either dimension is below 2, which would leave a
            quadrant empty.
    """
    if width < 2 or height < 2:
        raise DecodeError(f"Cannot split a {width}x{height} image into quadrants")

    half_w = width // 2
    half_h = height // 2

    return {
        QuadrantTag.TL: QuadrantBox(0, 0, half_w, half_h),
        QuadrantTag.TR: QuadrantBox(half_w, 0, width - half_w, half_h),
        QuadrantTag.BL: QuadrantBox(0, half_h, half_w, height - half_h),
        QuadrantTag.BR: QuadrantBox(half_w, half_h, width - half_w, height - half_h),
    }


def _extract_all(image: Image.Image) -> dict[QuadrantTag, Image.Image]:
    boxes = quadrant_boxes(image.width, image.height)
    return {
        tag: raster.extract(image, box.left, box.top, box.width, box.height)
        for tag, box in boxes.items()
    }


def split_fixed_grid(image: Image.Image, profile: GridProfile) -> dict[QuadrantTag, Image.Image]:
    """Resize to the profile grid size, then cut four equal quadrants."""
    grid_width, grid_height = profile.grid_size
    resized = raster.resize(image, grid_width, grid_height, profile.resize_mode)
    return _extract_all(resized)


def split_native(image: Image.Image) -> dict[QuadrantTag, Image.Image]:
    """Cut four quadrants at the image's natural size."""
    return _extract_all(image)


def split_quadrants(
    source: bytes | Image.Image, profile: GridProfile
) -> dict[QuadrantTag, Image.Image]:
    """Split ``source`` into TL/TR/BL/BR quadrants using the profile's policy.

    Args:
        source: Encoded image bytes or an already decoded raster.
        profile: Grid profile selecting the split policy and grid size.

    Returns:
        Mapping of every :class:`QuadrantTag` to its quadrant raster.

    Raises:
        DecodeError: If the bytes cannot be decoded or the image is too small.
    """
    image = raster.decode(source) if isinstance(source, (bytes, bytearray)) else source

    logger.debug(
        f"Splitting {image.width}x{image.height} source with {profile.split_policy} policy"
    )

    if profile.split_policy == "native":
        return split_native(image)
    return split_fixed_grid(image, profile)
