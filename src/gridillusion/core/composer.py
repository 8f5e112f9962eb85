"""Compose one quadrant with its header and footer into a final tile."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image

from gridillusion.core import raster
from gridillusion.core.profiles import GridProfile
from gridillusion.core.slots import QuadrantTag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompositeTile:
    """Finished output for one quadrant.

    Attributes:
        tag: Quadrant this tile belongs to.
        image: Composed raster (``RGB`` or opaque ``RGBA`` per profile).
        data: JPEG encoding of ``image``.
    """

    tag: QuadrantTag
    image: Image.Image
    data: bytes

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def compose_tile(
    tag: QuadrantTag,
    quadrant: Image.Image,
    header: Image.Image,
    footer: Image.Image,
    profile: GridProfile,
) -> CompositeTile:
    """Stack header, quadrant and footer vertically into one fixed-size tile.

    Each strip is resized to ``tile_width x strip_height`` with the profile's
    resize mode, then drawn onto a ``tile_width x 3*strip_height`` canvas at
    top offsets 0, ``strip_height`` and ``2*strip_height``.  The result is
    JPEG-encoded at the profile quality.

    Args:
        tag: Quadrant tag the tile is built for.
        quadrant: Quadrant raster from the splitter.
        header: Header strip source.
        footer: Footer strip source.
        profile: Output geometry and encoding settings.

    Returns:
        The finished :class:`CompositeTile`.
    """
    width = profile.tile_width
    strip = profile.strip_height
    mode = profile.resize_mode

    header_strip = raster.resize(header, width, strip, mode)
    quadrant_strip = raster.resize(quadrant, width, strip, mode)
    footer_strip = raster.resize(footer, width, strip, mode)

    canvas = raster.compose(
        width,
        profile.tile_height,
        profile.background,
        [
            (header_strip, 0, 0),
            (quadrant_strip, 0, strip),
            (footer_strip, 0, strip * 2),
        ],
        mode=profile.canvas_mode,
    )

    data = raster.encode_jpeg(canvas, profile.jpeg_quality)
    logger.debug(f"Composed {tag.value} tile {canvas.width}x{canvas.height} ({len(data)} bytes)")
    return CompositeTile(tag=tag, image=canvas, data=data)
