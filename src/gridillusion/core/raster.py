"""Pillow-backed raster primitives for the grid pipeline.

Every higher-level component (splitter, composer, orchestrator) talks to
pixels exclusively through the five functions in this module:

- :func:`decode` turns an encoded byte buffer into an ``RGB``/``RGBA`` image
- :func:`resize` scales to an exact box using ``cover`` or ``fill``
- :func:`extract` cuts a rectangle that must lie fully inside the source
- :func:`compose` draws layers onto a blank canvas in listed order
- :func:`encode_jpeg` serialises a raster to JPEG bytes

Images are treated as immutable: each function returns a new
``PIL.Image.Image`` and never modifies its arguments.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterable
from typing import Literal

from PIL import Image, ImageOps, UnidentifiedImageError

from gridillusion.core.errors import BoundsError, DecodeError

logger = logging.getLogger(__name__)

ResizeMode = Literal["cover", "fill"]
CanvasMode = Literal["RGB", "RGBA"]

# A layer is a raster plus the (left, top) offset it is drawn at.
Layer = tuple[Image.Image, int, int]

RESAMPLE = Image.Resampling.LANCZOS


def decode(data: bytes) -> Image.Image:
    """Decode an encoded image buffer into a raster.

    Palette, greyscale and CMYK sources are normalised to ``RGB``.  Sources
    carrying transparency become ``RGBA`` so alpha survives until composition.

    Args:
        data: Encoded image bytes (JPEG, PNG, WebP, ... anything Pillow reads).

    Returns:
        Fully loaded ``RGB`` or ``RGBA`` image.

    Raises:
        DecodeError: If the buffer is empty, not an image, truncated, or
            reports a zero dimension.
    """
    if not data:
        raise DecodeError("Empty image buffer")

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Unreadable image data: {e}") from e

    if image.width < 1 or image.height < 1:
        raise DecodeError(f"Image reports unusable size {image.width}x{image.height}")

    has_alpha = image.mode in ("RGBA", "LA", "PA") or (
        image.mode == "P" and "transparency" in image.info
    )
    return image.convert("RGBA" if has_alpha else "RGB")


def resize(image: Image.Image, width: int, height: int, mode: ResizeMode = "cover") -> Image.Image:
    """Resize ``image`` to exactly ``width`` x ``height``.

    ``cover`` keeps the aspect ratio, scales until the box is filled and
    crops the centred overflow (no letterboxing).  ``fill`` stretches each
    axis independently.

    Raises:
        ValueError: For a non-positive target or an unknown mode.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Target size must be positive, got {width}x{height}")

    if mode == "cover":
        return ImageOps.fit(image, (width, height), method=RESAMPLE, centering=(0.5, 0.5))
    if mode == "fill":
        return image.resize((width, height), RESAMPLE)
    raise ValueError(f"Unknown resize mode: {mode!r}")


def extract(image: Image.Image, left: int, top: int, width: int, height: int) -> Image.Image:
    """Cut the rectangle ``(left, top, width, height)`` out of ``image``.

    The rectangle must lie fully inside the source grid.  Out-of-range
    requests are rejected, never clamped.

    Raises:
        BoundsError: If the rectangle is empty or extends past any edge.
    """
    if (
        width < 1
        or height < 1
        or left < 0
        or top < 0
        or left + width > image.width
        or top + height > image.height
    ):
        raise BoundsError(
            f"Rectangle ({left}, {top}, {width}, {height}) is outside "
            f"{image.width}x{image.height} source"
        )
    return image.crop((left, top, left + width, top + height))


def compose(
    width: int,
    height: int,
    background: str | tuple[int, ...],
    layers: Iterable[Layer],
    mode: CanvasMode = "RGB",
) -> Image.Image:
    """Draw ``layers`` onto a fresh ``width`` x ``height`` canvas.

    Layers are drawn in listed order, so later layers cover earlier ones
    where they overlap.  Layers with alpha are blended over what is already
    on the canvas; an ``RGBA`` canvas with an opaque background therefore
    stays fully opaque.

    Args:
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        background: Any Pillow colour spec (``"white"``, ``(255, 255, 255)``).
        layers: ``(raster, left, top)`` triples.
        mode: Canvas mode, ``"RGB"`` or ``"RGBA"``.

    Returns:
        The composed canvas.

    Raises:
        BoundsError: If a layer does not fit inside the canvas.
        ValueError: For an unsupported canvas mode.
    """
    if mode not in ("RGB", "RGBA"):
        raise ValueError(f"Unsupported canvas mode: {mode!r}")

    canvas = Image.new(mode, (width, height), background)

    for index, (layer, left, top) in enumerate(layers):
        if left < 0 or top < 0 or left + layer.width > width or top + layer.height > height:
            raise BoundsError(
                f"Layer {index} ({layer.width}x{layer.height} at {left},{top}) "
                f"does not fit {width}x{height} canvas"
            )

        if mode == "RGBA":
            canvas.alpha_composite(layer.convert("RGBA"), dest=(left, top))
        elif layer.mode == "RGBA":
            canvas.paste(layer.convert("RGB"), (left, top), layer.getchannel("A"))
        else:
            canvas.paste(layer.convert("RGB"), (left, top))

    return canvas


def encode_jpeg(image: Image.Image, quality: int = 90) -> bytes:
    """Encode ``image`` as JPEG.

    JPEG has no alpha channel, so ``RGBA`` rasters are flattened to ``RGB``
    here.  Output is deterministic for an identical raster and quality.

    Raises:
        ValueError: If ``quality`` is not an integer in [1, 100].
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise ValueError(f"JPEG quality must be an integer in [1, 100], got {quality!r}")

    if image.mode != "RGB":
        image = image.convert("RGB")

    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()
