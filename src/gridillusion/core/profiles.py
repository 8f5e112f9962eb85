"""Grid profiles and the registry that names them.

A :class:`GridProfile` captures every constant that differs between pipeline
variants: tile width, strip height, output channel count, background,
resize mode, JPEG quality and the quadrant split policy.  The orchestrator
is written once against a profile, and each supported output format is a
registered profile instance rather than a copy of the pipeline.

Built-in profiles
-----------------
======================  =====  =====  ========  ==========
name                    tile   strip  channels  split
======================  =====  =====  ========  ==========
``twitter-grid``        1080   640    3         fixed-grid
``twitter-grid-native`` 1080   640    3         native
``custom-grid``         600    337    4         fixed-grid
======================  =====  =====  ========  ==========

Usage Example
-------------
    >>> from gridillusion.core.profiles import profile_registry
    >>> profile = profile_registry.get("twitter-grid")
    >>> profile.tile_size
    (1080, 1920)
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from gridillusion.core.errors import NotFound

logger = logging.getLogger(__name__)

SplitPolicy = Literal["fixed-grid", "native"]


class GridProfile(BaseModel):
    """Output geometry and encoding settings for one pipeline variant.

    Attributes:
        name: Registry key.
        description: Human-readable summary.
        tile_width: Width of every strip and of the final tile.
        strip_height: Height of each of the three stacked strips.
        channels: 3 for an ``RGB`` canvas, 4 for an opaque ``RGBA`` canvas.
        background: Canvas fill colour (any Pillow colour spec).
        resize_mode: ``cover`` or ``fill``, used for every resize step.
        jpeg_quality: Encoder quality in [1, 100].
        split_policy: ``fixed-grid`` resizes the main image to
            ``2*tile_width x 2*strip_height`` before splitting; ``native``
            halves it at its natural size.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    tile_width: int = Field(..., ge=1)
    strip_height: int = Field(..., ge=1)
    channels: Literal[3, 4] = 3
    background: str = "white"
    resize_mode: Literal["cover", "fill"] = "cover"
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    split_policy: SplitPolicy = "fixed-grid"

    @property
    def tile_height(self) -> int:
        return self.strip_height * 3

    @property
    def tile_size(self) -> tuple[int, int]:
        return self.tile_width, self.tile_height

    @property
    def grid_size(self) -> tuple[int, int]:
        """Size the main image is resized to under the fixed-grid policy."""
        return self.tile_width * 2, self.strip_height * 2

    @property
    def canvas_mode(self) -> str:
        return "RGBA" if self.channels == 4 else "RGB"


class ProfileRegistry:
    """Registry of named :class:`GridProfile` instances.

    Mirrors the register/lookup/list shape used for other pluggable parts of
    the application so new output formats can be added without touching the
    pipeline.
    """

    def __init__(self) -> None:
        self._profiles: dict[str, GridProfile] = {}

    def register(self, profile: GridProfile) -> None:
        if profile.name in self._profiles:
            logger.warning(f"Grid profile '{profile.name}' is already registered, overwriting")
        self._profiles[profile.name] = profile
        logger.debug(f"Registered grid profile: {profile.name}")

    def get(self, name: str) -> GridProfile:
        """Look up a profile by name.

        Raises:
            NotFound: If no profile with that name is registered.
        """
        try:
            return self._profiles[name]
        except KeyError:
            available = ", ".join(self.list_available())
            raise NotFound(
                f"Grid profile '{name}' not found. Available profiles: {available}"
            ) from None

    def list_available(self) -> list[str]:
        return list(self._profiles.keys())

    def describe(self) -> list[dict[str, Any]]:
        """Return every registered profile as a plain dict, plus derived tile size."""
        return [
            {**profile.model_dump(), "tile_height": profile.tile_height}
            for profile in self._profiles.values()
        ]


TWITTER_GRID = GridProfile(
    name="twitter-grid",
    description="Auto-split: main image cover-resized to 2160x1280, 1080x1920 RGB tiles",
    tile_width=1080,
    strip_height=640,
    channels=3,
)

TWITTER_GRID_NATIVE = GridProfile(
    name="twitter-grid-native",
    description="Auto-split at the main image's natural size, 1080x1920 RGB tiles",
    tile_width=1080,
    strip_height=640,
    channels=3,
    split_policy="native",
)

CUSTOM_GRID = GridProfile(
    name="custom-grid",
    description="Assigned slots: main image resized to 1200x674, 600x1011 opaque RGBA tiles",
    tile_width=600,
    strip_height=337,
    channels=4,
)

# Global profile registry instance
profile_registry = ProfileRegistry()
for _profile in (TWITTER_GRID, TWITTER_GRID_NATIVE, CUSTOM_GRID):
    profile_registry.register(_profile)
