"""Exception taxonomy for the grid illusion pipeline.

Every error raised by the core derives from :class:`GridIllusionError` so
callers can catch the whole family at once.  The HTTP layer in
:mod:`gridillusion.api.main` translates each subclass to a status code.
"""

from __future__ import annotations


class GridIllusionError(Exception):
    """Base class for all pipeline errors."""


class DecodeError(GridIllusionError):
    """Input bytes are not a readable image, or report unusable dimensions."""


class BoundsError(GridIllusionError):
    """A rectangle does not fit inside the raster it targets."""


class NotFound(GridIllusionError):
    """A named or positional input is missing, or a slot assignment is incomplete."""


class SinkWriteError(GridIllusionError):
    """An output could not be persisted."""
