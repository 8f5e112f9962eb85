"""Core image decomposition and composition pipeline.

This package holds everything that touches pixels or decides geometry:

- **raster.py**: Pillow primitives (decode, resize, extract, compose, encode)
- **splitter.py**: TL/TR/BL/BR quadrant extraction (fixed-grid or native policy)
- **composer.py**: header/quadrant/footer vertical stacking into one tile
- **pipeline.py**: run orchestration, status transitions and output emission
- **profiles.py**: named ``GridProfile`` output formats and their registry
- **slots.py**: quadrant tags and the nine-slot assignment model
- **errors.py**: ``DecodeError``, ``BoundsError``, ``NotFound``, ``SinkWriteError``
- **config.py**: environment-driven settings (``GRIDILLUSION_`` prefix)

Usage Example
-------------
    from gridillusion.core import GridPipeline, profile_registry
    from gridillusion.storage import FileBlobStore

    store = FileBlobStore("data/grid")
    pipeline = GridPipeline(profile_registry.get("custom-grid"), store, store)
    run = pipeline.run_assigned("job-1", assignment)
"""

from gridillusion.core.composer import CompositeTile, compose_tile
from gridillusion.core.config import GridIllusionConfig, config
from gridillusion.core.errors import (
    BoundsError,
    DecodeError,
    GridIllusionError,
    NotFound,
    SinkWriteError,
)
from gridillusion.core.pipeline import GridPipeline, PipelineRun, RunStatus
from gridillusion.core.profiles import GridProfile, profile_registry
from gridillusion.core.slots import SLOT_NAMES, QuadrantTag
from gridillusion.core.splitter import split_quadrants

__all__ = [
    "BoundsError",
    "CompositeTile",
    "DecodeError",
    "GridIllusionConfig",
    "GridIllusionError",
    "GridPipeline",
    "GridProfile",
    "NotFound",
    "PipelineRun",
    "QuadrantTag",
    "RunStatus",
    "SLOT_NAMES",
    "SinkWriteError",
    "compose_tile",
    "config",
    "profile_registry",
    "split_quadrants",
]
