"""Grid Illusion Composer - split and recombine images into 2x2 social grids."""

__version__ = "0.1.0"

from gridillusion.core.config import GridIllusionConfig, config
from gridillusion.core.pipeline import GridPipeline, PipelineRun, RunStatus
from gridillusion.core.profiles import GridProfile, profile_registry

__all__ = [
    "GridIllusionConfig",
    "GridPipeline",
    "GridProfile",
    "PipelineRun",
    "RunStatus",
    "config",
    "profile_registry",
]
