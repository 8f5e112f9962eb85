"""Grid pipeline orchestration.

:class:`GridPipeline` sequences one run end to end:

1. mark the run ``processing``
2. resolve and decode the nine inputs (concurrently)
3. split the ``main`` image into quadrants
4. compose the four tiles (concurrently)
5. hand each tile to the output sink as ``{run_id}/result-{tag}.jpg``
6. record the output locations and mark the run ``completed``

Any exception at any step marks the run ``failed`` and is re-raised to the
caller unchanged.  Nothing is retried and tiles already written are left in
place.

The pipeline depends only on three small collaborator protocols
(:class:`InputResolver`, :class:`OutputSink`, :class:`StatusReporter`), so
the same code runs against the file-backed stores in
:mod:`gridillusion.storage` or any in-memory stand-in.

Usage Example
-------------
::

    from gridillusion.core.pipeline import GridPipeline
    from gridillusion.core.profiles import profile_registry

    pipeline = GridPipeline(
        profile_registry.get("twitter-grid"),
        resolver=uploads,
        sink=results,
        reporter=ledger,
    )
    run = pipeline.run_auto_split(job_id, job["raw_files"])
    print(run.locations)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from PIL import Image

from gridillusion.core import raster
from gridillusion.core.composer import CompositeTile, compose_tile
from gridillusion.core.profiles import GridProfile
from gridillusion.core.slots import (
    MAIN_SLOT,
    QUADRANT_ORDER,
    QuadrantTag,
    SlotAssignment,
    assignment_from_sequence,
    footer_slot,
    header_slot,
    validate_assignment,
)
from gridillusion.core.splitter import split_quadrants

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"


class RunStatus(str, Enum):
    """Lifecycle of a pipeline run: pending -> processing -> completed | failed."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class InputResolver(Protocol):
    def resolve(self, ref: str) -> bytes:
        """Return the bytes behind ``ref``; raise ``NotFound`` if absent."""
        ...


class OutputSink(Protocol):
    def store(self, key: str, data: bytes, content_type: str) -> str:
        """Persist ``data`` under ``key`` and return its location; raise ``SinkWriteError``."""
        ...


class StatusReporter(Protocol):
    def set_status(self, run_id: str, status: RunStatus) -> None: ...

    def set_result(self, run_id: str, locations: list[str]) -> None: ...


@dataclass
class PipelineRun:
    """Outcome of one pipeline execution."""

    run_id: str
    profile: str
    status: RunStatus = RunStatus.PENDING
    locations: list[str] = field(default_factory=list)


def result_key(run_id: str, tag: QuadrantTag) -> str:
    return f"{run_id}/result-{tag.value}.jpg"


def quadrant_key(run_id: str, tag: QuadrantTag) -> str:
    return f"{run_id}/quadrant-{tag.value}.jpg"


class GridPipeline:
    """Parameterised grid orchestrator driven by a :class:`GridProfile`.

    Attributes:
        profile: Output geometry, encoding and split policy.
        resolver: Source of input bytes.
        sink: Destination for encoded tiles.
        reporter: Optional status ledger notified at each transition.
        max_workers: Thread pool size for per-run decode/compose work.
    """

    def __init__(
        self,
        profile: GridProfile,
        resolver: InputResolver,
        sink: OutputSink,
        reporter: StatusReporter | None = None,
        max_workers: int = 4,
    ) -> None:
        self.profile = profile
        self.resolver = resolver
        self.sink = sink
        self.reporter = reporter
        self.max_workers = max_workers

    # ------------------------------------------------------------------
    # Variants
    # ------------------------------------------------------------------

    def run_auto_split(self, run_id: str, inputs: Sequence[str]) -> PipelineRun:
        """Run on nine positional inputs: main, four headers, four footers.

        Raises:
            NotFound: If fewer than nine inputs are given or one cannot be resolved.
        """
        return self._run(
            run_id, lambda: self._compose_slots(run_id, assignment_from_sequence(inputs))
        )

    def run_assigned(self, run_id: str, assignment: SlotAssignment) -> PipelineRun:
        """Run on an explicit slot-name mapping.

        The assignment is checked before any input is resolved, so an
        incomplete mapping fails with ``NotFound`` without touching the sink.
        """
        return self._run(
            run_id, lambda: self._compose_slots(run_id, validate_assignment(assignment))
        )

    def split_only(self, run_id: str, source: str) -> PipelineRun:
        """Split a single input into four quadrant JPEGs without composing tiles."""
        return self._run(run_id, lambda: self._split_source(run_id, source))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(self, run_id: str, work: Callable[[], list[str]]) -> PipelineRun:
        run = PipelineRun(run_id=run_id, profile=self.profile.name)
        self._transition(run, RunStatus.PROCESSING)

        try:
            locations = work()
            if self.reporter is not None:
                self.reporter.set_result(run_id, locations)
        except Exception as e:
            logger.error(f"Run {run_id} failed: {e}")
            try:
                self._transition(run, RunStatus.FAILED)
            except Exception:
                logger.exception(f"Could not mark run {run_id} as failed")
            raise

        run.locations = locations
        self._transition(run, RunStatus.COMPLETED)
        logger.info(f"Run {run_id} completed with {len(locations)} outputs")
        return run

    def _transition(self, run: PipelineRun, status: RunStatus) -> None:
        run.status = status
        if self.reporter is not None:
            self.reporter.set_status(run.run_id, status)
        logger.info(f"Run {run.run_id} ({self.profile.name}) -> {status.value}")

    def _load(self, ref: str) -> Image.Image:
        return raster.decode(self.resolver.resolve(ref))

    def _compose_slots(self, run_id: str, slots: dict[str, str]) -> list[str]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            decoded = dict(zip(slots.keys(), pool.map(self._load, slots.values())))
            quadrants = split_quadrants(decoded[MAIN_SLOT], self.profile)

            def build(tag: QuadrantTag) -> CompositeTile:
                return compose_tile(
                    tag,
                    quadrants[tag],
                    decoded[header_slot(tag)],
                    decoded[footer_slot(tag)],
                    self.profile,
                )

            tiles = list(pool.map(build, QUADRANT_ORDER))

        return [
            self.sink.store(result_key(run_id, tile.tag), tile.data, JPEG_CONTENT_TYPE)
            for tile in tiles
        ]

    def _split_source(self, run_id: str, source: str) -> list[str]:
        quadrants = split_quadrants(self.resolver.resolve(source), self.profile)
        return [
            self.sink.store(
                quadrant_key(run_id, tag),
                raster.encode_jpeg(quadrants[tag], self.profile.jpeg_quality),
                JPEG_CONTENT_TYPE,
            )
            for tag in QUADRANT_ORDER
        ]
