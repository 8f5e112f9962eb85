"""Grid Illusion Composer — FastAPI Application.

This module defines the FastAPI ``app`` instance, the REST routes that wrap
:class:`~gridillusion.core.pipeline.GridPipeline`, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
- **Raw uploads** and **processed results** are two
  :class:`~gridillusion.storage.blob_store.FileBlobStore` buckets rooted at
  ``config.uploads_dir`` and ``config.results_dir``.
- **Job status** lives in the SQLite
  :class:`~gridillusion.storage.job_ledger.JobLedger`; clients poll
  ``GET /api/jobs/{id}``.
- **Pipeline runs** are CPU-bound and executed in the worker threadpool so
  the event loop stays responsive.

Endpoints
---------
========  ==================================  ==================================
Method    Path                                Purpose
========  ==================================  ==================================
GET       ``/api/profiles``                   Registered grid profiles
POST      ``/api/jobs``                       Upload 9 ordered images
GET       ``/api/jobs``                       Recent jobs
GET       ``/api/jobs/{id}``                  Job status and results
POST      ``/api/process-twitter-grid``       Run the auto-split variant on a job
POST      ``/api/process-custom-grid``        Upload slot-named images and run
POST      ``/api/split``                      Split one image into 4 quadrants
GET       ``/api/results/{id}/{filename}``    Download a stored output
========  ==================================  ==================================

Usage
-----
CLI (installed entry point)::

    gridillusion

Direct invocation::

    python -m gridillusion.api.main
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import PurePosixPath

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile

from gridillusion import __version__
from gridillusion.api.models import JobResponse, ProcessRequest, RunResponse
from gridillusion.core.config import config
from gridillusion.core.errors import (
    BoundsError,
    DecodeError,
    GridIllusionError,
    NotFound,
    SinkWriteError,
)
from gridillusion.core.pipeline import GridPipeline, PipelineRun
from gridillusion.core.profiles import GridProfile, profile_registry
from gridillusion.core.slots import SLOT_NAMES
from gridillusion.storage.blob_store import FileBlobStore
from gridillusion.storage.job_ledger import JobLedger

logger = logging.getLogger(__name__)

CUSTOM_GRID_PROFILE = "custom-grid"

# Domain error -> HTTP status.  Order matters: first isinstance match wins.
_STATUS_CODES: tuple[tuple[type[Exception], int], ...] = (
    (NotFound, 404),
    (DecodeError, 422),
    (BoundsError, 422),
    (SinkWriteError, 502),
    (ValueError, 400),
)


# ---------------------------------------------------------------------------
# Application lifecycle — storage setup.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the blob buckets and the job ledger for the application lifetime.

    Paths are read from :data:`~gridillusion.core.config.config` at startup,
    so tests can substitute a configuration before the client starts.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    app.state.uploads = FileBlobStore(config.uploads_dir)
    app.state.results = FileBlobStore(config.results_dir)
    app.state.ledger = JobLedger(config.jobs_db)
    logger.info(f"Storage ready under {config.data_dir}")

    yield


app = FastAPI(
    title="Grid Illusion Composer",
    description="Split and recombine images into 2x2 grid-illusion tile sets.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Helpers.
# ---------------------------------------------------------------------------


def _http_error(error: Exception) -> HTTPException:
    """Translate a pipeline exception into an :class:`HTTPException`."""
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(error, exc_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def _resolve_profile(name: str | None) -> GridProfile:
    """Look up a grid profile, falling back to the configured default.

    Raises:
        HTTPException: 400 if the profile name is unknown.
    """
    try:
        return profile_registry.get(name or config.default_profile)
    except NotFound as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


def _pipeline(profile: GridProfile) -> GridPipeline:
    return GridPipeline(
        profile,
        resolver=app.state.uploads,
        sink=app.state.results,
        reporter=app.state.ledger,
        max_workers=config.max_workers,
    )


def _upload_key(job_id: str, label: str, filename: str | None) -> str:
    """Build the raw-upload blob key, keeping only the client file's suffix."""
    suffix = PurePosixPath(filename or "").suffix.lower()
    return f"{job_id}/{label}{suffix}"


def _run_response(run: PipelineRun) -> dict:
    return RunResponse(
        job_id=run.run_id,
        status=run.status.value,
        profile=run.profile,
        processed_files=run.locations,
        result_urls=[f"/api/results/{location}" for location in run.locations],
    ).model_dump()


async def _execute(method, *args) -> dict:
    """Run a pipeline method in the threadpool and map its errors to HTTP."""
    try:
        run = await run_in_threadpool(method, *args)
    except (GridIllusionError, ValueError) as e:
        raise _http_error(e) from e
    return _run_response(run)


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/profiles")
async def list_profiles() -> dict:
    """Return every registered grid profile and the configured default."""
    return {
        "version": __version__,
        "default_profile": config.default_profile,
        "profiles": profile_registry.describe(),
    }


@app.post("/api/jobs")
async def create_job(
    files: list[UploadFile] = File(...),
    profile: str | None = Form(default=None),
) -> dict:
    """Upload nine images in positional order and create a ``pending`` job.

    Order: main, header TL/TR/BL/BR, footer TL/TR/BL/BR.

    Returns:
        Dictionary with ``job_id``, ``status``, ``profile`` and ``raw_files``.

    Raises:
        HTTPException: 400 for a wrong file count or unknown profile.
    """
    grid_profile = _resolve_profile(profile)

    if len(files) != len(SLOT_NAMES):
        raise HTTPException(
            status_code=400,
            detail=f"Expected {len(SLOT_NAMES)} images, got {len(files)}",
        )

    uploads: FileBlobStore = app.state.uploads
    job_id = str(uuid.uuid4())
    raw_files: list[str] = []

    for index, (slot, upload) in enumerate(zip(SLOT_NAMES, files)):
        key = _upload_key(job_id, f"{index}-{slot}", upload.filename)
        data = await upload.read()
        try:
            uploads.store(key, data, upload.content_type or "application/octet-stream")
        except SinkWriteError as e:
            raise _http_error(e) from e
        raw_files.append(key)

    app.state.ledger.create_job(raw_files, grid_profile.name, job_id=job_id)

    return {
        "job_id": job_id,
        "status": "pending",
        "profile": grid_profile.name,
        "raw_files": raw_files,
    }


@app.get("/api/jobs")
async def list_jobs(limit: int = 50) -> dict:
    """Return the most recent jobs, newest first."""
    return {"jobs": app.state.ledger.list_jobs(limit=limit)}


@app.get("/api/jobs/{job_id}")
async def get_job(job_id: str) -> dict:
    """Return a job's status and, once completed, its outputs.

    Raises:
        HTTPException: 404 if the job does not exist.
    """
    job = app.state.ledger.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return JobResponse(**job).model_dump()


@app.post("/api/process-twitter-grid")
async def process_twitter_grid(req: ProcessRequest) -> dict:
    """Run the auto-split variant over an uploaded job's nine inputs.

    Args:
        req: Validated :class:`ProcessRequest` payload.

    Returns:
        :class:`RunResponse` as a dictionary.

    Raises:
        HTTPException: 404 for an unknown job or missing input, 422 for an
            unreadable image, 502 if an output cannot be stored.
    """
    job = app.state.ledger.get_job(req.job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    grid_profile = _resolve_profile(req.profile or job["profile"])
    if grid_profile.name != job["profile"]:
        app.state.ledger.set_profile(req.job_id, grid_profile.name)

    return await _execute(_pipeline(grid_profile).run_auto_split, req.job_id, job["raw_files"])


@app.post("/api/process-custom-grid")
async def process_custom_grid(request: Request) -> dict:
    """Upload images under explicit slot names and run the assigned variant.

    The multipart form carries one file field per slot (``main``,
    ``header-tl`` ... ``footer-br``) and an optional ``profile`` field
    (default ``custom-grid``).  A job is recorded even when slots are
    missing, so its ledger status reads ``failed`` afterwards.

    Raises:
        HTTPException: 404 if any slot is missing, 422 for an unreadable
            image, 502 if an output cannot be stored.
    """
    form = await request.form()
    profile_field = form.get("profile")
    grid_profile = _resolve_profile(
        profile_field if isinstance(profile_field, str) and profile_field else CUSTOM_GRID_PROFILE
    )

    uploads: FileBlobStore = app.state.uploads
    job_id = str(uuid.uuid4())
    assignment: dict[str, str] = {}

    for slot in SLOT_NAMES:
        upload = form.get(slot)
        if not isinstance(upload, StarletteUploadFile):
            continue
        key = _upload_key(job_id, slot, upload.filename)
        data = await upload.read()
        try:
            uploads.store(key, data, upload.content_type or "application/octet-stream")
        except SinkWriteError as e:
            raise _http_error(e) from e
        assignment[slot] = key

    app.state.ledger.create_job(list(assignment.values()), grid_profile.name, job_id=job_id)
    return await _execute(_pipeline(grid_profile).run_assigned, job_id, assignment)


@app.post("/api/split")
async def split_image(
    file: UploadFile = File(...),
    profile: str | None = Form(default=None),
) -> dict:
    """Split a single image into four quadrant JPEGs without composing tiles.

    Returns:
        :class:`RunResponse` as a dictionary; outputs are named
        ``quadrant-{tag}.jpg``.
    """
    grid_profile = _resolve_profile(profile)
    uploads: FileBlobStore = app.state.uploads
    job_id = str(uuid.uuid4())

    key = _upload_key(job_id, "source", file.filename)
    try:
        uploads.store(key, await file.read(), file.content_type or "application/octet-stream")
    except SinkWriteError as e:
        raise _http_error(e) from e

    app.state.ledger.create_job([key], grid_profile.name, job_id=job_id)
    return await _execute(_pipeline(grid_profile).split_only, job_id, key)


@app.get("/api/results/{job_id}/{filename}")
async def get_result(job_id: str, filename: str) -> FileResponse:
    """Serve one stored output image.

    Raises:
        HTTPException: 404 if the output does not exist.
    """
    try:
        path = app.state.results.path_for(f"{job_id}/{filename}")
    except NotFound as e:
        raise HTTPException(status_code=404, detail="Result not found") from e
    return FileResponse(path, media_type="image/jpeg")


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~gridillusion.core.config.config`
    (``GRIDILLUSION_SERVER_HOST`` / ``GRIDILLUSION_SERVER_PORT``).

    This function is registered as the ``gridillusion`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "gridillusion.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
