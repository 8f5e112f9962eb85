"""Pydantic request and response models for the Grid Illusion API.

Models
------
ProcessRequest
    Payload for ``POST /api/process-twitter-grid`` — names the uploaded job
    to run and, optionally, the grid profile to run it under.
JobResponse
    A job ledger record as returned by ``GET /api/jobs/{job_id}``.
RunResponse
    Outcome of a completed pipeline run.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProcessRequest(BaseModel):
    """Request body for the ``POST /api/process-twitter-grid`` endpoint.

    Attributes:
        job_id: Identifier returned by ``POST /api/jobs``.
        profile: Grid profile name.  ``None`` keeps the profile the job was
            created with.
    """

    job_id: str = Field(
        ...,
        min_length=1,
        description="Job identifier returned by POST /api/jobs.",
    )
    profile: str | None = Field(
        default=None,
        description="Grid profile override (e.g. 'twitter-grid-native').",
    )


class JobResponse(BaseModel):
    """Job ledger record."""

    id: str
    status: str
    profile: str
    raw_files: list[str] = Field(default_factory=list)
    processed_files: list[str] = Field(default_factory=list)
    created_at: str
    completed_at: str | None = None


class RunResponse(BaseModel):
    """Outcome of a completed run.

    Attributes:
        job_id: Run identifier.
        status: Terminal status (always ``completed`` in a 200 response).
        profile: Grid profile the run used.
        processed_files: Blob keys of the stored outputs, TL/TR/BL/BR order.
        result_urls: Download URLs for the stored outputs.
    """

    job_id: str
    status: str
    profile: str
    processed_files: list[str]
    result_urls: list[str]
