"""SQLite ledger of processing jobs."""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any

from gridillusion.core.errors import NotFound
from gridillusion.core.pipeline import RunStatus

logger = logging.getLogger(__name__)


class JobLedger:
    """Track processing jobs and their status using SQLite.

    One row per job: the raw input keys it was created with, the grid
    profile it runs under, its current status and, once completed, the
    keys of the processed tiles.  Implements the ``StatusReporter``
    protocol used by :class:`~gridillusion.core.pipeline.GridPipeline`.
    """

    def __init__(self, db_path: Path):
        """Initialize the job ledger.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized job ledger at {self.db_path}")

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS processing_jobs (
                    id TEXT PRIMARY KEY,
                    status TEXT NOT NULL,
                    profile TEXT NOT NULL,
                    raw_files TEXT NOT NULL,
                    processed_files TEXT,
                    created_at TIMESTAMP NOT NULL,
                    completed_at TIMESTAMP
                )
                """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_jobs_created_at
                ON processing_jobs(created_at DESC)
                """)

            conn.commit()

    @staticmethod
    def _row_to_job(row: sqlite3.Row) -> dict[str, Any]:
        return {
            "id": row["id"],
            "status": row["status"],
            "profile": row["profile"],
            "raw_files": json.loads(row["raw_files"]),
            "processed_files": json.loads(row["processed_files"]) if row["processed_files"] else [],
            "created_at": row["created_at"],
            "completed_at": row["completed_at"],
        }

    def create_job(
        self, raw_files: list[str], profile: str, job_id: str | None = None
    ) -> str:
        """Insert a new ``pending`` job.

        Args:
            raw_files: Blob keys of the job's inputs, in positional order
            profile: Name of the grid profile the job will run under
            job_id: Explicit identifier (a UUID4 is generated when omitted)

        Returns:
            The job identifier
        """
        job_id = job_id or str(uuid.uuid4())

        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                INSERT INTO processing_jobs (id, status, profile, raw_files, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    job_id,
                    RunStatus.PENDING.value,
                    profile,
                    json.dumps(list(raw_files)),
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()

        logger.info(f"Created job {job_id} with {len(raw_files)} inputs ({profile})")
        return job_id

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        """Return a job record, or None if no such job exists."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT * FROM processing_jobs WHERE id = ? LIMIT 1", (job_id,)
            ).fetchone()
            return self._row_to_job(row) if row else None

    def list_jobs(self, limit: int = 50) -> list[dict[str, Any]]:
        """Return the most recent jobs, newest first."""
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                "SELECT * FROM processing_jobs ORDER BY created_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
            return [self._row_to_job(row) for row in rows]

    def set_status(self, run_id: str, status: RunStatus) -> None:
        """Update a job's status; ``completed_at`` is set only while the job is ``completed``.

        Raises:
            NotFound: If the job does not exist
        """
        status = RunStatus(status)
        completed_at = datetime.now().isoformat() if status is RunStatus.COMPLETED else None

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                """
                UPDATE processing_jobs
                SET status = ?, completed_at = ?
                WHERE id = ?
                """,
                (status.value, completed_at, run_id),
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise NotFound(f"Job {run_id} not found")

        logger.debug(f"Job {run_id} status -> {status.value}")

    def set_result(self, run_id: str, locations: list[str]) -> None:
        """Record the output locations of a job.

        Raises:
            NotFound: If the job does not exist
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE processing_jobs SET processed_files = ? WHERE id = ?",
                (json.dumps(list(locations)), run_id),
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise NotFound(f"Job {run_id} not found")

    def set_profile(self, job_id: str, profile: str) -> None:
        """Record the grid profile a job is processed with.

        Raises:
            NotFound: If the job does not exist
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(
                "UPDATE processing_jobs SET profile = ? WHERE id = ?",
                (profile, job_id),
            )
            conn.commit()

            if cursor.rowcount == 0:
                raise NotFound(f"Job {job_id} not found")
