"""File-backed collaborators for the pipeline: blob buckets and the job ledger."""

from gridillusion.storage.blob_store import FileBlobStore
from gridillusion.storage.job_ledger import JobLedger

__all__ = ["FileBlobStore", "JobLedger"]
