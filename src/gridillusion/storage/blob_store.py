"""Directory-backed blob store.

Each :class:`FileBlobStore` is one bucket rooted at a directory.  Keys are
``/``-separated relative paths such as ``{job_id}/result-tl.jpg``; they map
one-to-one onto files below the root.  The store implements both the
``InputResolver`` and the ``OutputSink`` protocols of
:mod:`gridillusion.core.pipeline`.

Keys that would escape the bucket root (absolute paths, ``..`` segments)
are rejected.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gridillusion.core.errors import NotFound, SinkWriteError

logger = logging.getLogger(__name__)


class FileBlobStore:
    """Store and fetch byte buffers under a root directory."""

    def __init__(self, root: Path):
        """Initialize the bucket.

        Args:
            root: Bucket directory, created if missing
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized blob store at {self.root}")

    def _path(self, key: str) -> Path:
        """Map a key to a file path inside the bucket.

        Raises:
            ValueError: If the key is empty or points outside the bucket.
        """
        if not key or key.startswith("/") or "\\" in key:
            raise ValueError(f"Invalid blob key: {key!r}")

        parts = key.split("/")
        if any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid blob key: {key!r}")

        return self.root.joinpath(*parts)

    def resolve(self, ref: str) -> bytes:
        """Return the bytes stored under ``ref``.

        Raises:
            NotFound: If the key is invalid or nothing is stored under it.
        """
        try:
            path = self._path(ref)
        except ValueError as e:
            raise NotFound(str(e)) from e

        if not path.is_file():
            raise NotFound(f"No blob stored under {ref!r}")
        return path.read_bytes()

    def store(self, key: str, data: bytes, content_type: str) -> str:
        """Write ``data`` under ``key``, replacing any previous blob.

        Returns:
            The key, which is the blob's location within this bucket.

        Raises:
            SinkWriteError: If the key is invalid or the write fails.
        """
        try:
            path = self._path(key)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except (ValueError, OSError) as e:
            raise SinkWriteError(f"Failed to store {key!r}: {e}") from e

        logger.debug(f"Stored {key} ({content_type}, {len(data)} bytes)")
        return key

    def path_for(self, key: str) -> Path:
        """Return the on-disk path of an existing blob.

        Raises:
            NotFound: If the key is invalid or nothing is stored under it.
        """
        try:
            path = self._path(key)
        except ValueError as e:
            raise NotFound(str(e)) from e

        if not path.is_file():
            raise NotFound(f"No blob stored under {key!r}")
        return path
