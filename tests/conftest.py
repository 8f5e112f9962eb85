"""Shared pytest fixtures for Grid Illusion tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from PIL import Image

from gridillusion.core.config import GridIllusionConfig
from gridillusion.core.errors import SinkWriteError
from gridillusion.core.slots import SLOT_NAMES
from gridillusion.storage.blob_store import FileBlobStore
from gridillusion.storage.job_ledger import JobLedger


def make_image_bytes(
    width: int,
    height: int,
    color: tuple[int, ...] = (200, 40, 40),
    mode: str = "RGB",
    format: str = "PNG",
) -> bytes:
    """Encode a solid-colour test image.

    Args:
        width: Image width
        height: Image height
        color: Fill colour matching ``mode``
        mode: Pillow mode (RGB, RGBA, L, ...)
        format: Pillow format name

    Returns:
        Encoded image bytes
    """
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=format)
    return buffer.getvalue()


class RecordingSink:
    """In-memory output sink that remembers every write."""

    def __init__(self, fail_on: str | None = None):
        self.writes: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.fail_on = fail_on

    def store(self, key: str, data: bytes, content_type: str) -> str:
        if self.fail_on and key.endswith(self.fail_on):
            raise SinkWriteError(f"Refusing to write {key}")
        self.writes[key] = data
        self.content_types[key] = content_type
        return key


class RecordingReporter:
    """In-memory status reporter that keeps the transition history."""

    def __init__(self):
        self.statuses: list[tuple[str, str]] = []
        self.results: dict[str, list[str]] = {}

    def set_status(self, run_id, status) -> None:
        self.statuses.append((run_id, status.value))

    def set_result(self, run_id, locations) -> None:
        self.results[run_id] = list(locations)

    def history(self, run_id: str) -> list[str]:
        return [status for rid, status in self.statuses if rid == run_id]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> GridIllusionConfig:
    """Create a test configuration rooted in a temporary directory."""
    return GridIllusionConfig(
        data_dir=str(temp_dir / "data"),
        max_workers=2,
        _env_file=None,
    )


@pytest.fixture
def uploads(temp_dir: Path) -> FileBlobStore:
    """Blob bucket for raw inputs."""
    return FileBlobStore(temp_dir / "uploads")


@pytest.fixture
def ledger(temp_dir: Path) -> JobLedger:
    """Job ledger backed by a temporary SQLite file."""
    return JobLedger(temp_dir / "jobs.db")


@pytest.fixture
def make_image():
    """Expose :func:`make_image_bytes` to tests."""
    return make_image_bytes


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def failing_sink() -> RecordingSink:
    """Sink that rejects the bottom-left result tile."""
    return RecordingSink(fail_on="result-bl.jpg")


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def nine_image_bytes() -> list[bytes]:
    """Nine inputs in positional order, each with a distinct size and colour.

    The main image is 2160x1280; headers and footers use varied aspect
    ratios so every resize path is exercised.
    """
    main = make_image_bytes(2160, 1280, (10, 120, 200))
    headers = [
        make_image_bytes(800, 300, (250, 0, 0)),
        make_image_bytes(300, 800, (0, 250, 0)),
        make_image_bytes(500, 500, (0, 0, 250)),
        make_image_bytes(1200, 700, (250, 250, 0), format="JPEG"),
    ]
    footers = [
        make_image_bytes(640, 480, (0, 250, 250)),
        make_image_bytes(100, 100, (250, 0, 250)),
        make_image_bytes(1080, 640, (120, 120, 120, 128), mode="RGBA"),
        make_image_bytes(333, 777, (30, 30, 30), format="JPEG"),
    ]
    return [main, *headers, *footers]


@pytest.fixture
def uploaded_refs(uploads: FileBlobStore, nine_image_bytes: list[bytes]) -> list[str]:
    """Store the nine inputs in the uploads bucket and return their keys in order."""
    refs = []
    for index, (slot, data) in enumerate(zip(SLOT_NAMES, nine_image_bytes)):
        refs.append(uploads.store(f"job/{index}-{slot}", data, "image/png"))
    return refs
