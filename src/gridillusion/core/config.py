"""Configuration management for the Grid Illusion Composer.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the GRIDILLUSION_
prefix, allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (GRIDILLUSION_* prefix)
2. .env file in the project root
3. Default values defined in GridIllusionConfig

Example .env file:
    GRIDILLUSION_DATA_DIR=data
    GRIDILLUSION_DEFAULT_PROFILE=twitter-grid
    GRIDILLUSION_MAX_WORKERS=4
    GRIDILLUSION_SERVER_PORT=7860

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from gridillusion.core.config import config

    print(config.uploads_dir)
    print(config.default_profile)

Directory Management
--------------------
The configuration automatically creates required directories on initialization:
- data_dir: Root for all persisted state (job ledger database)
- uploads_dir: Raw uploaded images, one sub-directory per job
- results_dir: Composited output tiles, one sub-directory per job
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GridIllusionConfig(BaseSettings):
    """Main configuration for the Grid Illusion Composer.

    Attributes
    ----------
    Pipeline Settings:
        default_profile : str
            Grid profile used when a request does not name one
        max_workers : int
            Thread pool size for per-run decode and composition work (1-32)

    Paths:
        data_dir : Path
            Root directory for persisted state
        uploads_dir : Path | None
            Blob store bucket for raw uploads (defaults to data_dir / "raw-uploads")
        results_dir : Path | None
            Blob store bucket for composited tiles (defaults to data_dir / "processed-results")
        jobs_db : Path | None
            SQLite job ledger path (defaults to data_dir / "jobs.db")

    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)

    Examples
    --------
        >>> custom_config = GridIllusionConfig(
        ...     data_dir="/tmp/grid",
        ...     max_workers=2,
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRIDILLUSION_",
        case_sensitive=False,
    )

    # Pipeline settings
    default_profile: str = Field(
        default="twitter-grid",
        description="Grid profile used when a request does not name one",
    )
    max_workers: int = Field(
        default=4,
        description="Thread pool size for per-run decode and composition work",
        ge=1,
        le=32,
    )

    # Paths
    data_dir: Path = Field(
        default=Path("data"),
        description="Root directory for persisted state",
    )
    uploads_dir: Path | None = Field(
        default=None,
        description="Directory for raw uploaded images (defaults to data_dir/raw-uploads)",
    )
    results_dir: Path | None = Field(
        default=None,
        description="Directory for composited tiles (defaults to data_dir/processed-results)",
    )
    jobs_db: Path | None = Field(
        default=None,
        description="SQLite job ledger path (defaults to data_dir/jobs.db)",
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create required directories.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        if self.uploads_dir is None:
            self.uploads_dir = self.data_dir / "raw-uploads"
        if self.results_dir is None:
            self.results_dir = self.data_dir / "processed-results"
        if self.jobs_db is None:
            self.jobs_db = self.data_dir / "jobs.db"

        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.results_dir.mkdir(parents=True, exist_ok=True)


# Global configuration instance
# Loads values from environment variables (GRIDILLUSION_* prefix) and .env file.
config = GridIllusionConfig()
