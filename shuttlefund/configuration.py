"""Mini README: Centralised configuration models and helpers for Shuttlefund.

Structure:
    * ShuttlefundSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables (prefixed with
    ``SHUTTLEFUND_``), pick the snapshot storage backend, and configure the
    HTTP interface. The configuration is cached so validation runs once per
    process; tests call ``get_settings.cache_clear()`` after patching the
    environment.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings

DEFAULT_MEMBERS = ["Hiệp", "Tiến", "Băng", "Nhung"]
SUPPORTED_BACKENDS = {"json", "supabase"}


class ShuttlefundSettings(BaseSettings):
    """Runtime configuration for the Shuttlefund ledger service."""

    environment: str = Field(
        "development",
        description="Environment label controlling debug toggles and logging levels.",
    )
    log_level: str = Field("INFO", description="Root logging level name.")
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the local ledger snapshot.",
    )
    snapshot_filename: str = Field(
        "ledger.json",
        description="File name of the local JSON snapshot inside the data directory.",
    )
    storage_backend: str = Field(
        "json",
        description="Snapshot repository to use: 'json' (local file) or 'supabase'.",
    )
    supabase_url: Optional[str] = Field(
        None, description="Supabase project API URL used by the 'supabase' backend."
    )
    supabase_key: Optional[str] = Field(
        None, description="Supabase anon key used by the 'supabase' backend."
    )
    sync_group_id: str = Field(
        "my-badminton-group",
        description="Row identifier of this group's snapshot in the sync table.",
    )
    sync_table: str = Field("badminton_sync", description="Table storing group snapshots.")
    initial_members: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MEMBERS),
        description="Roster used when no stored snapshot exists yet.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the HTTP service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the HTTP service exposes.",
        ge=1,
        le=65535,
    )

    class Config:
        env_prefix = "SHUTTLEFUND_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def _expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @validator("storage_backend")
    def _known_backend(cls, value: str) -> str:
        """Reject storage backends that have no repository implementation."""

        normalised = value.strip().lower()
        if normalised not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported storage backend '{value}'. Choose one of {sorted(SUPPORTED_BACKENDS)}."
            )
        return normalised

    @property
    def snapshot_path(self) -> Path:
        """Full path of the local JSON snapshot."""

        return self.data_directory / self.snapshot_filename


@lru_cache()
def get_settings() -> ShuttlefundSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return ShuttlefundSettings()
