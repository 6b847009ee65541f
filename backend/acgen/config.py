# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Application Configuration
All settings are loaded from environment variables with defaults suited
to a single-host deployment. Override via backend/.env or environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Storage ─────────────────────────────────────────────────────────────
    # Asset files (products/, decorations/) and batch job outputs (jobs/)
    storage_root: Path = Path("./storage")
    # JSON record files (products.json, decorations.json, ...)
    data_root: Path = Path("./data")
    upload_max_mb: int = 20

    # ─── Catalog Store ───────────────────────────────────────────────────────
    catalog_backend: Literal["memory", "json"] = "json"

    # ─── Job Store ───────────────────────────────────────────────────────────
    job_store_backend: Literal["memory", "redis"] = "memory"
    redis_url: str = "redis://localhost:6379/0"
    job_ttl_seconds: int = 86400  # 24 hours

    # ─── Rendering ───────────────────────────────────────────────────────────
    # Searched in order for <family>.ttf / .otf / .ttc
    font_dirs: list[Path] = Field(
        default_factory=lambda: [
            Path("./fonts"),
            Path("/usr/share/fonts/truetype"),
            Path("/usr/share/fonts/opentype"),
        ]
    )
    default_font_family: str = "NotoSansSC-Regular"

    # ─── Batch ───────────────────────────────────────────────────────────────
    # Variants rendered concurrently per window; 1 keeps memory flat
    batch_concurrency: int = Field(1, ge=1, le=32)

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",   # Vite dev server
            "http://localhost:3000",
        ]
    )

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def upload_max_bytes(self) -> int:
        return self.upload_max_mb * 1024 * 1024

    @property
    def products_dir(self) -> Path:
        return self.storage_root / "products"

    @property
    def decorations_dir(self) -> Path:
        return self.storage_root / "decorations"

    @property
    def jobs_root(self) -> Path:
        return self.storage_root / "jobs"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
