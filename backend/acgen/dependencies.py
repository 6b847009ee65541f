# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: FastAPI Dependencies
Singleton providers for the JobStore and the CatalogStore.
Both are instantiated once by the lifespan in main.py and stored here as
module-level singletons; route handlers receive them via Depends().
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from acgen.config import get_settings
from acgen.core.catalog_store import CatalogStore, InMemoryCatalogStore, JsonCatalogStore
from acgen.core.job_store import InMemoryJobStore, JobStore, RedisJobStore
from acgen.utils.logger import get_logger

log = get_logger(__name__)

# ─── JobStore Singleton ───────────────────────────────────────────────────────

_job_store: JobStore | None = None


def init_job_store() -> None:
    """
    Initialise the JobStore singleton based on JOB_STORE_BACKEND config.
    Called once during application lifespan startup.
    """
    global _job_store
    settings = get_settings()

    if settings.job_store_backend == "redis":
        log.info("init_job_store", backend="redis", url=settings.redis_url)
        _job_store = RedisJobStore(
            redis_url=settings.redis_url,
            ttl_seconds=settings.job_ttl_seconds,
        )
    else:
        log.info("init_job_store", backend="memory")
        _job_store = InMemoryJobStore()


def get_job_store() -> JobStore:
    """FastAPI dependency: the JobStore singleton."""
    if _job_store is None:
        raise RuntimeError(
            "JobStore has not been initialised. "
            "Ensure init_job_store() is called during app lifespan startup."
        )
    return _job_store


# ─── CatalogStore Singleton ───────────────────────────────────────────────────

_catalog_store: CatalogStore | None = None


def init_catalog_store() -> None:
    """Initialise the CatalogStore singleton based on CATALOG_BACKEND config."""
    global _catalog_store
    settings = get_settings()

    if settings.catalog_backend == "json":
        log.info("init_catalog_store", backend="json", data_root=str(settings.data_root))
        _catalog_store = JsonCatalogStore(settings.data_root)
    else:
        log.info("init_catalog_store", backend="memory")
        _catalog_store = InMemoryCatalogStore()


def get_catalog_store() -> CatalogStore:
    """FastAPI dependency: the CatalogStore singleton."""
    if _catalog_store is None:
        raise RuntimeError(
            "CatalogStore has not been initialised. "
            "Ensure init_catalog_store() is called during app lifespan startup."
        )
    return _catalog_store


# Annotated type aliases for clean route signatures
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
CatalogDep = Annotated[CatalogStore, Depends(get_catalog_store)]
