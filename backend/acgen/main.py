# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from acgen.api.middleware.error_handler import register_error_handlers
from acgen.api.routes import assets, batch, catalog, compose, projects, status
from acgen.config import get_settings
from acgen.dependencies import init_catalog_store, init_job_store
from acgen.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, create storage dirs, initialise stores.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "acgen_startup",
        version=VERSION,
        storage_root=str(settings.storage_root),
        catalog=settings.catalog_backend,
        job_store=settings.job_store_backend,
        batch_concurrency=settings.batch_concurrency,
    )

    for directory in (settings.products_dir, settings.decorations_dir, settings.jobs_root):
        directory.mkdir(parents=True, exist_ok=True)

    init_catalog_store()
    init_job_store()

    log.info("acgen_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    log.info("acgen_shutdown")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="AC-Gen",
        summary="Layered e-commerce image composition for appliance product variants.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(compose.router)
    app.include_router(batch.router)
    app.include_router(status.router)
    app.include_router(assets.router)
    app.include_router(catalog.router)
    app.include_router(projects.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "ac-gen",
            "version": VERSION,
            "catalog": settings.catalog_backend,
            "job_store": settings.job_store_backend,
        }

    return app


# Module-level app instance for uvicorn
app = create_app()
