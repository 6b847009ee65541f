# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Error Taxonomy and Global Error Handler
Domain exceptions raised by the compositor, catalog and batch layers,
plus the handlers that turn them into structured JSON error responses.
Registered on the FastAPI app in main.py.
"""

from __future__ import annotations

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from acgen.utils.logger import get_logger

log = get_logger(__name__)


class AssetNotFoundError(KeyError):
    """Raised when a product, project, decoration or instance id has no catalog entry."""

    def __init__(self, kind: str, key: str) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key

    def __str__(self) -> str:
        return f"{self.kind} not found: {self.key}"


class InvalidMetadataError(ValueError):
    """Raised when variant input or asset metadata is malformed."""


class RenderError(RuntimeError):
    """Raised when an asset cannot be read/decoded or output cannot be encoded."""


class ImageValidationError(ValueError):
    """Raised when an uploaded image fails format or size validation."""


class JobNotFoundError(KeyError):
    """Raised when a job_id does not exist in the store."""


def _error_body(code: str, message: str, detail: str | None = None) -> dict:
    body = {"error": {"code": code, "message": message}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(AssetNotFoundError)
    async def asset_not_found_handler(
        req: Request, exc: AssetNotFoundError
    ) -> JSONResponse:
        log.warning("asset_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(code="NOT_FOUND", message=str(exc)),
        )

    @app.exception_handler(InvalidMetadataError)
    async def invalid_metadata_handler(
        req: Request, exc: InvalidMetadataError
    ) -> JSONResponse:
        log.warning("invalid_metadata", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="INVALID_METADATA", message=str(exc)),
        )

    @app.exception_handler(ImageValidationError)
    async def image_validation_handler(
        req: Request, exc: ImageValidationError
    ) -> JSONResponse:
        log.warning("image_validation_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(code="IMAGE_VALIDATION_ERROR", message=str(exc)),
        )

    @app.exception_handler(JobNotFoundError)
    async def job_not_found_handler(
        req: Request, exc: JobNotFoundError
    ) -> JSONResponse:
        log.warning("job_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="JOB_NOT_FOUND",
                message=f"Job not found: {exc}",
            ),
        )

    @app.exception_handler(RenderError)
    async def render_error_handler(
        req: Request, exc: RenderError
    ) -> JSONResponse:
        log.error("render_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(code="RENDER_FAILURE", message=str(exc)),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
