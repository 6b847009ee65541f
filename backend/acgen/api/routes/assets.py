# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: GET /assets/{job_id}/{file_path}
Serves batch job outputs (batch.zip) from per-job namespaced storage.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from acgen.dependencies import JobStoreDep
from acgen.utils.logger import get_logger
from acgen.utils.storage import outputs_dir

router = APIRouter(tags=["assets"])
log = get_logger(__name__)

# Only these extensions are servable
ALLOWED_EXTENSIONS = {".zip", ".png", ".psd", ".txt"}


def _safe_resolve(job_id: str, file_path: str) -> Path:
    """
    Resolve the requested path inside the job's outputs directory.
    Raises HTTPException(403) on traversal or a disallowed extension.
    """
    out_dir = outputs_dir(job_id).resolve()
    requested = (out_dir / file_path).resolve()

    try:
        requested.relative_to(out_dir)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Path traversal not allowed.",
        )

    if requested.suffix.lower() not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"File type '{requested.suffix}' not servable.",
        )

    return requested


@router.get(
    "/assets/{job_id}/{file_path:path}",
    summary="Retrieve a batch job output",
    description="Only files inside the job's outputs/ directory are accessible.",
)
async def get_asset(
    job_id: str,
    file_path: str,
    store: JobStoreDep,
) -> FileResponse:
    store.require_job(job_id)
    resolved = _safe_resolve(job_id, file_path)

    if not resolved.exists():
        log.warning("job_asset_not_found", job_id=job_id, file_path=file_path)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Asset '{file_path}' not yet available for job {job_id}.",
        )

    media_type, _ = mimetypes.guess_type(str(resolved))
    media_type = media_type or "application/octet-stream"

    log.debug("asset_served", job_id=job_id, file_path=file_path)
    return FileResponse(path=str(resolved), media_type=media_type, filename=resolved.name)
