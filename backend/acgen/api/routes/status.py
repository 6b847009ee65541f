# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: GET /status/{job_id}
Returns batch job status, stage and progress for frontend polling.
"""

from __future__ import annotations

from fastapi import APIRouter

from acgen.dependencies import JobStoreDep
from acgen.utils.logger import get_logger

router = APIRouter(tags=["status"])
log = get_logger(__name__)


@router.get(
    "/status/{job_id}",
    summary="Poll batch job progress",
    description=(
        "Returns status, stage and progress percentage (0-100). "
        "When status is 'done', result.archive_url points at the ZIP and "
        "result.failed_count tells how many variants became error markers."
    ),
)
async def get_status(job_id: str, store: JobStoreDep) -> dict:
    job = store.require_job(job_id)
    log.debug("status_polled", job_id=job_id, status=job.status.value, progress=job.progress)
    return job.to_status_response()
