# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: POST /batch/generate + POST /batch/jobs
Streaming ZIP download for interactive use, and a background job variant
that writes the archive to per-job storage for later download.
"""

from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Request, status
from fastapi.responses import StreamingResponse

from acgen.api.routes.compose import attachment_headers
from acgen.core.batch import run_batch_job, stream_batch_zip
from acgen.dependencies import CatalogDep, JobStoreDep
from acgen.models.composition import BatchRequest
from acgen.models.job import BatchJobResponse, JobStatus
from acgen.utils.logger import get_logger

router = APIRouter(prefix="/batch", tags=["batch"])
log = get_logger(__name__)


@router.post(
    "/generate",
    summary="Render variants and stream a ZIP",
    description=(
        "Variants are rendered in order and streamed as they finish. "
        "A failed variant becomes an error_<NNNN>.txt entry instead of "
        "aborting the archive. Rendering stops if the client disconnects."
    ),
    response_class=StreamingResponse,
)
async def batch_generate(
    body: BatchRequest,
    request: Request,
    catalog: CatalogDep,
) -> StreamingResponse:
    snapshot = catalog.snapshot()
    archive_name = f"{body.variants[0].project_name}_batch_output.zip"

    log.info(
        "batch_stream_start",
        variants=len(body.variants),
        format=body.format.value,
    )
    return StreamingResponse(
        stream_batch_zip(body, snapshot, should_stop=request.is_disconnected),
        media_type="application/zip",
        headers=attachment_headers(archive_name),
    )


@router.post(
    "/jobs",
    response_model=BatchJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a background batch job",
    description=(
        "Returns a job_id for polling via GET /status/{job_id}. When done, "
        "the archive is available at /assets/{job_id}/batch.zip."
    ),
)
async def submit_batch_job(
    body: BatchRequest,
    background_tasks: BackgroundTasks,
    store: JobStoreDep,
    catalog: CatalogDep,
) -> BatchJobResponse:
    job = store.create_job()
    background_tasks.add_task(run_batch_job, job.job_id, body, store, catalog)

    log.info(
        "batch_job_submitted",
        job_id=job.job_id,
        variants=len(body.variants),
        format=body.format.value,
    )
    return BatchJobResponse(
        job_id=job.job_id,
        status=JobStatus.PENDING,
        total_variants=len(body.variants),
    )
