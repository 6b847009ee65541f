# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Batch Job State Models
Tracks the lifecycle of a background batch render from submission
through archive completion. Used by the JobStore and status endpoints.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class JobStage(str, Enum):
    QUEUED = "queued"
    LOADING_CATALOG = "loading_catalog"
    RENDERING = "rendering"
    PACKAGING = "packaging"
    DONE = "done"
    FAILED = "failed"


# Progress percentage at the START of each stage
STAGE_PROGRESS: dict[JobStage, int] = {
    JobStage.QUEUED: 0,
    JobStage.LOADING_CATALOG: 5,
    JobStage.RENDERING: 10,
    JobStage.PACKAGING: 95,
    JobStage.DONE: 100,
    JobStage.FAILED: 0,
}


class OutputBundle(BaseModel):
    """Result summary for a completed batch job."""
    archive_url: str
    format: str
    total_variants: int = 0
    rendered_count: int = 0
    failed_count: int = 0
    file_names: list[str] = Field(default_factory=list)


class Job(BaseModel):
    """Full job state record stored in JobStore."""
    job_id: str
    status: JobStatus = JobStatus.PENDING
    stage: JobStage = JobStage.QUEUED
    progress: int = Field(0, ge=0, le=100)
    error: Optional[str] = None
    result: Optional[OutputBundle] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    def to_status_response(self) -> dict:
        """Serialise to the shape returned by GET /status/{job_id}."""
        resp = {
            "job_id": self.job_id,
            "status": self.status.value,
            "stage": self.stage.value,
            "progress": self.progress,
            "error": self.error,
        }
        if self.result:
            resp["result"] = self.result.model_dump()
        return resp


class BatchJobResponse(BaseModel):
    """Response body for POST /batch/jobs."""
    job_id: str
    status: JobStatus = JobStatus.PENDING
    total_variants: int
    message: str = "Batch job created. Poll /status/{job_id} for progress."
