# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Batch JobStore
State records for background batch renders (POST /batch/jobs).
Swap InMemoryJobStore for RedisJobStore without touching the batch runner.

InMemoryJobStore  — development / single-worker deployments
RedisJobStore     — multi-worker deployments; records expire after job_ttl_seconds
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from acgen.api.middleware.error_handler import JobNotFoundError
from acgen.models.job import Job, JobStage, JobStatus, OutputBundle, STAGE_PROGRESS
from acgen.utils.logger import get_logger

log = get_logger(__name__)

_TERMINAL_STATUS = {
    JobStage.DONE: JobStatus.DONE,
    JobStage.FAILED: JobStatus.FAILED,
}


def _apply_update(
    job: Job,
    *,
    status: Optional[JobStatus],
    stage: Optional[JobStage],
    progress: Optional[int],
    error: Optional[str],
    result: Optional[OutputBundle],
) -> Job:
    """Copy `job` with every non-None field replaced and updated_at refreshed."""
    changes = {
        name: value
        for name, value in (
            ("status", status),
            ("stage", stage),
            ("progress", progress),
            ("error", error),
            ("result", result),
        )
        if value is not None
    }
    changes["updated_at"] = datetime.now(timezone.utc)
    return job.model_copy(update=changes)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class JobStore(ABC):
    """
    Abstract base class for all job state backends.
    All methods are synchronous; the batch runner calls them between windows.
    """

    @abstractmethod
    def create_job(self) -> Job:
        """Create a new job with PENDING status. Returns the Job."""

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[Job]:
        """Return Job by ID, or None if not found."""

    @abstractmethod
    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        stage: Optional[JobStage] = None,
        progress: Optional[int] = None,
        error: Optional[str] = None,
        result: Optional[OutputBundle] = None,
    ) -> None:
        """Partially update a job record. Only provided fields are changed."""

    @abstractmethod
    def delete_job(self, job_id: str) -> bool:
        """Remove a job record. Returns False if it did not exist."""

    def require_job(self, job_id: str) -> Job:
        """get_job() that raises JobNotFoundError instead of returning None."""
        job = self.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return job

    def advance_stage(self, job_id: str, stage: JobStage) -> None:
        """Set stage, its STAGE_PROGRESS percentage and the matching status."""
        self.update_job(
            job_id,
            stage=stage,
            progress=STAGE_PROGRESS.get(stage, 0),
            status=_TERMINAL_STATUS.get(stage, JobStatus.RUNNING),
        )

    def fail_job(self, job_id: str, error: str) -> None:
        """Mark a job as failed with an error message."""
        self.update_job(
            job_id,
            status=JobStatus.FAILED,
            stage=JobStage.FAILED,
            error=error,
        )
        log.error("job_failed", job_id=job_id, error=error)


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemoryJobStore(JobStore):
    """
    Thread-safe in-memory job store using a dict + RLock.
    All data is lost on process restart.
    """

    def __init__(self) -> None:
        self._store: dict[str, Job] = {}
        self._lock = threading.RLock()

    def create_job(self) -> Job:
        job = Job(job_id=str(uuid.uuid4()))
        with self._lock:
            self._store[job.job_id] = job
        log.info("job_created", job_id=job.job_id, backend="memory")
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            job = self._store.get(job_id)
            return job.model_copy(deep=True) if job is not None else None

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        stage: Optional[JobStage] = None,
        progress: Optional[int] = None,
        error: Optional[str] = None,
        result: Optional[OutputBundle] = None,
    ) -> None:
        with self._lock:
            job = self._store.get(job_id)
            if job is None:
                log.warning("update_job_not_found", job_id=job_id)
                return
            self._store[job_id] = _apply_update(
                job, status=status, stage=stage, progress=progress,
                error=error, result=result,
            )

        log.debug(
            "job_updated",
            job_id=job_id,
            stage=stage.value if stage else None,
            progress=progress,
        )

    def delete_job(self, job_id: str) -> bool:
        with self._lock:
            return self._store.pop(job_id, None) is not None

    def count(self) -> int:
        """Return total number of jobs in store (used by /health)."""
        with self._lock:
            return len(self._store)


# ─── Redis Implementation ────────────────────────────────────────────────────

class RedisJobStore(JobStore):
    """
    Redis-backed job store. Jobs are stored as JSON with TTL expiry that
    is refreshed on every update. Requires the `redis` extra.
    """

    def __init__(self, redis_url: str, ttl_seconds: int = 86400) -> None:
        try:
            import redis as redis_lib
        except ImportError as e:
            raise ImportError(
                "redis package required for RedisJobStore. "
                "Install with: pip install 'ac-gen[redis]'"
            ) from e

        self._client = redis_lib.from_url(redis_url, decode_responses=True)
        self._ttl = ttl_seconds
        self._prefix = "acgen:job:"

        self._client.ping()
        log.info("redis_job_store_connected", url=redis_url)

    def _key(self, job_id: str) -> str:
        return f"{self._prefix}{job_id}"

    def _save(self, job: Job) -> None:
        self._client.setex(self._key(job.job_id), self._ttl, job.model_dump_json())

    def create_job(self) -> Job:
        job = Job(job_id=str(uuid.uuid4()))
        self._save(job)
        log.info("job_created", job_id=job.job_id, backend="redis")
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        raw = self._client.get(self._key(job_id))
        if raw is None:
            return None
        return Job.model_validate_json(raw)

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        stage: Optional[JobStage] = None,
        progress: Optional[int] = None,
        error: Optional[str] = None,
        result: Optional[OutputBundle] = None,
    ) -> None:
        job = self.get_job(job_id)
        if job is None:
            log.warning("update_job_not_found", job_id=job_id)
            return

        self._save(_apply_update(
            job, status=status, stage=stage, progress=progress,
            error=error, result=result,
        ))

        log.debug(
            "job_updated",
            job_id=job_id,
            stage=stage.value if stage else None,
            progress=progress,
        )

    def delete_job(self, job_id: str) -> bool:
        return bool(self._client.delete(self._key(job_id)))
