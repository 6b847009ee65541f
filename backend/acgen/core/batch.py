# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Batch Orchestrator
Renders a list of variants into one ZIP archive.

Per variant, in input order:
  1. Resolve project, product, decorations and instance config
  2. Build layers and render PNG/PSD (worker thread)
  3. Add the result under its deterministic name

No error on one variant aborts the batch (NotFound, InvalidMetadata,
RenderFailure, or an unexpected codec failure): an error_<NNNN>.txt
marker (1-based index) holding the variant JSON and the error takes
its place. Duplicate names get a _<n> suffix.

Variants render in windows of `batch_concurrency` via asyncio.to_thread;
results are always emitted in input order.

Two delivery modes share iter_batch():
    stream_batch_zip() — chunks for a StreamingResponse
    run_batch_job()    — background task writing jobs/{id}/outputs/batch.zip
"""

from __future__ import annotations

import asyncio
import json
import traceback
from contextlib import aclosing
from dataclasses import dataclass, replace
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional

from acgen.api.middleware.error_handler import (
    AssetNotFoundError,
    InvalidMetadataError,
    RenderError,
)
from acgen.config import get_settings
from acgen.core.catalog_store import CatalogSnapshot, CatalogStore
from acgen.core.compositor import render_variant
from acgen.core.job_store import JobStore
from acgen.models.composition import BatchRequest, CompositionInput, RenderFormat
from acgen.models.job import STAGE_PROGRESS, JobStage, OutputBundle
from acgen.modules.composition import dedupe_file_name
from acgen.utils.archive import StreamingZip
from acgen.utils.logger import get_logger, job_context, variant_context
from acgen.utils.storage import batch_archive_path, get_asset_url, init_job_dirs

log = get_logger(__name__)

StopCheck = Callable[[], Awaitable[bool]]

VARIANT_ERRORS = (AssetNotFoundError, InvalidMetadataError, RenderError)


@dataclass(frozen=True)
class BatchEntry:
    """One archive entry: a rendered file or an error marker."""
    index: int  # 1-based position in the request
    file_name: str
    data: bytes
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def error_marker_name(index: int) -> str:
    return f"error_{index:04d}.txt"


def error_marker_body(inp: CompositionInput, exc: Exception) -> bytes:
    payload = {
        "variant": inp.model_dump(mode="json"),
        "error": {"type": type(exc).__name__, "message": str(exc)},
    }
    return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")


def _failed_entry(index: int, inp: CompositionInput, exc: Exception) -> BatchEntry:
    return BatchEntry(
        index=index,
        file_name=error_marker_name(index),
        data=error_marker_body(inp, exc),
        error=str(exc),
    )


def _render_entry(
    index: int,
    inp: CompositionInput,
    snapshot: CatalogSnapshot,
    fmt: RenderFormat,
    storage_root: Path | None,
) -> BatchEntry:
    with variant_context(index, inp.product_id, inp.energy_level, inp.capacity_code):
        try:
            output = render_variant(inp, snapshot, fmt, storage_root=storage_root)
        except VARIANT_ERRORS as exc:
            log.warning("variant_failed", error_type=type(exc).__name__, error=str(exc))
            return _failed_entry(index, inp, exc)
        except Exception as exc:
            log.error(
                "variant_failed_unexpectedly",
                error_type=type(exc).__name__,
                error=str(exc),
                traceback=traceback.format_exc(),
            )
            return _failed_entry(index, inp, exc)
        log.debug("variant_entry_ready", file_name=output.file_name)
    return BatchEntry(index=index, file_name=output.file_name, data=output.data)


async def iter_batch(
    variants: list[CompositionInput],
    snapshot: CatalogSnapshot,
    fmt: RenderFormat = RenderFormat.PNG,
    *,
    concurrency: Optional[int] = None,
    should_stop: Optional[StopCheck] = None,
    storage_root: Path | None = None,
) -> AsyncIterator[BatchEntry]:
    """
    Yield one BatchEntry per variant, in input order, with unique names.
    should_stop is awaited before each window; a True result ends the
    iteration without rendering the remaining variants.
    """
    window_size = concurrency or get_settings().batch_concurrency
    taken: set[str] = set()

    for start in range(0, len(variants), window_size):
        if should_stop is not None and await should_stop():
            log.info("batch_stopped", rendered=start, total=len(variants))
            return

        window = variants[start:start + window_size]
        entries = await asyncio.gather(*(
            asyncio.to_thread(_render_entry, start + offset + 1, inp, snapshot, fmt, storage_root)
            for offset, inp in enumerate(window)
        ))
        for entry in entries:
            unique = dedupe_file_name(entry.file_name, taken)
            yield entry if unique == entry.file_name else replace(entry, file_name=unique)


async def stream_batch_zip(
    request: BatchRequest,
    snapshot: CatalogSnapshot,
    should_stop: Optional[StopCheck] = None,
) -> AsyncIterator[bytes]:
    """
    Yield ZIP bytes as variants finish. On stop the archive is still
    closed, so the client receives a valid (shorter) ZIP.
    """
    archive = StreamingZip()
    failed = 0

    async with aclosing(
        iter_batch(request.variants, snapshot, request.format, should_stop=should_stop)
    ) as entries:
        async for entry in entries:
            failed += 0 if entry.ok else 1
            yield archive.add(entry.file_name, entry.data)

    yield archive.close()
    log.info(
        "batch_stream_complete",
        total=len(request.variants),
        written=len(archive.names),
        failed=failed,
        format=request.format.value,
    )


# ─── Background Job ──────────────────────────────────────────────────────────

async def run_batch_job(
    job_id: str,
    request: BatchRequest,
    store: JobStore,
    catalog: CatalogStore,
) -> None:
    """
    Batch job coroutine. Runs as a FastAPI background task.
    Progress flows through store.advance_stage() / update_job(); any
    unexpected exception marks the job FAILED.
    """
    with job_context(job_id):
        try:
            await _run(job_id, request, store, catalog)
        except Exception as exc:
            err_msg = f"{type(exc).__name__}: {exc}"
            log.error(
                "batch_job_fatal_error",
                error=err_msg,
                traceback=traceback.format_exc(),
            )
            store.fail_job(job_id, err_msg)


async def _run(
    job_id: str,
    request: BatchRequest,
    store: JobStore,
    catalog: CatalogStore,
) -> None:
    total = len(request.variants)

    # ── Stage 1: Catalog snapshot ────────────────────────────────────────────
    store.advance_stage(job_id, JobStage.LOADING_CATALOG)
    snapshot = await asyncio.to_thread(catalog.snapshot)
    init_job_dirs(job_id)
    log.info(
        "stage_complete",
        stage="loading_catalog",
        products=len(snapshot.products),
        decorations=len(snapshot.decorations),
    )

    # ── Stage 2: Rendering ───────────────────────────────────────────────────
    store.advance_stage(job_id, JobStage.RENDERING)
    start_pct = STAGE_PROGRESS[JobStage.RENDERING]
    span = STAGE_PROGRESS[JobStage.PACKAGING] - start_pct

    archive = StreamingZip()
    file_names: list[str] = []
    failed = 0
    archive_path = batch_archive_path(job_id)

    with archive_path.open("wb") as fh:
        done = 0
        async for entry in iter_batch(request.variants, snapshot, request.format):
            fh.write(archive.add(entry.file_name, entry.data))
            if entry.ok:
                file_names.append(entry.file_name)
            else:
                failed += 1
            done += 1
            store.update_job(job_id, progress=start_pct + span * done // total)

        # ── Stage 3: Packaging ───────────────────────────────────────────────
        store.advance_stage(job_id, JobStage.PACKAGING)
        fh.write(archive.close())

    bundle = OutputBundle(
        archive_url=get_asset_url(job_id, archive_path.name),
        format=request.format.value,
        total_variants=total,
        rendered_count=len(file_names),
        failed_count=failed,
        file_names=file_names,
    )
    store.update_job(job_id, result=bundle)
    store.advance_stage(job_id, JobStage.DONE)
    log.info(
        "batch_job_complete",
        total=total,
        rendered=bundle.rendered_count,
        failed=failed,
    )
