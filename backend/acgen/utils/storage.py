# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Storage Layout
Asset files live under the storage root and are referenced from catalog
records by a root-relative file_path. Batch job outputs are namespaced
per job so concurrent batches never collide.

Layout:
    storage/
        products/
            <uuid>.png ...
        decorations/
            <uuid>.png ...
        jobs/{job_id}/
            outputs/
                batch.zip
"""

import shutil
import uuid
from pathlib import Path

from acgen.config import get_settings


def _root() -> Path:
    return get_settings().storage_root


# ─── Asset Files ─────────────────────────────────────────────────────────────

def products_dir() -> Path:
    return get_settings().products_dir


def decorations_dir() -> Path:
    return get_settings().decorations_dir


def relative_file_path(path: Path, storage_root: Path | None = None) -> str:
    """Return the POSIX path of `path` relative to the storage root (as stored in records)."""
    root = storage_root or _root()
    return path.resolve().relative_to(root.resolve()).as_posix()


def resolve_asset_path(file_path: str, storage_root: Path | None = None) -> Path:
    """
    Resolve a record's root-relative file_path to an absolute path.
    Raises ValueError if the path escapes the storage root.
    """
    root = (storage_root or _root()).resolve()
    resolved = (root / file_path).resolve()
    try:
        resolved.relative_to(root)
    except ValueError:
        raise ValueError(f"Asset path escapes storage root: {file_path}")
    return resolved


def remove_asset_file(file_path: str) -> bool:
    """Delete an asset file. Returns False if it was already gone."""
    path = resolve_asset_path(file_path)
    if not path.exists():
        return False
    path.unlink()
    return True


def copy_asset_file(file_path: str) -> str:
    """
    Copy an asset file to a fresh uuid name in the same directory.
    Returns the copy's root-relative file_path.
    """
    source = resolve_asset_path(file_path)
    target = source.with_name(f"{uuid.uuid4()}{source.suffix}")
    shutil.copyfile(source, target)
    return relative_file_path(target)


# ─── Job Directories ─────────────────────────────────────────────────────────

def job_dir(job_id: str) -> Path:
    return get_settings().jobs_root / job_id


def outputs_dir(job_id: str) -> Path:
    return job_dir(job_id) / "outputs"


def batch_archive_path(job_id: str) -> Path:
    return outputs_dir(job_id) / "batch.zip"


def init_job_dirs(job_id: str) -> None:
    """Create the output directory for a new job. Safe to call repeatedly."""
    outputs_dir(job_id).mkdir(parents=True, exist_ok=True)


def cleanup_job(job_id: str) -> None:
    """Remove all files for a job. No-op if the directory doesn't exist."""
    d = job_dir(job_id)
    if d.exists():
        shutil.rmtree(d)


def get_asset_url(job_id: str, filename: str) -> str:
    """Build the public URL for a job output asset."""
    return f"/assets/{job_id}/{filename}"
