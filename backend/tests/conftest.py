# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Shared fixture: an isolated settings environment per test.
"""

from pathlib import Path

import pytest


@pytest.fixture
def storage_env(tmp_path, monkeypatch) -> Path:
    """
    Point STORAGE_ROOT / DATA_ROOT at tmp_path, force in-memory backends,
    and reset the cached Settings before and after the test.
    Returns the storage root.
    """
    from acgen.config import get_settings

    storage_root = tmp_path / "storage"
    storage_root.mkdir()
    monkeypatch.setenv("STORAGE_ROOT", str(storage_root))
    monkeypatch.setenv("DATA_ROOT", str(tmp_path / "data"))
    monkeypatch.setenv("CATALOG_BACKEND", "memory")
    monkeypatch.setenv("JOB_STORE_BACKEND", "memory")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("BATCH_CONCURRENCY", "1")
    get_settings.cache_clear()
    yield storage_root
    get_settings.cache_clear()
