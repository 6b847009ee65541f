# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
AC-Gen: Incremental ZIP Writer
zipfile over a non-seekable in-memory sink. Each add() returns the bytes
produced for that entry, so callers can stream them to an HTTP response
or append them to a file without holding the whole archive in memory.

Entries carry a fixed timestamp: identical inputs give identical archives.
"""

from __future__ import annotations

import io
import zipfile

FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


class _ChunkSink(io.RawIOBase):
    """Write-only, non-seekable buffer drained after every entry."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        self._chunks.append(bytes(b))
        return len(b)

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class StreamingZip:
    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._sink = _ChunkSink()
        self._compression = compression
        self._zip = zipfile.ZipFile(self._sink, mode="w", compression=compression)
        self.names: list[str] = []

    def add(self, name: str, data: bytes) -> bytes:
        """Write one entry; return the archive bytes it produced."""
        info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
        info.compress_type = self._compression
        info.external_attr = 0o644 << 16
        self._zip.writestr(info, data)
        self.names.append(name)
        return self._sink.drain()

    def close(self) -> bytes:
        """Write the central directory; return the remaining bytes."""
        self._zip.close()
        return self._sink.drain()
