"""On-disk page cache: one JSON file per document, mtime as the TTL clock.

All cache operations catch ``OSError`` and ``ValueError`` (which covers
pydantic validation of corrupt entries) internally and degrade gracefully:
read failures return ``None`` (treated as cache miss by callers), write
failures are logged and ignored (the fetched document is still returned).
Infrastructure errors never cross the Cache class boundary.

Writes go to a temporary file in the cache directory and are moved into
place with ``os.replace``, so a reader sees either the previous entry or
the new one, never a partial file. Concurrent writers for the same key are
not coordinated: the last one wins.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import tempfile
import time
from pathlib import Path

import structlog

from web2md.models.document import PageDocument

log = structlog.get_logger()

KEY_LENGTH = 16
_ENTRY_SUFFIX = ".json"
_CLEANUP_MARKER = ".last_cleanup"


def url_to_key(url: str) -> str:
    """First 16 hex chars of the SHA-256 of the canonical URL."""
    return hashlib.sha256(url.encode()).hexdigest()[:KEY_LENGTH]


class Cache:
    """File-backed page cache implementing CacheProtocol."""

    def __init__(self, cache_dir: Path, ttl_hours: int = 24) -> None:
        self._dir = cache_dir
        self._ttl_seconds = ttl_hours * 3600

    def path_for(self, url: str) -> Path:
        return self._dir / f"{url_to_key(url)}{_ENTRY_SUFFIX}"

    def _is_expired(self, mtime: float) -> bool:
        return time.time() - mtime > self._ttl_seconds

    # ------------------------------------------------------------------
    # Page entries
    # ------------------------------------------------------------------

    async def get(self, url: str) -> PageDocument | None:
        """Read a document. Returns ``None`` on miss, expiry or read failure."""
        return await asyncio.to_thread(self._read, url)

    def _read(self, url: str) -> PageDocument | None:
        path = self.path_for(url)
        key = path.stem
        try:
            mtime = path.stat().st_mtime
            if self._is_expired(mtime):
                log.debug("cache_expired", key=key)
                return None
            return PageDocument.model_validate_json(path.read_bytes())
        except FileNotFoundError:
            return None
        except (OSError, ValueError):
            log.warning("cache_read_error", key=key, exc_info=True)
            return None

    async def set(self, url: str, document: PageDocument) -> None:
        """Write a document. Non-fatal on failure."""
        await asyncio.to_thread(self._write, url, document)

    def _write(self, url: str, document: PageDocument) -> None:
        path = self.path_for(url)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(document.model_dump_json().encode())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError:
            log.warning("cache_write_error", key=path.stem, exc_info=True)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def cleanup_if_due(self, interval_hours: int) -> None:
        """Run cleanup only if interval_hours have elapsed since the last run.

        The last run time is the mtime of a marker file in the cache
        directory. Falls through to run cleanup if the marker is missing or
        unreadable. Non-fatal on failure.
        """
        await asyncio.to_thread(self._cleanup_if_due, interval_hours)

    def _cleanup_if_due(self, interval_hours: int) -> None:
        marker = self._dir / _CLEANUP_MARKER
        try:
            last_run = marker.stat().st_mtime
            if time.time() - last_run < interval_hours * 3600:
                log.debug("cache_cleanup_skipped", reason="not_due")
                return
        except FileNotFoundError:
            pass
        except OSError:
            log.warning("cache_metadata_read_error", exc_info=True)

        self._cleanup_expired()

        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            marker.touch()
        except OSError:
            log.warning("cache_metadata_write_error", exc_info=True)

    async def cleanup_expired(self) -> None:
        """Delete entries older than the TTL. Non-fatal on failure."""
        await asyncio.to_thread(self._cleanup_expired)

    def _cleanup_expired(self) -> None:
        deleted = 0
        try:
            for path in self._dir.glob(f"*{_ENTRY_SUFFIX}"):
                try:
                    if self._is_expired(path.stat().st_mtime):
                        path.unlink()
                        deleted += 1
                except FileNotFoundError:
                    continue  # Removed by a concurrent writer or cleanup
        except OSError:
            log.warning("cache_cleanup_error", exc_info=True)
            return
        log.info("cache_cleanup_complete", page_deleted=deleted)
