"""Unit tests for web2md.cache."""

from __future__ import annotations

import os
import time
from typing import TYPE_CHECKING

from tests.fakes import SAMPLE_URL, make_document
from web2md.cache import Cache, url_to_key

if TYPE_CHECKING:
    from pathlib import Path

    from web2md.models.document import PageDocument


def _age(path: Path, hours: float) -> None:
    """Backdate *path*'s mtime by *hours*."""
    then = time.time() - hours * 3600
    os.utime(path, (then, then))


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------


class TestUrlToKey:
    def test_sixteen_hex_chars(self) -> None:
        key = url_to_key(SAMPLE_URL)
        assert len(key) == 16
        assert all(c in "0123456789abcdef" for c in key)

    def test_deterministic(self) -> None:
        assert url_to_key(SAMPLE_URL) == url_to_key(SAMPLE_URL)

    def test_distinct_urls_distinct_keys(self) -> None:
        assert url_to_key("https://example.com/a") != url_to_key("https://example.com/b")


# ---------------------------------------------------------------------------
# Page entries
# ---------------------------------------------------------------------------


class TestPageCache:
    async def test_set_and_get_round_trip(
        self, cache: Cache, sample_document: PageDocument
    ) -> None:
        await cache.set(SAMPLE_URL, sample_document)
        entry = await cache.get(SAMPLE_URL)
        assert entry == sample_document
        assert entry is not None
        assert entry.sections == sample_document.sections

    async def test_file_named_by_key(
        self, cache: Cache, cache_dir: Path, sample_document: PageDocument
    ) -> None:
        await cache.set(SAMPLE_URL, sample_document)
        assert [p.name for p in cache_dir.iterdir()] == [f"{url_to_key(SAMPLE_URL)}.json"]

    async def test_creates_missing_directory(
        self, cache: Cache, cache_dir: Path, sample_document: PageDocument
    ) -> None:
        assert not cache_dir.exists()
        await cache.set(SAMPLE_URL, sample_document)
        assert cache_dir.is_dir()

    async def test_get_nonexistent_returns_none(self, cache: Cache) -> None:
        assert await cache.get("https://example.com/never-cached") is None

    async def test_upsert_overwrites(self, cache: Cache) -> None:
        await cache.set(SAMPLE_URL, make_document("# Version 1"))
        await cache.set(SAMPLE_URL, make_document("# Version 2"))
        entry = await cache.get(SAMPLE_URL)
        assert entry is not None
        assert entry.markdown == "# Version 2"

    async def test_expired_entry_is_a_miss(
        self, cache: Cache, sample_document: PageDocument
    ) -> None:
        await cache.set(SAMPLE_URL, sample_document)
        _age(cache.path_for(SAMPLE_URL), hours=25)
        assert await cache.get(SAMPLE_URL) is None

    async def test_entry_within_ttl_is_a_hit(
        self, cache: Cache, sample_document: PageDocument
    ) -> None:
        await cache.set(SAMPLE_URL, sample_document)
        _age(cache.path_for(SAMPLE_URL), hours=23)
        assert await cache.get(SAMPLE_URL) == sample_document

    async def test_custom_ttl(self, cache_dir: Path, sample_document: PageDocument) -> None:
        short = Cache(cache_dir, ttl_hours=1)
        await short.set(SAMPLE_URL, sample_document)
        _age(short.path_for(SAMPLE_URL), hours=2)
        assert await short.get(SAMPLE_URL) is None

    async def test_corrupt_entry_is_a_miss(
        self, cache: Cache, sample_document: PageDocument
    ) -> None:
        await cache.set(SAMPLE_URL, sample_document)
        cache.path_for(SAMPLE_URL).write_text("{not json", encoding="utf-8")
        assert await cache.get(SAMPLE_URL) is None

    async def test_wrong_shape_entry_is_a_miss(self, cache: Cache, cache_dir: Path) -> None:
        cache_dir.mkdir(parents=True)
        cache.path_for(SAMPLE_URL).write_text('{"url": 1}', encoding="utf-8")
        assert await cache.get(SAMPLE_URL) is None

    async def test_unreadable_entry_is_a_miss(self, cache: Cache, cache_dir: Path) -> None:
        # A directory where the entry file should be raises IsADirectoryError
        cache.path_for(SAMPLE_URL).mkdir(parents=True)
        assert await cache.get(SAMPLE_URL) is None

    async def test_write_failure_does_not_raise(
        self, tmp_path: Path, sample_document: PageDocument
    ) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")
        broken = Cache(blocker / "cache")
        # This should not raise
        await broken.set(SAMPLE_URL, sample_document)
        assert await broken.get(SAMPLE_URL) is None

    async def test_no_temporary_files_left_behind(
        self, cache: Cache, cache_dir: Path, sample_document: PageDocument
    ) -> None:
        for _ in range(3):
            await cache.set(SAMPLE_URL, sample_document)
        assert [p.suffix for p in cache_dir.iterdir()] == [".json"]


# ---------------------------------------------------------------------------
# Maintenance
# ---------------------------------------------------------------------------


class TestCleanup:
    async def test_cleanup_deletes_expired_entries(self, cache: Cache) -> None:
        old_url = "https://example.com/old"
        await cache.set(old_url, make_document(url=old_url))
        await cache.set(SAMPLE_URL, make_document())
        _age(cache.path_for(old_url), hours=48)

        await cache.cleanup_expired()

        assert not cache.path_for(old_url).exists()
        assert cache.path_for(SAMPLE_URL).exists()

    async def test_cleanup_on_missing_directory_does_not_raise(self, cache: Cache) -> None:
        await cache.cleanup_expired()

    async def test_cleanup_if_due_runs_without_marker(
        self, cache: Cache, cache_dir: Path
    ) -> None:
        await cache.set(SAMPLE_URL, make_document())
        _age(cache.path_for(SAMPLE_URL), hours=48)

        await cache.cleanup_if_due(interval_hours=6)

        assert not cache.path_for(SAMPLE_URL).exists()
        assert (cache_dir / ".last_cleanup").exists()

    async def test_cleanup_if_due_skips_when_recent(self, cache: Cache, cache_dir: Path) -> None:
        cache_dir.mkdir(parents=True)
        (cache_dir / ".last_cleanup").touch()
        await cache.set(SAMPLE_URL, make_document())
        _age(cache.path_for(SAMPLE_URL), hours=48)

        await cache.cleanup_if_due(interval_hours=6)

        assert cache.path_for(SAMPLE_URL).exists()

    async def test_cleanup_if_due_runs_when_marker_is_old(
        self, cache: Cache, cache_dir: Path
    ) -> None:
        cache_dir.mkdir(parents=True)
        marker = cache_dir / ".last_cleanup"
        marker.touch()
        _age(marker, hours=7)
        await cache.set(SAMPLE_URL, make_document())
        _age(cache.path_for(SAMPLE_URL), hours=48)

        await cache.cleanup_if_due(interval_hours=6)

        assert not cache.path_for(SAMPLE_URL).exists()
