"""Unit test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from web2md.cache import Cache

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "web2md-cache"


@pytest.fixture()
def cache(cache_dir: Path) -> Cache:
    """File cache rooted in an isolated, not-yet-created directory."""
    return Cache(cache_dir, ttl_hours=24)
