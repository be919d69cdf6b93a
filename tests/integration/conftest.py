"""Integration test fixtures.

Provides a fully wired AppState: in-memory cache, a fake browser renderer
and the real direct fetcher over an httpx client (mock it with respx).
Document fixtures come from tests/conftest.py.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest

from tests.fakes import FakeRenderer, InMemoryCache
from web2md.config import Settings
from web2md.fetcher import DirectFetcher, FetchStrategy
from web2md.pipeline import DocumentPipeline
from web2md.state import AppState

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points the page cache at an isolated tmp directory and keeps logs on
    stderr in JSON so stdout carries only JSON-RPC.
    """
    env = os.environ.copy()
    env["WEB2MD__CACHE__DIR"] = str(tmp_path / "cache")
    env["WEB2MD__LOGGING__FORMAT"] = "json"
    return env


@pytest.fixture()
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture()
async def app_state(memory_cache: InMemoryCache, renderer: FakeRenderer) -> AppState:
    """Full AppState wired for handler integration tests."""
    async with httpx.AsyncClient() as client:
        fetcher = FetchStrategy(renderer=renderer, direct=DirectFetcher(client))
        yield AppState(
            settings=Settings(),
            cache=memory_cache,
            fetcher=fetcher,
            pipeline=DocumentPipeline(memory_cache, fetcher),
            http_client=client,
        )
