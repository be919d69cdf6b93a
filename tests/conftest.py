"""Shared test fixtures for the web2md test suite."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.fakes import InMemoryCache, make_document

if TYPE_CHECKING:
    from web2md.models.document import PageDocument


@pytest.fixture()
def sample_document() -> PageDocument:
    return make_document()


@pytest.fixture()
def memory_cache() -> InMemoryCache:
    return InMemoryCache()
