"""Protocol interfaces for swappable components.

Tool handlers and AppState reference these protocols, not the concrete
implementations. This allows:
- Tests to use lightweight in-memory implementations
- The fetch paths to be faked without a browser or network
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from web2md.fetcher import FetchResult
    from web2md.models.document import PageDocument


class CacheProtocol(Protocol):
    """Interface for the page document cache backend."""

    async def get(self, url: str) -> PageDocument | None: ...

    async def set(self, url: str, document: PageDocument) -> None: ...

    async def cleanup_if_due(self, interval_hours: int) -> None: ...


class RendererProtocol(Protocol):
    """Headless-browser path: navigate, wait for readiness, capture HTML."""

    async def render(self, url: str) -> str: ...


class DirectFetcherProtocol(Protocol):
    """Plain HTTP path: one GET, body text returned as-is."""

    async def fetch(self, url: str) -> str: ...


class FetcherProtocol(Protocol):
    """Interface for the combined fetch strategy (rendered with direct fallback)."""

    async def fetch(self, url: str, *, render_js: bool = True) -> FetchResult: ...
