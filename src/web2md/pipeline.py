"""Document pipeline: canonical URL in, cached ``PageDocument`` out.

cache lookup -> fetch -> extract -> markdown -> sections -> cache store.

Two concurrent misses for the same URL both run the full pipeline and both
write the entry; the cache is last-writer-wins and entries are immutable,
so the only cost is duplicated work.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from web2md.extractor import extract_content
from web2md.markdown import html_to_markdown
from web2md.models.document import FetchMethod, PageDocument
from web2md.parser import estimate_tokens, parse_sections

if TYPE_CHECKING:
    from web2md.protocols import CacheProtocol, FetcherProtocol


def build_document(url: str, html: str, fetch_method: FetchMethod) -> PageDocument:
    """Turn raw page HTML into a structured document. Never raises."""
    extracted = extract_content(html, url)
    markdown = html_to_markdown(extracted.content)
    return PageDocument(
        url=url,
        title=extracted.title,
        byline=extracted.byline,
        markdown=markdown,
        sections=tuple(parse_sections(markdown)),
        total_tokens=estimate_tokens(markdown),
        fetch_method=fetch_method,
        fetched_at=datetime.now(UTC),
    )


class DocumentPipeline:
    def __init__(self, cache: CacheProtocol, fetcher: FetcherProtocol) -> None:
        self._cache = cache
        self._fetcher = fetcher

    async def load(self, url: str, *, render_js: bool = True) -> tuple[PageDocument, bool]:
        """Return ``(document, cached)`` for an already canonical *url*.

        Raises Web2MdError(FETCH_FAILED) when the page cannot be fetched.
        A failed cache write is logged by the cache and does not fail the call.
        """
        log = structlog.get_logger().bind(url=url)

        entry = await self._cache.get(url)
        if entry is not None:
            log.info("cache_hit", fetched_at=entry.fetched_at.isoformat())
            return entry, True

        log.info("cache_miss_fetching", render_js=render_js)
        result = await self._fetcher.fetch(url, render_js=render_js)
        document = build_document(url, result.html, result.method)

        log.info(
            "document_built",
            fetch_method=document.fetch_method,
            section_count=len(document.sections),
            total_tokens=document.total_tokens,
        )

        await self._cache.set(url, document)
        return document, False
