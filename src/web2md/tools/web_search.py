"""Tool handler for web_search: find a term inside one page's sections."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from web2md.errors import ErrorCode, Web2MdError
from web2md.models.tools import SearchInput, SearchMatch, SearchOutput
from web2md.retrieval import search_sections
from web2md.urls import validate_url

if TYPE_CHECKING:
    from web2md.state import AppState


async def handle(url: str, query: str, render_js: bool, state: AppState) -> dict:
    """Handle a web_search tool call. Zero matches is a normal, empty result."""
    log = structlog.get_logger().bind(tool="web_search", url=url)
    log.info("handler_called")

    canonical = validate_url(url)
    try:
        validated = SearchInput(query=query)
    except ValueError as exc:
        raise Web2MdError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty search term.",
            recoverable=False,
        ) from exc

    document, cached = await state.pipeline.load(canonical, render_js=render_js)
    matches = [
        SearchMatch(heading=heading, excerpt=excerpt)
        for heading, excerpt in search_sections(document.sections, validated.query)
    ]

    output = SearchOutput(
        title=document.title,
        url=document.url,
        query=validated.query,
        match_count=len(matches),
        matches=matches,
        cached=cached,
    )
    return output.model_dump(mode="json")
