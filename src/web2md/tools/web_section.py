"""Tool handler for web_section.

Returns only the sections whose headings match one or more queries. A query
that matches nothing is not an error: the result lists the available
headings so the agent can retry with a corrected query.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from web2md.errors import ErrorCode, Web2MdError
from web2md.models.tools import SectionInput, SectionNotFoundOutput, SectionOutput
from web2md.parser import estimate_tokens
from web2md.retrieval import render_sections, select_sections
from web2md.urls import validate_url

if TYPE_CHECKING:
    from web2md.state import AppState


async def handle(url: str, headings: str | list[str], render_js: bool, state: AppState) -> dict:
    """Handle a web_section tool call."""
    log = structlog.get_logger().bind(tool="web_section", url=url)
    log.info("handler_called")

    canonical = validate_url(url)
    try:
        validated = SectionInput(headings=headings)
    except ValueError as exc:
        raise Web2MdError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide one or more non-empty heading names (see web_outline).",
            recoverable=False,
        ) from exc

    document, cached = await state.pipeline.load(canonical, render_js=render_js)
    matched = select_sections(document.sections, validated.headings)

    if not matched:
        log.info("section_not_found", queries=validated.headings)
        not_found = SectionNotFoundOutput(
            error=f"No sections found matching: {', '.join(validated.headings)}",
            available_sections=[s.heading for s in document.sections],
        )
        return not_found.model_dump(mode="json")

    content = render_sections(matched)
    output = SectionOutput(
        title=document.title,
        url=document.url,
        sections_returned=len(matched),
        tokens=estimate_tokens(content),
        content=content,
        cached=cached,
    )
    return output.model_dump(mode="json")
