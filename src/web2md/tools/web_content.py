"""Tool handler for web_content: the whole page, capped at max_tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from web2md.errors import ErrorCode, Web2MdError
from web2md.models.tools import ContentInput, ContentOutput
from web2md.retrieval import render_full_content, truncate_to_budget
from web2md.urls import validate_url

if TYPE_CHECKING:
    from web2md.state import AppState


async def handle(url: str, max_tokens: int, render_js: bool, state: AppState) -> dict:
    """Handle a web_content tool call."""
    log = structlog.get_logger().bind(tool="web_content", url=url)
    log.info("handler_called")

    canonical = validate_url(url)
    try:
        validated = ContentInput(max_tokens=max_tokens)
    except ValueError as exc:
        raise Web2MdError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide max_tokens >= 1.",
            recoverable=False,
        ) from exc

    document, cached = await state.pipeline.load(canonical, render_js=render_js)
    budgeted = truncate_to_budget(render_full_content(document), validated.max_tokens)

    if budgeted.truncated:
        log.info(
            "content_truncated",
            total_tokens=budgeted.total_tokens,
            max_tokens=validated.max_tokens,
        )

    output = ContentOutput(
        title=document.title,
        url=document.url,
        total_tokens=budgeted.total_tokens,
        returned_tokens=budgeted.returned_tokens,
        truncated=budgeted.truncated,
        content=budgeted.content,
        cached=cached,
    )
    return output.model_dump(mode="json")
