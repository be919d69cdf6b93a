"""Tool handler for web_outline.

Receives AppState, loads the page document (cache or fetch) and returns its
section outline with per-section token estimates. The cheapest tier: the
agent calls this first to decide what to read.
No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from web2md.models.tools import OutlineOutput
from web2md.retrieval import render_outline
from web2md.urls import validate_url

if TYPE_CHECKING:
    from web2md.state import AppState


async def handle(url: str, render_js: bool, state: AppState) -> dict:
    """Handle a web_outline tool call."""
    log = structlog.get_logger().bind(tool="web_outline", url=url)
    log.info("handler_called")

    canonical = validate_url(url)
    document, cached = await state.pipeline.load(canonical, render_js=render_js)

    output = OutlineOutput(
        title=document.title,
        url=document.url,
        total_tokens=document.total_tokens,
        section_count=len(document.sections),
        outline=render_outline(document.sections),
        cached=cached,
    )
    return output.model_dump(mode="json")
