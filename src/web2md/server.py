"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Start the stdio transport
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from contextlib import asynccontextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import web2md.tools.web_content as t_content
import web2md.tools.web_outline as t_outline
import web2md.tools.web_search as t_search
import web2md.tools.web_section as t_section
from web2md import __version__
from web2md.cache import Cache
from web2md.config import Settings
from web2md.errors import Web2MdError
from web2md.fetcher import BrowserRenderer, DirectFetcher, FetchStrategy, build_http_client
from web2md.pipeline import DocumentPipeline
from web2md.retrieval import DEFAULT_MAX_TOKENS
from web2md.schedulers import run_cache_cleanup_scheduler
from web2md.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr: stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def build_state(settings: Settings) -> AppState:
    """Wire cache, fetch paths and pipeline from settings."""
    http_client = build_http_client(settings.fetcher)
    cache = Cache(Path(settings.cache.dir).expanduser(), ttl_hours=settings.cache.ttl_hours)
    fetcher = FetchStrategy(
        renderer=BrowserRenderer.from_settings(settings.fetcher),
        direct=DirectFetcher(http_client),
    )
    return AppState(
        settings=settings,
        cache=cache,
        fetcher=fetcher,
        pipeline=DocumentPipeline(cache, fetcher),
        http_client=http_client,
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info("server_starting", version=__version__, cache_dir=settings.cache.dir)

    state = build_state(settings)
    cache_cleanup_task = asyncio.create_task(run_cache_cleanup_scheduler(state))

    log.info("server_started", version=__version__)

    try:
        yield state
    finally:
        cache_cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cache_cleanup_task
        if state.http_client is not None:
            await state.http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("web2md", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg; set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: Web2MdError) -> CallToolResult:
    """Convert a Web2MdError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


async def _run_tool(tool: str, call: Awaitable[dict]) -> object:
    try:
        return await call
    except Web2MdError as exc:
        log.warning(
            "tool_error",
            tool=tool,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool=tool, exc_info=True)
        raise


@mcp.tool()
async def web_outline(url: str, ctx: Context, render_js: bool = True) -> object:
    """Get the outline of a webpage: headings with estimated token counts.

    USE THIS FIRST to understand page structure before fetching content.
    Very cheap (~200 tokens of output). Set render_js=false for static sites.
    """
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("web_outline", t_outline.handle(url, render_js, state))


@mcp.tool()
async def web_section(
    url: str,
    headings: str | list[str],
    ctx: Context,
    render_js: bool = True,
) -> object:
    """Get specific section(s) of a webpage by heading name.

    Use after web_outline to fetch only what you need. Headings match
    case-insensitively, on the full heading or any part of it.
    """
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("web_section", t_section.handle(url, headings, render_js, state))


@mcp.tool()
async def web_content(
    url: str,
    ctx: Context,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    render_js: bool = True,
) -> object:
    """Get the full page as markdown, truncated to max_tokens.

    Prefer web_outline + web_section when only part of the page is needed.
    """
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("web_content", t_content.handle(url, max_tokens, render_js, state))


@mcp.tool()
async def web_search(url: str, query: str, ctx: Context, render_js: bool = True) -> object:
    """Search for a term within a webpage.

    Returns the sections that contain it, each with a short excerpt around
    the first occurrence. Useful for finding specific information without
    loading the entire page.
    """
    state: AppState = ctx.request_context.lifespan_context
    return await _run_tool("web_search", t_search.handle(url, query, render_js, state))


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
