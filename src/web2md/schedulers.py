"""Background scheduler coroutine for cache maintenance."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from web2md.state import AppState

log = structlog.get_logger()


async def run_cache_cleanup_scheduler(state: AppState) -> None:
    """Run cache cleanup at startup, then on the configured interval.

    Runs until cancelled by the lifespan on shutdown.
    """
    interval_hours = state.settings.cache.cleanup_interval_hours

    while True:
        try:
            await state.cache.cleanup_if_due(interval_hours)
        except Exception:
            log.warning("cache_cleanup_scheduler_error", exc_info=True)
        await asyncio.sleep(interval_hours * 3600)
