"""Page fetching: rendered (headless Chromium) and direct (httpx) paths.

``FetchStrategy`` picks the path from the caller's ``render_js`` flag and
falls back from rendered to direct exactly once. The fallback policy is an
explicit state machine (``FetchState`` + ``next_state``) so it can be
tested without a browser or network.

The httpx client is injected by the lifespan, which owns its lifecycle.
Browser sessions are the opposite: one fresh browser per rendered fetch,
always closed before ``render`` returns or raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

import httpx
import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from web2md.errors import ErrorCode, FetchError, Web2MdError
from web2md.models.document import FetchMethod

if TYPE_CHECKING:
    from playwright.async_api import Page

    from web2md.config import FetcherSettings
    from web2md.protocols import DirectFetcherProtocol, RendererProtocol

log = structlog.get_logger()


def build_http_client(settings: FetcherSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers={"User-Agent": settings.direct_user_agent},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


# ---------------------------------------------------------------------------
# Rendered path
# ---------------------------------------------------------------------------


class BrowserRenderer:
    """Renders a page in a fresh headless Chromium and returns its HTML.

    Readiness policy: wait for ``networkidle`` (bounded); if that times out,
    wait for ``domcontentloaded`` under the same bound and give deferred
    scripts a settle delay. Either way, wait a short lazy-load delay before
    capturing the DOM.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        headless: bool = True,
        readiness_timeout_ms: int = 15_000,
        settle_delay_ms: int = 2_000,
        lazy_load_delay_ms: int = 1_000,
    ) -> None:
        self._user_agent = user_agent
        self._headless = headless
        self._readiness_timeout_ms = readiness_timeout_ms
        self._settle_delay_ms = settle_delay_ms
        self._lazy_load_delay_ms = lazy_load_delay_ms

    @classmethod
    def from_settings(cls, settings: FetcherSettings) -> BrowserRenderer:
        return cls(
            user_agent=settings.browser_user_agent,
            headless=settings.headless,
            readiness_timeout_ms=settings.readiness_timeout_ms,
            settle_delay_ms=settings.settle_delay_ms,
            lazy_load_delay_ms=settings.lazy_load_delay_ms,
        )

    async def render(self, url: str) -> str:
        """Return the fully rendered HTML of *url*. Raises FetchError."""
        try:
            async with async_playwright() as pw:
                browser = await pw.chromium.launch(headless=self._headless)
                try:
                    context = await browser.new_context(user_agent=self._user_agent)
                    page = await context.new_page()
                    await self._wait_until_ready(page, url)
                    await page.wait_for_timeout(self._lazy_load_delay_ms)
                    html = await page.content()
                finally:
                    await browser.close()
        except PlaywrightError as exc:
            raise FetchError(FetchMethod.RENDERED, url, str(exc)) from exc
        except Exception as exc:
            # Driver spawn failures and loops without subprocess support
            # surface as OSError / NotImplementedError, not PlaywrightError
            log.warning("render_session_error", url=url, exc_info=True)
            raise FetchError(
                FetchMethod.RENDERED, url, f"{type(exc).__name__}: {exc}"
            ) from exc

        log.info("render_complete", url=url, content_length=len(html))
        return html

    async def _wait_until_ready(self, page: Page, url: str) -> None:
        try:
            await page.goto(url, wait_until="networkidle", timeout=self._readiness_timeout_ms)
        except PlaywrightTimeoutError:
            # Long-polling and analytics keep some SPAs from ever going idle
            log.info(
                "render_networkidle_timeout",
                url=url,
                timeout_ms=self._readiness_timeout_ms,
            )
            await page.wait_for_load_state(
                "domcontentloaded", timeout=self._readiness_timeout_ms
            )
            await page.wait_for_timeout(self._settle_delay_ms)


# ---------------------------------------------------------------------------
# Direct path
# ---------------------------------------------------------------------------


class DirectFetcher:
    """Single HTTP GET, no retries.

    Any response is a success, whatever its status: the body is returned
    verbatim, as the rendered path does for an error page. Only transport
    errors fail.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str) -> str:
        """Return the response body text. Raises FetchError."""
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(FetchMethod.DIRECT, url, f"network error: {exc}") from exc

        if not response.is_success:
            log.warning("fetch_non_success_status", url=url, status_code=response.status_code)

        log.info(
            "fetch_complete",
            url=url,
            status_code=response.status_code,
            content_length=len(response.text),
        )
        return response.text


# ---------------------------------------------------------------------------
# Fallback state machine
# ---------------------------------------------------------------------------


class FetchState(StrEnum):
    TRY_RENDERED = "try_rendered"
    TRY_DIRECT_AFTER_RENDERED_FAILURE = "try_direct_after_rendered_failure"
    TRY_DIRECT = "try_direct"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({FetchState.SUCCEEDED, FetchState.FAILED})

# fetch_method recorded when an attempt made in this state succeeds
_METHOD_BY_STATE: dict[FetchState, FetchMethod] = {
    FetchState.TRY_RENDERED: FetchMethod.RENDERED,
    FetchState.TRY_DIRECT_AFTER_RENDERED_FAILURE: FetchMethod.RENDERED_FALLBACK_TO_DIRECT,
    FetchState.TRY_DIRECT: FetchMethod.DIRECT,
}


def initial_state(render_js: bool) -> FetchState:
    return FetchState.TRY_RENDERED if render_js else FetchState.TRY_DIRECT


def next_state(state: FetchState, *, succeeded: bool) -> FetchState:
    """Transition after one attempt. Only a rendered failure gets a second try."""
    if state in TERMINAL_STATES:
        raise ValueError(f"No transition out of terminal state {state}")
    if succeeded:
        return FetchState.SUCCEEDED
    if state is FetchState.TRY_RENDERED:
        return FetchState.TRY_DIRECT_AFTER_RENDERED_FAILURE
    return FetchState.FAILED


@dataclass(frozen=True)
class FetchResult:
    html: str
    method: FetchMethod


class FetchStrategy:
    """Rendered fetch with a one-shot direct fallback, implementing FetcherProtocol."""

    def __init__(self, renderer: RendererProtocol, direct: DirectFetcherProtocol) -> None:
        self._renderer = renderer
        self._direct = direct

    async def fetch(self, url: str, *, render_js: bool = True) -> FetchResult:
        """Fetch raw HTML for *url*.

        Raises Web2MdError(FETCH_FAILED) once every applicable path failed;
        the message carries each path's reason.
        """
        state = initial_state(render_js)
        failures: list[FetchError] = []

        while state not in TERMINAL_STATES:
            attempt = state
            try:
                if attempt is FetchState.TRY_RENDERED:
                    html = await self._renderer.render(url)
                else:
                    html = await self._direct.fetch(url)
            except FetchError as exc:
                failures.append(exc)
                state = next_state(attempt, succeeded=False)
                if state is FetchState.TRY_DIRECT_AFTER_RENDERED_FAILURE:
                    log.warning("fetch_fallback_direct", url=url, reason=exc.reason)
                continue

            method = _METHOD_BY_STATE[attempt]
            log.info("fetch_succeeded", url=url, fetch_method=method)
            return FetchResult(html=html, method=method)

        reasons = "; ".join(str(failure) for failure in failures)
        raise Web2MdError(
            code=ErrorCode.FETCH_FAILED,
            message=f"Could not fetch {url}: {reasons}",
            suggestion=(
                "The site may be down, blocking automated clients, or unreachable. "
                "Retry later or try render_js=false for static pages."
            ),
            recoverable=True,
        ) from failures[0]
