"""Top-level search orchestrator.

Composes the state store, browser session, navigation state machine and
result extraction into a single call that always returns a
``SearchResponse``. Fatal search errors become the failure sentinel
instead of propagating.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError, async_playwright

from gsearch.browser.actions import find_search_input, submit_query, wait_for_results
from gsearch.browser.diagnostics import collect_diagnostics
from gsearch.browser.extraction import extract_results
from gsearch.browser.navigation import build_search_url, goto_with_retry, is_search_result_url
from gsearch.browser.session import BrowserSession
from gsearch.exceptions import ChallengeDetectedError, ControlNotFoundError, GSearchError
from gsearch.models.search import SearchRequest, SearchResponse, SearchResult
from gsearch.models.states import AttemptContext, NavigationState, PageClassification, advance
from gsearch.store import build_state_store

if TYPE_CHECKING:
    from playwright.async_api import Browser, Page

    from gsearch.models.fingerprint import FingerprintProfile, PersistedSessionState
    from gsearch.settings.config import Settings
    from gsearch.store.state_store import SessionStateStore

logger = logging.getLogger(__name__)

# Settle time after the result container appears, before reading the DOM.
RESULT_SETTLE_MS = 500


class SearchRun:
    """Drives one search through the navigation state machine.

    The run starts in ``LOADING`` with the configured browser mode. A
    challenge page while headless closes everything this run owns and
    restarts ``LOADING`` in interactive mode, once. A challenge in
    interactive mode, or with a caller-supplied browser, ends in ``FAILED``.

    Args:
        request: The search being performed.
        session: Browser session to drive.
        profile: Fingerprint applied to every context this run opens.
        settings: Resolved gsearch settings.
        storage_state_path: Saved cookies/storage to restore, if any.
    """

    def __init__(
        self,
        request: SearchRequest,
        session: BrowserSession,
        profile: FingerprintProfile,
        settings: Settings,
        storage_state_path: Path | None = None,
    ) -> None:
        self.request = request
        self.session = session
        self.profile = profile
        self.settings = settings
        self.storage_state_path = storage_state_path
        self.state = NavigationState.LOADING
        self.escalations = 0

    def _transition(self, target: NavigationState) -> None:
        logger.debug("Navigation state %s -> %s", self.state.value, target.value)
        self.state = advance(self.state, target)

    async def run(self) -> list[SearchResult]:
        """Reach the result page and extract results.

        Raises:
            GSearchError: On any fatal failure (load, challenge, missing control).
        """
        attempt = AttemptContext(headless=self.settings.browser.headless)
        url = build_search_url(self.request.query, self.request.locale, self.settings.search.domain)
        logger.info("Visiting search page %s (query=%r, locale=%s)", url, self.request.query, self.request.locale)

        while True:
            page = await self._open_page(attempt)
            try:
                outcome = await goto_with_retry(
                    page,
                    url,
                    timeout_ms=self.request.timeout_ms,
                    max_attempts=self.settings.search.max_attempts,
                    backoff_ms=self.settings.search.retry_backoff_ms,
                )
            except GSearchError:
                self._transition(NavigationState.FAILED)
                raise

            if outcome.classification is PageClassification.CHALLENGE_PAGE:
                self._transition(NavigationState.CHALLENGED)
                attempt = await self._escalate(attempt, outcome.url)
                self._transition(NavigationState.LOADING)
                continue

            self._transition(NavigationState.LOADED)
            return await self._collect(page)

    async def _open_page(self, attempt: AttemptContext) -> Page:
        await self.session.launch(headless=attempt.headless, timeout_ms=self.request.timeout_ms)
        await self.session.new_context(self.profile, self.storage_state_path)
        return await self.session.new_page()

    async def _escalate(self, attempt: AttemptContext, url: str) -> AttemptContext:
        """Close this attempt's resources and return the interactive-mode context.

        Raises:
            ChallengeDetectedError: When no further escalation is possible.
        """
        if attempt.can_escalate and self.session.can_relaunch:
            logger.warning("Challenge page while headless, relaunching browser in headed mode")
            await self.session.close()
            self.escalations += 1
            return attempt.escalate()

        await self.session.close_context()
        self._transition(NavigationState.FAILED)
        if not attempt.headless:
            logger.warning("Please complete verification in the browser window")
        raise ChallengeDetectedError(url, escalated=not attempt.headless)

    async def _collect(self, page: Page) -> list[SearchResult]:
        timeout_ms = self.request.timeout_ms
        if is_search_result_url(page.url):
            logger.info("Already on search result page, skipping query input")
        else:
            search_input = await find_search_input(page, timeout_ms=self.settings.search.input_wait_ms)
            if search_input is None:
                diagnostics = None
                if self.settings.diagnostics.enabled:
                    diagnostics = await collect_diagnostics(page, self.settings.diagnostics.output_dir or None)
                logger.error("Could not find search box")
                raise ControlNotFoundError("search box", diagnostics=diagnostics)
            await submit_query(page, search_input, self.request.query, timeout_ms=timeout_ms)

        await wait_for_results(page, timeout_ms=timeout_ms // 2)
        await page.wait_for_timeout(RESULT_SETTLE_MS)
        return await extract_results(page, self.request.limit)


async def _persist(store: SessionStateStore, session: BrowserSession, state: PersistedSessionState) -> None:
    """Save storage state and session state; failures are warnings only."""
    logger.info("Saving browser state to %s", store.state_path)
    if session.context is not None:
        await store.save_storage_state(session.context)
    store.save(state)


async def search(
    request: SearchRequest,
    *,
    browser: Browser | None = None,
    settings: Settings | None = None,
) -> SearchResponse:
    """Run one search and return its response.

    Args:
        request: Query, limits and state location.
        browser: An externally managed browser to reuse. It is never closed here.
        settings: Settings override; defaults to ``get_settings()``.

    Returns:
        A ``SearchResponse``. Load failures, challenges that cannot be
        escalated, and missing controls yield the failure sentinel.
    """
    if settings is None:
        from gsearch.settings import get_settings

        settings = get_settings()

    store = build_state_store(request.state_path)
    profile = store.load_fingerprint(request.locale)
    state = store.load().model_copy(update={"fingerprint": profile})
    storage_state_path = store.state_path if store.has_storage_state else None
    if storage_state_path is None:
        logger.info("No browser state file at %s, starting a new session", store.state_path)

    async with async_playwright() as pw:
        session = BrowserSession(pw, browser=browser, browser_settings=settings.browser)
        run = SearchRun(request, session, profile, settings, storage_state_path)
        try:
            results = await run.run()
            logger.info("Successfully got %d search results", len(results))

            state = state.model_copy(update={"selected_domain": settings.search.domain})
            if settings.state.persist and not request.suppress_state_persistence:
                await _persist(store, session, state)

            return SearchResponse(
                query=request.query,
                results=results,
                language=request.locale,
                region=request.region,
            )
        except (GSearchError, PlaywrightError) as exc:
            logger.error("Error during search for %r: %s", request.query, exc)
            return SearchResponse.failure(request, str(exc))
        finally:
            await session.close()


async def google_search(
    query: str,
    *,
    limit: int | None = None,
    timeout_ms: int | None = None,
    locale: str | None = None,
    region: str | None = None,
    state_path: str | Path | None = None,
    suppress_state_persistence: bool = False,
    browser: Browser | None = None,
    settings: Settings | None = None,
) -> SearchResponse:
    """Convenience wrapper: build a ``SearchRequest`` from settings defaults and run it.

    Raises:
        pydantic.ValidationError: If the arguments do not form a valid request.
    """
    if settings is None:
        from gsearch.settings import get_settings

        settings = get_settings()
    defaults = settings.search
    request = SearchRequest(
        query=query,
        limit=limit if limit is not None else defaults.limit,
        timeout_ms=timeout_ms if timeout_ms is not None else defaults.timeout_ms,
        locale=locale or defaults.locale,
        region=region or defaults.region,
        state_path=Path(state_path) if state_path is not None else Path(settings.state.path),
        suppress_state_persistence=suppress_state_persistence,
    )
    return await search(request, browser=browser, settings=settings)
