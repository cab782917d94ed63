"""Search page navigation with bounded retry on transport failures.

Search result pages keep long-polling trackers open, so ``networkidle``
is unreliable; every wait here uses ``domcontentloaded``. A failed
attempt (exception, no response, non-ok status) is retried after a fixed
backoff up to a fixed attempt count. A challenge page is *not* a
transport failure: it ends the retry loop immediately so the caller can
escalate instead of repeating the behaviour that got it flagged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote_plus

from playwright.async_api import Error as PlaywrightError

from gsearch.browser.challenge import classify_page
from gsearch.exceptions import TransientLoadError
from gsearch.models.states import PageClassification

if TYPE_CHECKING:
    from playwright.async_api import Page, Response

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "www.google.com"
MAX_ATTEMPTS = 3
RETRY_BACKOFF_MS = 2_000
WAIT_UNTIL = "domcontentloaded"


@dataclass
class NavigationOutcome:
    """Where a successful or challenged navigation ended up."""

    classification: PageClassification
    response: Response | None
    url: str
    attempts: int


def build_search_url(query: str, locale: str, domain: str = DEFAULT_DOMAIN) -> str:
    """Return the search URL for *query*.

    The domain is fixed; the caller's region does not select a country domain.
    """
    return f"https://{domain}/search?q={quote_plus(query)}&hl={locale}"


def is_search_result_url(url: str) -> bool:
    """True when *url* already encodes a query on the search path."""
    return "/search" in url and "q=" in url


async def goto_with_retry(
    page: Page,
    url: str,
    *,
    timeout_ms: int,
    max_attempts: int = MAX_ATTEMPTS,
    backoff_ms: int = RETRY_BACKOFF_MS,
) -> NavigationOutcome:
    """Navigate to *url*, retrying transport failures.

    Args:
        page: Playwright page instance.
        url: Target URL.
        timeout_ms: The per-call search timeout; each attempt gets twice this.
        max_attempts: Navigation attempts before giving up.
        backoff_ms: Fixed wait after each failed attempt.

    Returns:
        A ``NavigationOutcome`` classified ``NORMAL`` or ``CHALLENGE_PAGE``.

    Raises:
        TransientLoadError: If no attempt produced an ok response.
    """
    last_error = ""
    for attempt in range(1, max_attempts + 1):
        response: Response | None = None
        try:
            logger.debug("goto %s (attempt %d/%d, timeout=%dms)", url, attempt, max_attempts, timeout_ms * 2)
            response = await page.goto(url, wait_until=WAIT_UNTIL, timeout=timeout_ms * 2)
        except PlaywrightError as exc:
            last_error = str(exc).splitlines()[0] if str(exc) else type(exc).__name__
            logger.error("Error loading page (attempt %d/%d): %s", attempt, max_attempts, last_error)
        else:
            classification = classify_page(page.url, response)
            if classification is not PageClassification.LOAD_FAILURE:
                if classification is PageClassification.NORMAL:
                    logger.info("Page loaded successfully: %s", page.url)
                return NavigationOutcome(
                    classification=classification,
                    response=response,
                    url=page.url,
                    attempts=attempt,
                )
            status = response.status if response is not None else None
            last_error = f"status {status}" if status is not None else "no response"
            logger.warning(
                "Page not loaded successfully (%s, url=%s), attempt %d/%d",
                last_error,
                response.url if response is not None else url,
                attempt,
                max_attempts,
            )

        await page.wait_for_timeout(backoff_ms)

    raise TransientLoadError(url, max_attempts, last_error)
