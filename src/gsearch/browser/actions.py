"""Page interactions for the search workflow.

Locates the query input through an ordered list of fallback selectors,
types the query with human-like timing, submits it, and waits for the
result container. Selector lists are ordered by specificity: first match
wins.
"""

from __future__ import annotations

import logging
import random
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeout

from gsearch.exceptions import ControlNotFoundError

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = logging.getLogger(__name__)

SEARCH_INPUT_SELECTORS: list[str] = [
    "textarea[name='q']",
    "input[name='q']",
    "textarea[title='Search']",
    "input[title='Search']",
    "textarea[aria-label='Search']",
    "input[aria-label='Search']",
    "textarea[aria-label='搜索']",
    "input[aria-label='搜索']",
    "#search-box",
    "#searchform input",
    "#searchbox",
    ".gLFyf",
    "textarea",
    "input[type='text']",
]

RESULT_CONTAINER_SELECTORS: list[str] = [
    "#search",
    "#rso",
    ".g",
    "[data-sokoban-container]",
    "div[role='main']",
]

INPUT_WAIT_MS = 10_000

# Randomized timing bounds (milliseconds).
KEYSTROKE_DELAY_MS = (10, 30)
SUBMIT_PAUSE_MS = (100, 300)


def random_delay(min_ms: int, max_ms: int, rng: random.Random | None = None) -> int:
    """Return a delay in ``[min_ms, max_ms]`` inclusive."""
    return (rng or random).randint(min_ms, max_ms)


async def find_search_input(page: Page, *, timeout_ms: int = INPUT_WAIT_MS) -> ElementHandle | None:
    """Return the first element matching ``SEARCH_INPUT_SELECTORS``, or ``None``.

    Waits up to *timeout_ms* for any of the selectors to appear, then probes
    them in priority order.
    """
    combined = ", ".join(SEARCH_INPUT_SELECTORS)
    try:
        await page.wait_for_selector(combined, timeout=timeout_ms)
        logger.info("Search box appeared")
    except PlaywrightTimeout as exc:
        logger.warning("Timeout waiting for search box, probing selectors directly: %s", exc)

    for selector in SEARCH_INPUT_SELECTORS:
        handle = await page.query_selector(selector)
        if handle is not None:
            logger.info("Found search box with selector %s", selector)
            return handle
        logger.debug("Search box not found with selector %s", selector)
    return None


async def submit_query(
    page: Page,
    search_input: ElementHandle,
    query: str,
    *,
    timeout_ms: int,
    rng: random.Random | None = None,
) -> None:
    """Type *query* into *search_input* and submit it with Enter."""
    logger.info("Entering search query")
    await search_input.click()
    await page.keyboard.type(query, delay=random_delay(*KEYSTROKE_DELAY_MS, rng=rng))
    await page.wait_for_timeout(random_delay(*SUBMIT_PAUSE_MS, rng=rng))
    await page.keyboard.press("Enter")
    logger.info("Waiting for page to load...")
    await page.wait_for_load_state("domcontentloaded", timeout=timeout_ms)


async def wait_for_results(page: Page, *, timeout_ms: int) -> None:
    """Wait for any result container to appear.

    Raises:
        ControlNotFoundError: If none appears within *timeout_ms*. Not retried.
    """
    logger.info("Waiting for search results to load at %s", page.url)
    try:
        await page.wait_for_selector(", ".join(RESULT_CONTAINER_SELECTORS), timeout=timeout_ms)
    except PlaywrightError as exc:
        logger.error("Could not find search result element: %s", exc)
        raise ControlNotFoundError("search result container") from exc
    logger.info("Search results loaded")
