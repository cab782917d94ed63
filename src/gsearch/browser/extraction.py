"""Search result extraction.

One script runs in the page and returns a raw record per result node in
document order; ``parse_raw_results`` then applies the all-or-nothing
filter (title and link both required) and the result cap in Python.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from gsearch.models.search import SearchResult

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

RESULT_NODE_SELECTOR = ".g, [data-sokoban-container] > div"
TITLE_SELECTOR = "h3"
LINK_SELECTOR = "a"
SNIPPET_SELECTOR = ".VwiC3b, [data-sncf='1']"

# ``a.href`` is the resolved absolute URL, not the raw attribute.
_EXTRACT_RESULTS_JS = """
(elements, selectors) => elements.map(el => {
    const titleEl = el.querySelector(selectors.title);
    const linkEl = el.querySelector(selectors.link);
    const snippetEl = el.querySelector(selectors.snippet);
    return {
        title: titleEl ? (titleEl.textContent || '') : '',
        link: linkEl instanceof HTMLAnchorElement ? linkEl.href : '',
        snippet: snippetEl ? (snippetEl.textContent || '') : '',
    };
})
"""


def parse_raw_results(raw: list[dict[str, Any]], limit: int) -> list[SearchResult]:
    """Turn raw node records into at most *limit* results, preserving order.

    Records without a title or a link are dropped whole. No deduplication
    or re-ranking is done.
    """
    results: list[SearchResult] = []
    for record in raw:
        if len(results) >= limit:
            break
        title = (record.get("title") or "").strip()
        link = (record.get("link") or "").strip()
        if not title or not link:
            continue
        results.append(SearchResult(title=title, link=link, snippet=(record.get("snippet") or "").strip()))
    return results


async def extract_results(page: Page, limit: int) -> list[SearchResult]:
    """Read up to *limit* results from the loaded result page."""
    logger.info("Extracting search results...")
    raw = await page.eval_on_selector_all(
        RESULT_NODE_SELECTOR,
        _EXTRACT_RESULTS_JS,
        {"title": TITLE_SELECTOR, "link": LINK_SELECTOR, "snippet": SNIPPET_SELECTOR},
    )
    results = parse_raw_results(raw or [], limit)
    logger.info("Extracted %d results from %d result nodes", len(results), len(raw or []))
    return results
