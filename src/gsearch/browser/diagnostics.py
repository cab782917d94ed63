"""Post-mortem capture when the search box cannot be found.

Collects the page title, raw-markup heuristics, an inventory of input
elements, a full-page screenshot and the HTML source. Every step is
best-effort: a failure is logged and the remaining steps still run.
"""

from __future__ import annotations

import logging
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable

from playwright.async_api import Error as PlaywrightError

from gsearch.browser.challenge import MarkupMarkers, scan_markup

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "google-search-error"

_INPUT_INVENTORY_JS = """
(elements) => elements.map(el => ({
    type: el.tagName,
    id: el.id,
    name: el.name || '',
    class: el.className,
    placeholder: el.placeholder || '',
    visible: el.offsetWidth > 0 && el.offsetHeight > 0,
}))
"""


@dataclass
class PageDiagnostics:
    """Artifacts captured from a page that lacked an expected control."""

    url: str = ""
    title: str = ""
    markers: MarkupMarkers = field(default_factory=MarkupMarkers)
    input_elements: list[dict[str, Any]] = field(default_factory=list)
    screenshot_path: str = ""
    html_path: str = ""


async def collect_diagnostics(
    page: Page,
    output_dir: str | Path | None = None,
    *,
    clock: Callable[[], float] = time.time,
) -> PageDiagnostics:
    """Capture diagnostics for *page* into *output_dir* (system temp dir by default).

    Artifact names are timestamped: ``google-search-error-<epoch ms>.png`` / ``.html``.
    """
    out = Path(output_dir) if output_dir else Path(tempfile.gettempdir())
    diagnostics = PageDiagnostics(url=page.url)
    logger.info("Analyzing page content for issues...")

    try:
        diagnostics.title = await page.title()
        logger.info("Page title: %s", diagnostics.title)
    except PlaywrightError as exc:
        logger.warning("Failed to read page title: %s", exc)

    html = ""
    try:
        html = await page.content()
        diagnostics.markers = scan_markup(html)
        logger.info(
            "Page content analysis: recaptcha=%s robot=%s error=%s url=%s",
            diagnostics.markers.contains_recaptcha,
            diagnostics.markers.contains_robot,
            diagnostics.markers.contains_error,
            diagnostics.url,
        )
    except PlaywrightError as exc:
        logger.warning("Failed to read page content: %s", exc)

    try:
        diagnostics.input_elements = await page.eval_on_selector_all("input, textarea", _INPUT_INVENTORY_JS)
        logger.info("Input elements on page: %s", diagnostics.input_elements)
    except PlaywrightError as exc:
        logger.warning("Failed to enumerate input elements: %s", exc)

    stamp = int(clock() * 1000)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.error("Cannot create diagnostics directory %s: %s", out, exc)
        return diagnostics

    screenshot_path = out / f"{ARTIFACT_PREFIX}-{stamp}.png"
    try:
        await page.screenshot(path=str(screenshot_path), full_page=True)
        diagnostics.screenshot_path = str(screenshot_path)
        logger.error("Saved page screenshot: %s", screenshot_path)
    except (PlaywrightError, OSError) as exc:
        logger.error("Failed to save screenshot: %s", exc)

    html_path = out / f"{ARTIFACT_PREFIX}-{stamp}.html"
    try:
        html_path.write_text(html, encoding="utf-8")
        diagnostics.html_path = str(html_path)
        logger.error("Saved page HTML: %s", html_path)
    except OSError as exc:
        logger.error("Failed to save HTML: %s", exc)

    return diagnostics
