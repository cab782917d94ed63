"""Bot-detection challenge detection.

A navigation lands on one of three kinds of page:

1. **Normal** — an ok response on the search site.
2. **Challenge page** — a "sorry"/CAPTCHA interstitial, recognised by
   substrings of the page URL or the response URL.
3. **Load failure** — no response, or a non-ok status.

Detection is URL-based and runs once per navigation, before any page
interaction. ``scan_markup`` adds cheap raw-HTML heuristics used only for
diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gsearch.models.states import PageClassification

if TYPE_CHECKING:
    from playwright.async_api import Response

logger = logging.getLogger(__name__)

# Substrings of a URL that identify a challenge page.
CHALLENGE_URL_PATTERNS: tuple[str, ...] = (
    "google.com/sorry/index",
    "google.com/sorry",
    "recaptcha",
    "captcha",
    "unusual traffic",
)


@dataclass
class ChallengeDetection:
    """Result of checking a navigation for a challenge page."""

    detected: bool = False
    pattern: str = ""
    url: str = ""


@dataclass
class MarkupMarkers:
    """Presence heuristics over a page's raw HTML."""

    contains_recaptcha: bool = False
    contains_robot: bool = False
    contains_error: bool = False


def detect_challenge(page_url: str, response_url: str = "") -> ChallengeDetection:
    """Check *page_url* and *response_url* against ``CHALLENGE_URL_PATTERNS``."""
    for pattern in CHALLENGE_URL_PATTERNS:
        for url in (page_url, response_url):
            if url and pattern in url:
                logger.warning("Detected CAPTCHA page (%s) at %s", pattern, url)
                return ChallengeDetection(detected=True, pattern=pattern, url=url)
    return ChallengeDetection(url=page_url)


def classify_page(page_url: str, response: Response | None) -> PageClassification:
    """Classify the outcome of one navigation attempt.

    A challenge URL wins over the response status: the interstitial is
    often served with a 429 and must still trigger escalation.
    """
    response_url = response.url if response is not None else ""
    if detect_challenge(page_url, response_url).detected:
        return PageClassification.CHALLENGE_PAGE
    if response is None or not response.ok:
        return PageClassification.LOAD_FAILURE
    return PageClassification.NORMAL


def scan_markup(html: str) -> MarkupMarkers:
    """Look for challenge, robot and error wording in raw HTML."""
    return MarkupMarkers(
        contains_recaptcha="recaptcha" in html or "captcha" in html,
        contains_robot="robot" in html or "automated" in html,
        contains_error="error" in html or "sorry" in html,
    )
