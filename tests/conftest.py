"""gsearch test configuration — shared fixtures and Playwright fakes."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

SEARCH_URL = "https://www.google.com/search?q=weather+today&hl=zh-CN"
SORRY_URL = "https://www.google.com/sorry/index?continue=https://www.google.com/search%3Fq%3Dweather"

DESKTOP_CHROME = {
    "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/124.0.0.0 Safari/537.36",
    "viewport": {"width": 1280, "height": 720},
    "device_scale_factor": 1,
    "is_mobile": False,
    "has_touch": False,
    "default_browser_type": "chromium",
}


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Clear the settings LRU cache between tests."""
    from gsearch.settings.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings(tmp_path: Path):
    """Settings with diagnostics written under *tmp_path* and no log file."""
    from gsearch.settings.config import Settings

    return Settings(
        state={"path": str(tmp_path / "state.json")},
        diagnostics={"output_dir": str(tmp_path / "diagnostics")},
        logging={"file": ""},
    )


# ---------------------------------------------------------------------------
# Playwright fakes
# ---------------------------------------------------------------------------


def make_response(url: str = SEARCH_URL, *, ok: bool = True, status: int = 200) -> MagicMock:
    """A Playwright ``Response`` stand-in."""
    response = MagicMock(name="response")
    response.url = url
    response.ok = ok
    response.status = status
    return response


def make_raw_results(count: int, *, start: int = 1) -> list[dict[str, Any]]:
    """Raw records as returned by the in-page extraction script."""
    return [
        {
            "title": f"Result {i}",
            "link": f"https://example.com/{i}",
            "snippet": f"Snippet {i}",
        }
        for i in range(start, start + count)
    ]


def make_page(
    *,
    url: str = SEARCH_URL,
    responses: list[Any] | None = None,
    raw_results: list[dict[str, Any]] | None = None,
    search_input: Any = None,
) -> MagicMock:
    """A Playwright ``Page`` stand-in.

    ``page.goto`` yields *responses* in order (exceptions are raised) and
    leaves ``page.url`` at the response URL.
    """
    page = MagicMock(name="page")
    page.url = url
    queue = list(responses) if responses is not None else [make_response(url)]

    async def goto(target: str, **kwargs: Any):
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        if item is not None:
            page.url = item.url
        return item

    async def screenshot(path: str, **kwargs: Any) -> bytes:
        Path(path).write_bytes(b"\x89PNG")
        return b"\x89PNG"

    page.goto = AsyncMock(side_effect=goto)
    page.wait_for_timeout = AsyncMock()
    page.wait_for_selector = AsyncMock()
    page.wait_for_load_state = AsyncMock()
    page.query_selector = AsyncMock(return_value=search_input)
    page.eval_on_selector_all = AsyncMock(return_value=raw_results if raw_results is not None else [])
    page.add_init_script = AsyncMock()
    page.close = AsyncMock()
    page.title = AsyncMock(return_value="Google")
    page.content = AsyncMock(return_value="<html><body>Our systems have detected unusual traffic</body></html>")
    page.screenshot = AsyncMock(side_effect=screenshot)
    page.keyboard.type = AsyncMock()
    page.keyboard.press = AsyncMock()
    return page


def make_context(page: MagicMock) -> MagicMock:
    context = MagicMock(name="context")
    context.new_page = AsyncMock(return_value=page)
    context.add_init_script = AsyncMock()
    context.close = AsyncMock()
    context.storage_state = AsyncMock(return_value={"cookies": [], "origins": []})
    return context


def make_browser(page: MagicMock) -> MagicMock:
    browser = MagicMock(name="browser")
    browser.new_context = AsyncMock(return_value=make_context(page))
    browser.close = AsyncMock()
    return browser


def make_playwright(*browsers: MagicMock) -> MagicMock:
    """A ``Playwright`` stand-in whose ``chromium.launch`` returns *browsers* in order."""
    pw = MagicMock(name="playwright")
    pw.chromium.launch = AsyncMock(side_effect=list(browsers))
    pw.devices = {"Desktop Chrome": dict(DESKTOP_CHROME)}
    return pw


def patch_async_playwright(monkeypatch: pytest.MonkeyPatch, pw: MagicMock) -> None:
    """Make ``gsearch.orchestrator.async_playwright()`` yield *pw*."""
    manager = MagicMock(name="playwright_context_manager")
    manager.__aenter__ = AsyncMock(return_value=pw)
    manager.__aexit__ = AsyncMock(return_value=False)
    monkeypatch.setattr("gsearch.orchestrator.async_playwright", MagicMock(return_value=manager))


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that require a real browser or network")
    config.addinivalue_line("markers", "slow: marks tests that take more than a few seconds")
