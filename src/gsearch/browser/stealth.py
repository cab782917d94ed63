"""Browser anti-detection: launch flags, context options and init scripts.

Provides the pieces the session controller feeds to Playwright:

- Chromium launch flags that remove automation signals, disable the
  sandbox (for container compatibility, not security) and background
  throttling
- ``browser.new_context()`` options merging the desktop device descriptor
  with a ``FingerprintProfile``
- Stealth patches injected before the first navigation: navigator/WebGL
  overrides at context level and screen metrics at page level

Usage::

    from gsearch.browser.stealth import (
        apply_context_stealth,
        apply_page_stealth,
        build_context_options,
        build_launch_options,
    )

    browser = await pw.chromium.launch(**build_launch_options(headless=True, timeout_ms=60_000))
    context = await browser.new_context(**build_context_options(device, profile))
    await apply_context_stealth(context)
    page = await context.new_page()
    await apply_page_stealth(page)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext, Page

    from gsearch.models.fingerprint import FingerprintProfile
    from gsearch.settings.config import BrowserSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Launch flags
# ---------------------------------------------------------------------------

LAUNCH_ARGS: list[str] = [
    "--disable-blink-features=AutomationControlled",
    "--disable-features=IsolateOrigins,site-per-process",
    "--disable-site-isolation-trials",
    "--disable-web-security",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--hide-scrollbars",
    "--mute-audio",
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-breakpad",
    "--disable-component-extensions-with-background-pages",
    "--disable-extensions",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
    "--disable-renderer-backgrounding",
    "--enable-features=NetworkService,NetworkServiceInProcess",
    "--force-color-profile=srgb",
    "--metrics-recording-only",
]

IGNORE_DEFAULT_ARGS: list[str] = ["--enable-automation"]

CONTEXT_PERMISSIONS: list[str] = ["geolocation", "notifications"]

# Device descriptor keys that are not ``new_context()`` arguments.
_NON_CONTEXT_DESCRIPTOR_KEYS = {"default_browser_type"}

# ---------------------------------------------------------------------------
# Init scripts
# ---------------------------------------------------------------------------

# Context level: runs in every page and frame of the context before any site script.
CONTEXT_STEALTH_SCRIPT: str = """
// Hide the automation flag
Object.defineProperty(navigator, 'webdriver', { get: () => false });

// Non-empty plugin list and plausible languages
Object.defineProperty(navigator, 'plugins', { get: () => [1, 2, 3, 4, 5] });
Object.defineProperty(navigator, 'languages', { get: () => ['en-US', 'en', 'zh-CN'] });

// Real Chrome exposes window.chrome
window.chrome = {
    runtime: {},
    loadTimes: function () {},
    csi: function () {},
    app: {},
};

// Fixed GPU identity for UNMASKED_VENDOR_WEBGL / UNMASKED_RENDERER_WEBGL
if (typeof WebGLRenderingContext !== 'undefined') {
    const getParameter = WebGLRenderingContext.prototype.getParameter;
    WebGLRenderingContext.prototype.getParameter = function (parameter) {
        if (parameter === 37445) {
            return 'Intel Inc.';
        }
        if (parameter === 37446) {
            return 'Intel Iris OpenGL Engine';
        }
        return getParameter.call(this, parameter);
    };
}
"""

# Page level: desktop screen metrics.
PAGE_SCREEN_SCRIPT: str = """
Object.defineProperty(window.screen, 'width', { get: () => 1920 });
Object.defineProperty(window.screen, 'height', { get: () => 1080 });
Object.defineProperty(window.screen, 'colorDepth', { get: () => 24 });
Object.defineProperty(window.screen, 'pixelDepth', { get: () => 24 });
"""


# ---------------------------------------------------------------------------
# Option builders
# ---------------------------------------------------------------------------


def build_launch_options(
    *,
    headless: bool,
    timeout_ms: int,
    browser_settings: BrowserSettings | None = None,
) -> dict[str, Any]:
    """Build keyword arguments for ``playwright.chromium.launch()``.

    Args:
        headless: Launch without a visible window.
        timeout_ms: The per-call search timeout; launch gets a multiple of it.
        browser_settings: Optional channel/executable/proxy overrides.

    Returns:
        A dict ready to splat into ``chromium.launch``.
    """
    multiplier = browser_settings.launch_timeout_multiplier if browser_settings else 2
    options: dict[str, Any] = {
        "headless": headless,
        "timeout": timeout_ms * multiplier,
        "args": list(LAUNCH_ARGS),
        "ignore_default_args": list(IGNORE_DEFAULT_ARGS),
    }
    if browser_settings is not None:
        if browser_settings.channel:
            options["channel"] = browser_settings.channel
        if browser_settings.executable_path:
            options["executable_path"] = browser_settings.executable_path
        if browser_settings.proxy:
            options["proxy"] = {"server": browser_settings.proxy}
            logger.debug("Using proxy: %s", browser_settings.proxy)
    return options


def build_context_options(
    device_descriptor: dict[str, Any],
    profile: FingerprintProfile,
    storage_state_path: str | Path | None = None,
) -> dict[str, Any]:
    """Merge the desktop device descriptor with *profile* into ``new_context()`` options.

    Desktop mode is forced regardless of the descriptor, and *storage_state_path*
    is only passed through when the file exists.
    """
    options = {k: v for k, v in device_descriptor.items() if k not in _NON_CONTEXT_DESCRIPTOR_KEYS}
    options.update(profile.context_overrides())
    options.update(
        {
            "permissions": list(CONTEXT_PERMISSIONS),
            "accept_downloads": True,
            "is_mobile": False,
            "has_touch": False,
            "java_script_enabled": True,
        }
    )
    if storage_state_path is not None and os.path.isfile(storage_state_path):
        options["storage_state"] = str(storage_state_path)
    return options


# ---------------------------------------------------------------------------
# Script injection
# ---------------------------------------------------------------------------


async def apply_context_stealth(context: BrowserContext) -> None:
    """Inject the navigator/WebGL patches into *context*.

    Must run before the first page is created so every frame gets them.
    """
    await context.add_init_script(CONTEXT_STEALTH_SCRIPT)
    logger.debug("Context stealth script injected")


async def apply_page_stealth(page: Page) -> None:
    """Inject the screen-metrics patch into *page* before navigating."""
    await page.add_init_script(PAGE_SCREEN_SCRIPT)
    logger.debug("Page screen script injected")
