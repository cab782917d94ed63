"""gsearch — stealth Playwright web search with challenge recovery for agents."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("gsearch")
except Exception:
    __version__ = "0.0.0"
