"""Host-derived browser fingerprint profiles.

The profile approximates the machine the browser runs on so that the
automated context's locale, timezone and colour scheme agree with each
other and with the network it comes from. Everything is derived from the
wall clock and the environment; nothing is random.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from datetime import datetime, timedelta

from gsearch.models.fingerprint import DEFAULT_DEVICE_NAME, FingerprintProfile

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "zh-CN"
DEFAULT_TIMEZONE = "Asia/Shanghai"

# (exclusive lower, inclusive upper, zone) in minutes *behind* UTC, the
# convention of JavaScript's Date.getTimezoneOffset(): UTC+8 is -480.
# Evaluated in order, first match wins.
_TIMEZONE_BUCKETS: list[tuple[int | None, int, str]] = [
    (-600, -480, "Asia/Shanghai"),
    (None, -540, "Asia/Tokyo"),
    (-480, -420, "Asia/Bangkok"),
    (-60, 0, "Europe/London"),
    (0, 60, "Europe/Berlin"),
    (240, 300, "America/New_York"),
]

# Local hours treated as night for the colour-scheme preference.
_DARK_FROM_HOUR = 19
_DARK_UNTIL_HOUR = 7


def timezone_for_offset(offset_minutes: int) -> str:
    """Map a UTC offset (minutes behind UTC) to an IANA zone name.

    Unmatched offsets fall back to ``DEFAULT_TIMEZONE``.
    """
    for lower, upper, zone in _TIMEZONE_BUCKETS:
        if (lower is None or offset_minutes > lower) and offset_minutes <= upper:
            return zone
    return DEFAULT_TIMEZONE


def utc_offset_minutes(now: datetime) -> int:
    """Return *now*'s offset in minutes behind UTC (UTC+8 -> -480)."""
    offset = now.utcoffset() or timedelta(0)
    return -round(offset.total_seconds() / 60)


def color_scheme_for_hour(hour: int) -> str:
    return "dark" if hour >= _DARK_FROM_HOUR or hour < _DARK_UNTIL_HOUR else "light"


def _locale_from_env(environ: Mapping[str, str]) -> str | None:
    """Turn a POSIX ``LANG`` value such as ``en_US.UTF-8`` into ``en-US``."""
    raw = (environ.get("LANG") or "").strip()
    if not raw:
        return None
    lang = raw.split(".", 1)[0].split("@", 1)[0]
    if lang in ("C", "POSIX", ""):
        return None
    return lang.replace("_", "-")


def derive_profile(
    requested_locale: str | None = None,
    *,
    now: datetime | None = None,
    environ: Mapping[str, str] | None = None,
) -> FingerprintProfile:
    """Build a fingerprint profile resembling the host machine.

    Args:
        requested_locale: Locale asked for by the caller; wins when set.
        now: Clock reading to derive timezone and colour scheme from.
            Naive values are interpreted in the host's local zone.
        environ: Environment to read ``LANG`` from (defaults to ``os.environ``).

    Returns:
        A new ``FingerprintProfile``.
    """
    current = now if now is not None else datetime.now()
    if current.tzinfo is None:
        current = current.astimezone()
    env = os.environ if environ is None else environ

    locale = requested_locale or _locale_from_env(env) or DEFAULT_LOCALE
    offset = utc_offset_minutes(current)
    profile = FingerprintProfile(
        device_name=DEFAULT_DEVICE_NAME,
        locale=locale,
        timezone_id=timezone_for_offset(offset),
        color_scheme=color_scheme_for_hour(current.hour),
        reduced_motion="no-preference",
        forced_colors="none",
    )
    logger.debug(
        "Derived fingerprint: locale=%s timezone=%s (offset %d) color_scheme=%s",
        profile.locale,
        profile.timezone_id,
        offset,
        profile.color_scheme,
    )
    return profile
