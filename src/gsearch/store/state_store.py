"""On-disk persistence of browser session state and the fingerprint.

Two files live side by side:

- ``<name>.json`` — Playwright storage state (cookies, local storage),
  replayed into the next context so the run looks like a returning visitor.
- ``<name>-fingerprint.json`` — the ``PersistedSessionState`` wrapper
  (fingerprint profile plus the selected search domain).

Nothing here raises to the caller: read failures degrade to defaults and
write failures are logged and skipped. There is no locking; at most one
run per state path is expected at a time.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gsearch.browser.fingerprint import derive_profile
from gsearch.exceptions import PersistenceError
from gsearch.models.fingerprint import FingerprintProfile, PersistedSessionState

if TYPE_CHECKING:
    from playwright.async_api import BrowserContext

logger = logging.getLogger(__name__)


def fingerprint_path_for(state_path: Path) -> Path:
    """Return the fingerprint file that sits next to *state_path*."""
    name = state_path.name
    if ".json" in name:
        name = name.replace(".json", "-fingerprint.json", 1)
    else:
        name = f"{name}-fingerprint.json"
    return state_path.with_name(name)


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write *data* as JSON via a temp file in the same directory and rename it into place."""
    tmp_name = ""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name:
            Path(tmp_name).unlink(missing_ok=True)
        raise PersistenceError(str(path), str(exc)) from exc


class SessionStateStore:
    """Load and save the session state for one state-file path.

    Args:
        state_path: Path of the Playwright storage-state file. The
            fingerprint file path is derived from it.
    """

    def __init__(self, state_path: str | Path) -> None:
        self.state_path = Path(state_path).expanduser().resolve()
        self.fingerprint_path = fingerprint_path_for(self.state_path)

    @property
    def has_storage_state(self) -> bool:
        """True when a previous run left cookies/storage to restore."""
        return os.path.isfile(self.state_path)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load(self) -> PersistedSessionState:
        """Return the persisted state, or an empty one if missing or unreadable."""
        path = self.fingerprint_path
        if not os.path.isfile(path):
            logger.warning("No saved session state at %s, starting fresh", path)
            return PersistedSessionState()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            state = PersistedSessionState.from_disk(raw)
        except (OSError, ValueError) as exc:
            logger.warning("Could not read session state %s, using a new session: %s", path, exc)
            return PersistedSessionState()
        logger.info("Loaded saved session state from %s", path)
        return state

    def load_fingerprint(
        self,
        requested_locale: str | None = None,
        *,
        now: datetime | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> FingerprintProfile:
        """Return the saved fingerprint, generating and persisting one if absent.

        A corrupt file is treated like a missing one. Failing to persist the
        newly generated profile is logged; the profile is still returned.
        """
        state = self.load()
        if state.fingerprint is not None:
            logger.info("Using saved browser fingerprint")
            return state.fingerprint

        profile = derive_profile(requested_locale, now=now, environ=environ)
        if self.save(state.model_copy(update={"fingerprint": profile})):
            logger.info(
                "Generated and saved new browser fingerprint (locale=%s, timezone=%s, color_scheme=%s)",
                profile.locale,
                profile.timezone_id,
                profile.color_scheme,
            )
        return profile

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, state: PersistedSessionState) -> bool:
        """Write *state* to the fingerprint file. Returns False if the write failed."""
        try:
            _write_json_atomic(self.fingerprint_path, state.to_disk())
        except PersistenceError as exc:
            logger.warning("%s", exc)
            return False
        logger.debug("Saved session state to %s", self.fingerprint_path)
        return True

    async def save_storage_state(self, context: BrowserContext) -> bool:
        """Dump the context's cookies and storage to the state file.

        Returns False if the dump or the write failed.
        """
        from playwright.async_api import Error as PlaywrightError

        try:
            storage = await context.storage_state()
            _write_json_atomic(self.state_path, storage)
        except PersistenceError as exc:
            logger.warning("%s", exc)
            return False
        except PlaywrightError as exc:
            logger.warning("Could not capture browser storage state: %s", exc)
            return False
        logger.info("Saved browser storage state to %s", self.state_path)
        return True
