"""gsearch Store — file-backed session state and fingerprint persistence."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gsearch.store.state_store import SessionStateStore


def build_state_store(state_path: str | Path | None = None) -> "SessionStateStore":
    """Factory: return a ``SessionStateStore`` honouring gsearch settings.

    Args:
        state_path: Optional override for the storage-state file path. When
            ``None``, ``get_settings().state.path`` is used.

    Returns:
        A configured :class:`SessionStateStore`.
    """
    from gsearch.store.state_store import SessionStateStore

    if state_path is None:
        from gsearch.settings import get_settings

        state_path = get_settings().state.path
    return SessionStateStore(state_path)
