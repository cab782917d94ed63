"""Navigation state machine definitions for a single search run."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class NavigationState(str, Enum):
    """States a search run passes through while reaching the result page."""

    LOADING = "LOADING"
    LOADED = "LOADED"
    CHALLENGED = "CHALLENGED"
    FAILED = "FAILED"


class PageClassification(str, Enum):
    """What a navigation attempt landed on."""

    NORMAL = "normal"
    CHALLENGE_PAGE = "challenge_page"
    LOAD_FAILURE = "load_failure"


TERMINAL_STATES = {NavigationState.LOADED, NavigationState.FAILED}

STATE_TRANSITIONS: dict[NavigationState, list[NavigationState]] = {
    NavigationState.LOADING: [
        NavigationState.LOADED,
        NavigationState.CHALLENGED,
        NavigationState.FAILED,
    ],
    NavigationState.LOADED: [NavigationState.CHALLENGED],
    # Escalation restarts loading in interactive mode.
    NavigationState.CHALLENGED: [NavigationState.LOADING, NavigationState.FAILED],
}


def advance(current: NavigationState, target: NavigationState) -> NavigationState:
    """Return *target* if the transition from *current* is allowed.

    Raises:
        ValueError: For a transition not listed in ``STATE_TRANSITIONS``.
    """
    if target not in STATE_TRANSITIONS.get(current, []):
        raise ValueError(f"Illegal navigation transition {current.value} -> {target.value}")
    return target


@dataclass(frozen=True)
class AttemptContext:
    """Per-attempt browser mode, threaded through the run loop."""

    headless: bool = True
    escalated: bool = False

    @property
    def can_escalate(self) -> bool:
        return self.headless and not self.escalated

    def escalate(self) -> "AttemptContext":
        """Return the interactive-mode context used after a challenge."""
        return replace(self, headless=False, escalated=True)
