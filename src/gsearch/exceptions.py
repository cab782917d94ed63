"""gsearch exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gsearch.browser.diagnostics import PageDiagnostics


class GSearchError(Exception):
    """Base exception for all gsearch-specific errors."""


class TransientLoadError(GSearchError):
    """Raised when navigation never reached an ok response within the allowed attempts.

    Attributes:
        url: The URL that failed to load.
        attempts: Number of navigation attempts made.
        last_error: Status or error text from the final attempt.
    """

    def __init__(self, url: str, attempts: int, last_error: str = "") -> None:
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        message = f"Unable to load search page after {attempts} attempts"
        if last_error:
            message = f"{message} ({last_error})"
        super().__init__(message)


class ChallengeDetectedError(GSearchError):
    """Raised when a bot-detection challenge cannot be escalated any further.

    Attributes:
        url: URL of the challenge page.
        escalated: True when the run was already in interactive mode.
    """

    def __init__(self, url: str, *, escalated: bool) -> None:
        self.url = url
        self.escalated = escalated
        if escalated:
            message = "Detected CAPTCHA page, manual verification required"
        else:
            message = "Detected CAPTCHA page, try headed mode or manual verification"
        super().__init__(message)


class ControlNotFoundError(GSearchError):
    """Raised when a required page control (search box, result container) is missing.

    Attributes:
        control: Human-readable name of the missing control.
        diagnostics: Artifacts collected for post-mortem, when available.
    """

    def __init__(self, control: str, diagnostics: PageDiagnostics | None = None) -> None:
        self.control = control
        self.diagnostics = diagnostics
        super().__init__(f"Could not find {control}")


class PersistenceError(GSearchError):
    """Raised internally when session state cannot be read or written.

    Never escapes the state store; callers see a logged warning and defaults.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Session state I/O failed for {path}: {reason}")
