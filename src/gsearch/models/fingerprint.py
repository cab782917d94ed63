"""Browser fingerprint and persisted session-state models.

Both models serialize with camelCase keys so state files written by
earlier versions of the tool keep loading.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEVICE_NAME = "Desktop Chrome"

ColorScheme = Literal["dark", "light"]
ReducedMotion = Literal["reduce", "no-preference"]
ForcedColors = Literal["active", "none"]


class FingerprintProfile(BaseModel):
    """Device, locale, timezone and rendering preferences applied to a browser context."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    device_name: str = Field(default=DEFAULT_DEVICE_NAME, alias="deviceName")
    locale: str
    timezone_id: str = Field(alias="timezoneId")
    color_scheme: ColorScheme = Field(default="light", alias="colorScheme")
    reduced_motion: ReducedMotion = Field(default="no-preference", alias="reducedMotion")
    forced_colors: ForcedColors = Field(default="none", alias="forcedColors")

    def context_overrides(self) -> dict[str, Any]:
        """Return the ``browser.new_context()`` keyword arguments this profile controls."""
        return {
            "locale": self.locale,
            "timezone_id": self.timezone_id,
            "color_scheme": self.color_scheme,
            "reduced_motion": self.reduced_motion,
            "forced_colors": self.forced_colors,
        }


class PersistedSessionState(BaseModel):
    """Orchestration state carried between runs (the fingerprint file's contents)."""

    model_config = ConfigDict(populate_by_name=True)

    fingerprint: FingerprintProfile | None = None
    selected_domain: str | None = Field(default=None, alias="googleDomain")

    @property
    def is_empty(self) -> bool:
        return self.fingerprint is None and self.selected_domain is None

    def to_disk(self) -> dict[str, Any]:
        """Serialize to the canonical on-disk shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_disk(cls, raw: Any) -> "PersistedSessionState":
        """Parse a state file, migrating a legacy bare-profile file.

        Older versions wrote the fingerprint profile itself at the top level
        of the file on first run; such files are wrapped on read.

        Raises:
            ValueError: If *raw* is not a JSON object or fails validation.
        """
        if not isinstance(raw, dict):
            raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
        if "deviceName" in raw or "device_name" in raw:
            raw = {"fingerprint": raw}
        return cls.model_validate(raw)
