"""Configuration loader for gsearch using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags / tool arguments (where applicable)
  2. Environment variables (GSEARCH_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tempfile
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("GSEARCH_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "GSEARCH_ENV"
DEFAULT_ENV = "local"

DEFAULT_STATE_FILE = "~/.google-search-browser-state.json"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _default_log_file() -> str:
    return str(Path(tempfile.gettempdir()) / "google-search.log")


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class BrowserSettings(BaseSettings):
    """Playwright browser launch settings."""

    model_config = SettingsConfigDict(env_prefix="GSEARCH_BROWSER__")

    # Runs always start headless; a challenge page escalates to a visible window.
    headless: bool = True
    channel: str = ""
    executable_path: str = ""
    proxy: str = ""
    launch_timeout_multiplier: int = 2


class SearchSettings(BaseSettings):
    """Defaults and fixed limits for the search workflow."""

    model_config = SettingsConfigDict(env_prefix="GSEARCH_SEARCH__")

    limit: int = 10
    timeout_ms: int = 60_000
    locale: str = "zh-CN"
    region: str = "cn"
    domain: str = "www.google.com"
    max_attempts: int = 3
    retry_backoff_ms: int = 2_000
    input_wait_ms: int = 10_000


class StateSettings(BaseSettings):
    """Where browser session state and the fingerprint are persisted."""

    model_config = SettingsConfigDict(env_prefix="GSEARCH_STATE__")

    path: str = DEFAULT_STATE_FILE
    persist: bool = True


class DiagnosticsSettings(BaseSettings):
    """Post-mortem artifacts written when the search box cannot be found."""

    model_config = SettingsConfigDict(env_prefix="GSEARCH_DIAGNOSTICS__")

    enabled: bool = True
    output_dir: str = ""  # empty -> system temp dir


class LoggingSettings(BaseSettings):
    """Log level, file sink, and output format."""

    model_config = SettingsConfigDict(env_prefix="GSEARCH_LOGGING__")

    level: str = "INFO"
    file: str = Field(default_factory=_default_log_file)
    json_format: bool = False


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root gsearch settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="GSEARCH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    state: StateSettings = Field(default_factory=StateSettings)
    diagnostics: DiagnosticsSettings = Field(default_factory=DiagnosticsSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Expand ``~`` and normalize relative paths against project_root."""
        state_path = Path(self.state.path).expanduser()
        if not state_path.is_absolute():
            state_path = self.project_root / state_path
        self.state.path = str(state_path)
        if self.diagnostics.output_dir:
            self.diagnostics.output_dir = str(Path(self.diagnostics.output_dir).expanduser())
        if self.logging.file:
            self.logging.file = str(Path(self.logging.file).expanduser())
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
