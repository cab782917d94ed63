"""Request and response models for one search call."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_LIMIT = 10
DEFAULT_TIMEOUT_MS = 60_000
DEFAULT_LOCALE = "zh-CN"
DEFAULT_REGION = "cn"
DEFAULT_STATE_PATH = Path("~/.google-search-browser-state.json")

FAILURE_TITLE = "Search failed"


class SearchRequest(BaseModel):
    """Immutable input to one orchestration call."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    query: str = Field(min_length=1)
    limit: int = Field(default=DEFAULT_LIMIT, gt=0)
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)
    locale: str = DEFAULT_LOCALE
    region: str = DEFAULT_REGION
    state_path: Path = DEFAULT_STATE_PATH
    suppress_state_persistence: bool = False

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value

    @field_validator("state_path")
    @classmethod
    def _absolute_state_path(cls, value: Path) -> Path:
        return value.expanduser().resolve()


class SearchResult(BaseModel):
    """One organic result. Only built when both title and link are present."""

    title: str
    link: str
    snippet: str = ""


class SearchResponse(BaseModel):
    """Outcome of one search call.

    A failed run still produces a response: ``results`` then holds one
    synthetic record whose snippet carries the error, and ``error`` is set.
    """

    query: str
    results: list[SearchResult] = Field(default_factory=list)
    language: str = DEFAULT_LOCALE
    region: str = DEFAULT_REGION
    error: str | None = None

    @property
    def is_failure(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(cls, request: SearchRequest, message: str) -> "SearchResponse":
        """Build the failure sentinel for *request*."""
        return cls(
            query=request.query,
            results=[
                SearchResult(
                    title=FAILURE_TITLE,
                    link="",
                    snippet=f"Unable to complete search, error: {message}",
                )
            ],
            language=request.locale,
            region=request.region,
            error=message,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the wire; ``error`` is omitted on success."""
        return self.model_dump(mode="json", exclude_none=True)

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_payload(), indent=indent, ensure_ascii=False)
