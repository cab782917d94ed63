"""Unit tests for gsearch.store.state_store — session state persistence."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from gsearch.browser import fingerprint as fingerprint_mod
from gsearch.models.fingerprint import FingerprintProfile, PersistedSessionState
from gsearch.store import build_state_store
from gsearch.store.state_store import SessionStateStore, fingerprint_path_for

NOW = datetime(2024, 3, 1, 21, 0, tzinfo=timezone(timedelta(hours=8)))

PROFILE = FingerprintProfile(
    device_name="Desktop Chrome",
    locale="en-US",
    timezone_id="Europe/London",
    color_scheme="light",
)


@pytest.fixture()
def store(tmp_path: Path) -> SessionStateStore:
    return SessionStateStore(tmp_path / "browser-state.json")


class TestFingerprintPath:
    def test_replaces_first_json(self) -> None:
        assert fingerprint_path_for(Path("/x/state.json")) == Path("/x/state-fingerprint.json")

    def test_only_first_occurrence_replaced(self) -> None:
        assert fingerprint_path_for(Path("/x/a.json.json")).name == "a-fingerprint.json.json"

    def test_appends_when_no_json_suffix(self) -> None:
        assert fingerprint_path_for(Path("/x/state")).name == "state-fingerprint.json"

    def test_build_state_store_uses_given_path(self, tmp_path: Path) -> None:
        s = build_state_store(tmp_path / "s.json")
        assert s.state_path == (tmp_path / "s.json").resolve()
        assert s.fingerprint_path.name == "s-fingerprint.json"


class TestLoad:
    def test_missing_file_gives_empty_state(self, store: SessionStateStore) -> None:
        state = store.load()
        assert state.is_empty

    def test_corrupt_file_gives_empty_state(self, store: SessionStateStore) -> None:
        store.fingerprint_path.write_text("{not json", encoding="utf-8")
        assert store.load().is_empty

    def test_non_object_file_gives_empty_state(self, store: SessionStateStore) -> None:
        store.fingerprint_path.write_text("[1, 2, 3]", encoding="utf-8")
        assert store.load().is_empty

    def test_reads_wrapper_shape(self, store: SessionStateStore) -> None:
        store.fingerprint_path.write_text(
            json.dumps({"fingerprint": PROFILE.model_dump(by_alias=True), "googleDomain": "www.google.com"}),
            encoding="utf-8",
        )
        state = store.load()
        assert state.fingerprint == PROFILE
        assert state.selected_domain == "www.google.com"

    def test_migrates_legacy_bare_profile(self, store: SessionStateStore) -> None:
        store.fingerprint_path.write_text(json.dumps(PROFILE.model_dump(by_alias=True)), encoding="utf-8")
        state = store.load()
        assert state.fingerprint == PROFILE
        assert state.selected_domain is None

    def test_overlong_filename_gives_empty_state(self, tmp_path: Path) -> None:
        store = SessionStateStore(tmp_path / ("x" * 250 + ".json"))

        assert store.load().is_empty
        assert store.has_storage_state is False


class TestLoadFingerprint:
    def test_generates_and_persists_once(self, store: SessionStateStore) -> None:
        with patch(
            "gsearch.store.state_store.derive_profile",
            wraps=fingerprint_mod.derive_profile,
        ) as derive:
            first = store.load_fingerprint("en-US", now=NOW, environ={})
            second = store.load_fingerprint("en-US", now=NOW, environ={})

        assert first == second
        assert derive.call_count == 1
        on_disk = json.loads(store.fingerprint_path.read_text(encoding="utf-8"))
        assert on_disk["fingerprint"]["timezoneId"] == "Asia/Shanghai"
        assert on_disk["fingerprint"]["colorScheme"] == "dark"

    def test_saved_profile_wins_over_requested_locale(self, store: SessionStateStore) -> None:
        store.save(PersistedSessionState(fingerprint=PROFILE))
        assert store.load_fingerprint("zh-CN", now=NOW, environ={}) == PROFILE

    def test_corrupt_file_regenerated(self, store: SessionStateStore) -> None:
        store.fingerprint_path.write_text("garbage", encoding="utf-8")
        profile = store.load_fingerprint("en-US", now=NOW, environ={})
        assert profile.locale == "en-US"
        assert store.load().fingerprint == profile

    def test_keeps_domain_when_adding_fingerprint(self, store: SessionStateStore) -> None:
        store.save(PersistedSessionState(selected_domain="www.google.com"))
        store.load_fingerprint("en-US", now=NOW, environ={})
        state = store.load()
        assert state.selected_domain == "www.google.com"
        assert state.fingerprint is not None

    def test_unwritable_location_still_returns_profile(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = SessionStateStore(blocker / "state.json")

        profile = store.load_fingerprint("en-US", now=NOW, environ={})

        assert profile.locale == "en-US"
        assert not store.fingerprint_path.exists()

    def test_overlong_filename_still_returns_profile(self, tmp_path: Path) -> None:
        store = SessionStateStore(tmp_path / ("x" * 250 + ".json"))

        profile = store.load_fingerprint("en-US", now=NOW, environ={})

        assert profile.locale == "en-US"


class TestSave:
    def test_save_writes_canonical_shape(self, store: SessionStateStore) -> None:
        assert store.save(PersistedSessionState(fingerprint=PROFILE, selected_domain="www.google.com"))
        raw = json.loads(store.fingerprint_path.read_text(encoding="utf-8"))
        assert set(raw) == {"fingerprint", "googleDomain"}
        assert raw["fingerprint"]["deviceName"] == "Desktop Chrome"

    def test_save_leaves_no_temp_files(self, store: SessionStateStore) -> None:
        store.save(PersistedSessionState(fingerprint=PROFILE))
        store.save(PersistedSessionState(fingerprint=PROFILE, selected_domain="www.google.com"))
        leftovers = [p.name for p in store.fingerprint_path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    def test_save_creates_parent_directories(self, tmp_path: Path) -> None:
        store = SessionStateStore(tmp_path / "nested" / "dir" / "state.json")
        assert store.save(PersistedSessionState(fingerprint=PROFILE))
        assert store.fingerprint_path.is_file()

    def test_save_failure_returns_false(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        store = SessionStateStore(blocker / "state.json")
        assert store.save(PersistedSessionState(fingerprint=PROFILE)) is False


class TestSaveStorageState:
    async def test_writes_context_storage(self, store: SessionStateStore) -> None:
        context = MagicMock()
        context.storage_state = AsyncMock(return_value={"cookies": [{"name": "NID"}], "origins": []})

        assert await store.save_storage_state(context) is True
        assert store.has_storage_state
        assert json.loads(store.state_path.read_text(encoding="utf-8"))["cookies"][0]["name"] == "NID"

    async def test_playwright_error_returns_false(self, store: SessionStateStore) -> None:
        context = MagicMock()
        context.storage_state = AsyncMock(side_effect=PlaywrightError("Target closed"))

        assert await store.save_storage_state(context) is False
        assert not store.has_storage_state
