"""Tests for logging setup and teardown."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gsearch import logs
from gsearch.logs import JsonFormatter, configure_logging, shutdown_logging
from gsearch.settings.config import LoggingSettings


class TestJsonFormatter:
    def test_formats_record(self) -> None:
        record = logging.LogRecord("gsearch.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
        entry = json.loads(JsonFormatter().format(record))
        assert entry["severity"] == "WARNING"
        assert entry["message"] == "hello world"
        assert entry["logger"] == "gsearch.test"

    def test_includes_exception(self) -> None:
        try:
            raise ValueError("bad")
        except ValueError:
            import sys

            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        entry = json.loads(JsonFormatter().format(record))
        assert "ValueError: bad" in entry["exception"]


class TestConfigureLogging:
    def test_file_sink_receives_debug(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "google-search.log"
        configure_logging(LoggingSettings(level="WARNING", file=str(log_file)))
        try:
            logging.getLogger("gsearch.test").debug("debug line")
        finally:
            shutdown_logging("Test done")

        lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
        messages = [line["message"] for line in lines]
        assert "debug line" in messages
        assert "Test done, logging stopped" in messages

    def test_console_level_override(self, tmp_path: Path) -> None:
        configure_logging(LoggingSettings(level="WARNING", file=""), level="DEBUG")
        try:
            console = logging.getLogger().handlers[0]
            assert console.level == logging.DEBUG
            assert len(logging.getLogger().handlers) == 1
        finally:
            shutdown_logging()

    def test_shutdown_without_configure_is_noop(self) -> None:
        logs._configured = False
        shutdown_logging()
        assert logs._configured is False
