"""Logging setup and teardown for gsearch entry points.

Library modules only call ``logging.getLogger(__name__)``. The outermost
entry point (CLI command or MCP server) calls :func:`configure_logging`
once at start and :func:`shutdown_logging` on the way out. Console output
goes to stderr: stdout carries the MCP protocol when serving.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gsearch.settings.config import LoggingSettings

_CONSOLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s — %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per record with a severity field."""

    _LEVEL_MAP = {
        "DEBUG": "DEBUG",
        "INFO": "INFO",
        "WARNING": "WARNING",
        "ERROR": "ERROR",
        "CRITICAL": "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as a JSON object with severity."""
        entry = {
            "severity": self._LEVEL_MAP.get(record.levelname, "DEFAULT"),
            "message": record.getMessage(),
            "logger": record.name,
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def configure_logging(settings: LoggingSettings | None = None, *, level: str | None = None) -> None:
    """Install the stderr and file handlers on the root logger.

    Args:
        settings: Logging section of the settings; defaults to ``get_settings().logging``.
        level: Console level override (e.g. from a ``--verbose`` flag).
    """
    global _configured
    if settings is None:
        from gsearch.settings import get_settings

        settings = get_settings().logging

    console_level = getattr(logging, (level or settings.level).upper(), logging.INFO)
    formatter: logging.Formatter = (
        JsonFormatter() if settings.json_format else logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    root.addHandler(console)

    # The file sink keeps everything for post-mortem.
    if settings.file:
        try:
            Path(settings.file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        except OSError as exc:
            root.warning("Cannot open log file %s: %s", settings.file, exc)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    # Quieten noisy libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("mcp").setLevel(logging.WARNING)

    _configured = True


def shutdown_logging(reason: str = "Process exiting") -> None:
    """Log a final line and flush/close all handlers. No-op if never configured."""
    global _configured
    if not _configured:
        return
    logging.getLogger(__name__).info("%s, logging stopped", reason)
    logging.shutdown()
    logging.getLogger().handlers.clear()
    _configured = False
