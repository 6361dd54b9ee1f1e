# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Structured logging configuration for Chronolock.

Rotation and publication events carry their details as a dict in the
``extra_data`` record attribute:

    logger.info("Rotated", extra={"extra_data": {"interval": 3}})

Both formatters render that dict after passing it through redact(), so a
revealed secret or share never reaches a log sink verbatim. A correlation
id, when one is set for the current context, ties together every line
written while handling one CLI command or one driven tick.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

# Substrings of dict keys whose values are replaced before formatting
SENSITIVE_KEYS = {
    "secret",
    "share",
    "msk",
    "private",
    "decryption_key",
}

REDACTED = "[REDACTED]"


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


@contextmanager
def correlation_context(correlation_id: str | None = None) -> Generator[str, None, None]:
    """Scope a correlation id to a block, restoring the previous one on exit.

    Yields:
        The correlation ID in effect inside the block.
    """
    cid = correlation_id or generate_correlation_id()
    token = _correlation_id.set(cid)
    try:
        yield cid
    finally:
        _correlation_id.reset(token)


def redact(data: Any) -> Any:
    """Recursively replace values under sensitive keys with a marker."""
    if isinstance(data, dict):
        return {
            key: REDACTED if any(s in str(key).lower() for s in SENSITIVE_KEYS) else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


def _extra(record: logging.LogRecord) -> Any:
    return redact(record.extra_data) if hasattr(record, "extra_data") else None


class JSONFormatter(logging.Formatter):
    """One JSON object per line, for log shippers and files."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        cid = get_correlation_id()
        if cid:
            entry["correlation_id"] = cid

        # Source location on WARNING and above
        if record.levelno >= logging.WARNING:
            entry["source"] = {"file": record.pathname, "line": record.lineno, "function": record.funcName}

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = _extra(record)
        if extra is not None:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human-readable output for terminals.

    Layout: ``time LEVEL logger: [cid] message {extra}``. The correlation id
    is shortened to 8 characters.
    """

    def __init__(self) -> None:
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        parts = [self.formatTime(record, self.datefmt), f"{record.levelname:<8}", f"{record.name}:"]

        cid = get_correlation_id()
        if cid:
            parts.append(f"[{cid[:8]}]")

        parts.append(record.getMessage())

        extra = _extra(record)
        if extra is not None:
            parts.append(json.dumps(extra, default=str, sort_keys=True))

        line = " ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Install Chronolock's handlers on the root logger.

    Arguments left as None fall back to the settings:
    CHRONOLOCK_LOG_LEVEL, CHRONOLOCK_LOG_FORMAT ("json", "text", or empty to
    pick JSON whenever stderr is not a terminal) and CHRONOLOCK_LOG_FILE.
    A log file always receives JSON.
    """
    from .config import get_config

    config = get_config()

    if level is None:
        level = config.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if json_format is None:
        fmt = config.log_format.lower()
        json_format = fmt == "json" or (fmt != "text" and not sys.stderr.isatty())

    if log_file is None:
        log_file = config.log_file

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(JSONFormatter() if json_format else TextFormatter())
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)
