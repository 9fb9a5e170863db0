# src/ceidg_api/infrastructure/logging/logger.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Structured JSON logging for the CEIDG lookup service.

One JSON object per line with the keys ``ts``, ``level``, ``logger`` and
``message``, plus:

    * ``request_id`` from the current request context (see
      :func:`set_request_context`), when one is bound;
    * ``exc_type`` / ``exc_message`` when the record carries an exception;
    * every key of the ``extra={"extra": {...}}`` mapping. Core keys are never
      overwritten by extras.

Typical usage:
    configure_root_logging()
    log = get_json_logger(__name__)
    log.info("ceidg.lookup.cache_miss", extra={"extra": {"nip": "1234567890"}})
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any, Final

__all__ = [
    "configure_root_logging",
    "get_json_logger",
    "set_request_context",
    "get_request_id",
]

_CORE_KEYS: Final[frozenset[str]] = frozenset({"ts", "level", "logger", "message"})

_request_id: ContextVar[str | None] = ContextVar("ceidg_request_id", default=None)


def set_request_context(*, request_id: str | None = None) -> None:
    """Bind the correlation id for the current task context.

    ``None`` leaves any existing binding in place.
    """
    if request_id is not None:
        _request_id.set(request_id)


def get_request_id() -> str | None:
    """Return the correlation id bound to the current context, if any."""
    return _request_id.get()


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None) or _request_id.get()
        if request_id:
            payload["request_id"] = request_id

        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_type"] = record.exc_info[0].__name__
            payload["exc_message"] = str(record.exc_info[1])

        extra = getattr(record, "extra", None)
        if isinstance(extra, Mapping):
            payload.update((k, v) for k, v in extra.items() if k not in _CORE_KEYS)

        return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def configure_root_logging(level: str | int | None = None) -> None:
    """Install the JSON handler on the root logger once and set the level.

    Args:
        level: Level or level name; defaults to ``LOG_LEVEL`` or ``INFO``.
            Names are case-insensitive.
    """
    resolved: str | int = level if level is not None else os.getenv("LOG_LEVEL") or "INFO"
    root = logging.getLogger()
    root.setLevel(resolved.upper() if isinstance(resolved, str) else resolved)

    if any(isinstance(h.formatter, _JsonFormatter) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)


def get_json_logger(name: str) -> logging.Logger:
    """Return the named logger; output goes through the root JSON handler."""
    return logging.getLogger(name)
