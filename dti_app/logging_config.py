"""Structured JSON logging for the outfit engine.

Every record carries the correlation id of the request or operation that
produced it and, inside :func:`outfit_context`, the id of the outfit being
edited. Fields passed to :func:`log_event` become top-level JSON keys after
user identifiers and free-text outfit names are redacted.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import re
import uuid
from typing import Any, Dict, Iterator, Optional

CORRELATION_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)
OUTFIT_ID: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("outfit_id", default=None)

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# Outfit names are user-entered free text, so they never reach the logs.
REDACTED_FIELDS = frozenset({"user_id", "creator_id", "email", "outfit_name", "name"})
_EMAIL_PATTERN = re.compile(r"[\w.\-]+@[\w.\-]+")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: level, logger, event, ids, then extra fields."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "event": getattr(record, "event", message),
            "message": message,
            "correlation_id": getattr(record, "correlation_id", None) or CORRELATION_ID.get(),
            "outfit_id": getattr(record, "outfit_id", None) or OUTFIT_ID.get(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES and key not in payload:
                payload[key] = redact_for_log(value)
        return json.dumps(payload)


def configure_logging(level: int | str | None = None) -> None:
    """Send root logging to stderr as JSON lines."""

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logging.root.handlers.clear()
    logging.basicConfig(level=level or os.getenv("LOG_LEVEL", "INFO"), handlers=[handler])


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


def redact_for_log(payload: Any) -> Any:
    """Scrub user identifiers, outfit names and email addresses, recursively.

    Sets are emitted as sorted lists so item id collections log stably.
    """

    if payload is None or isinstance(payload, (bool, int, float)):
        return payload
    if isinstance(payload, str):
        return _EMAIL_PATTERN.sub("[redacted-email]", payload)
    if isinstance(payload, (set, frozenset)):
        return [redact_for_log(item) for item in sorted(payload, key=str)]
    if isinstance(payload, (list, tuple)):
        return [redact_for_log(item) for item in payload]
    if isinstance(payload, dict):
        return {
            key: "[redacted]" if key in REDACTED_FIELDS else redact_for_log(value)
            for key, value in payload.items()
        }
    return str(payload)


def ensure_correlation_id(correlation_id: str | None = None) -> str:
    """Adopt ``correlation_id`` if given, else keep the current one or mint a new one."""

    if correlation_id:
        CORRELATION_ID.set(correlation_id)
        return correlation_id
    current = CORRELATION_ID.get()
    if current:
        return current
    new_id = uuid.uuid4().hex
    CORRELATION_ID.set(new_id)
    return new_id


@contextlib.contextmanager
def correlation_context(correlation_id: str | None = None) -> Iterator[str]:
    token = CORRELATION_ID.set(correlation_id or ensure_correlation_id())
    try:
        yield CORRELATION_ID.get()
    finally:
        CORRELATION_ID.reset(token)


@contextlib.contextmanager
def outfit_context(outfit_id: str | None) -> Iterator[Optional[str]]:
    """Tag every record logged inside the block with ``outfit_id``."""

    token = OUTFIT_ID.set(outfit_id)
    try:
        yield outfit_id
    finally:
        OUTFIT_ID.reset(token)


def log_event(logger: logging.Logger, level: int, event: str, **fields: Any) -> None:
    """Log ``event`` with ``fields`` as structured extras.

    ``name`` and ``message`` clash with LogRecord attributes; pass
    ``outfit_name`` or ``details`` instead.
    """

    correlation_id = ensure_correlation_id(fields.pop("correlation_id", None))
    exc_info = fields.pop("exc_info", None)
    extra = redact_for_log(fields)
    extra.setdefault("outfit_id", OUTFIT_ID.get())
    logger.log(level, event, exc_info=exc_info, extra={"event": event, "correlation_id": correlation_id, **extra})


@contextlib.contextmanager
def operation_context(name: str, outfit_id: str | None = None, **attributes: Any) -> Iterator[str]:
    """Scope a correlation id, and optionally an outfit id, around one named operation."""

    correlation_id = ensure_correlation_id(attributes.get("correlation_id"))
    with correlation_context(correlation_id) as scoped_id, outfit_context(outfit_id or OUTFIT_ID.get()):
        logging.getLogger(__name__).debug("operation %s started", name)
        yield scoped_id


__all__ = [
    "CORRELATION_ID",
    "JsonFormatter",
    "OUTFIT_ID",
    "REDACTED_FIELDS",
    "configure_logging",
    "correlation_context",
    "ensure_correlation_id",
    "get_logger",
    "log_event",
    "operation_context",
    "outfit_context",
    "redact_for_log",
]
