"""Structured event logging for uploads, webhook forwards and client polling.

Every event is written as one human-readable line on stdout. With
``ENABLE_FILE_LOGS=1`` the same event also lands in a rotating JSON-lines
file and a rotating human-readable companion file next to it.
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Callable

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "0") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/english-check.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s :: %(message)s"
HUMAN_FIELDS = ("status", "http_status", "ms", "bytes", "content_type", "endpoint", "attempt", "error")

_events = logging.getLogger("english_check")
_events.setLevel(LOG_LEVEL)
_events.propagate = False


def _human_formatter() -> logging.Formatter:
    return logging.Formatter(HUMAN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def _is_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _attach(
    handler: logging.Handler,
    formatter: logging.Formatter,
    accept: Callable[[logging.LogRecord], bool],
) -> None:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter)
    handler.addFilter(accept)
    _events.addHandler(handler)


def _rotating(path: str) -> logging.handlers.RotatingFileHandler:
    return logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)


def _human_log_path(path: str) -> str:  # logs/english-check.log -> logs/english-check-human.log
    root, ext = os.path.splitext(path)
    return f"{root}-human{ext or '.log'}"


def _ensure_handlers() -> None:
    if _events.handlers:
        return

    _attach(logging.StreamHandler(stream=sys.stdout), _human_formatter(), lambda record: not _is_json(record))
    if not ENABLE_FILE_LOGS:
        return

    log_dir = os.path.dirname(LOG_FILE)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    _attach(_rotating(LOG_FILE), logging.Formatter("%(message)s"), _is_json)
    _attach(_rotating(_human_log_path(LOG_FILE)), _human_formatter(), lambda record: not _is_json(record))


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Send module loggers (``logging.getLogger(__name__)``) to stdout."""

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_human_formatter())
        root.addHandler(handler)
    root.setLevel(level.upper())


def _format_human(evt: dict[str, Any]) -> str:
    base = f"request={evt.get('request_id')} kind={evt.get('kind')}"
    extras = [f"{key}={evt[key]}" for key in HUMAN_FIELDS if key in evt]
    return base + (" " + " ".join(extras) if extras else "")


def _emit(message: str, *, is_json: bool) -> None:
    record = _events.makeRecord(
        name=_events.name,
        level=logging.INFO,
        fn="",
        lno=0,
        msg=message,
        args=(),
        exc_info=None,
    )
    record.is_json = is_json  # type: ignore[attr-defined]
    _events.handle(record)


def log_event(kind: str, request_id: str, **fields: Any) -> None:
    """Log one event; ``request_id`` is ``"-"`` for synchronous requests."""

    _ensure_handlers()
    payload: dict[str, Any] = {
        "ts": time.time(),
        "trace": str(uuid.uuid4()),
        "kind": kind,
        "request_id": request_id,
    }
    payload.update(fields)

    _emit(_format_human(payload), is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(json.dumps(payload, ensure_ascii=False, default=str), is_json=True)


__all__ = ["configure_logging", "log_event"]
