"""Structured logging utilities for daolictl."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .constants import APP_NAME

_logger = logging.getLogger(APP_NAME)
_logger.addHandler(logging.NullHandler())

_HTTPX_REQUEST_MSG = 'HTTP Request: %s %s "%s %d %s"'

# Keys listed here are rendered first, in this order; the rest follow sorted.
EVENT_KEY_ORDER: dict[str, list[str]] = {
    "app_start": ["ts_utc", "level", "host", "timeout", "command", "log_file"],
    "app_stop": ["ts_utc", "level", "reason", "exit_code", "error_type", "error"],
    "command_resolved": ["ts_utc", "level", "command", "capability", "initializer"],
    "command_not_found": ["ts_utc", "level", "command", "capability"],
    "command_init_failed": ["ts_utc", "level", "command", "error_type", "error"],
    "http_request": ["ts_utc", "level", "method", "url", "status"],
    "api_request_failed": ["ts_utc", "level", "operation", "error_type", "error"],
    "api_request_retry": [
        "ts_utc",
        "level",
        "operation",
        "attempt",
        "sleep_sec",
        "error_type",
        "error",
    ],
}
DEFAULT_EVENT_KEY_ORDER = ["ts_utc", "level", "logger", "message"]


def sanitize_error_message(error_msg: str) -> str:
    """Sanitize error messages to remove credentials."""
    sanitized = re.sub(
        r"Bearer\s+[A-Za-z0-9_\-\.]{20,}",
        "Bearer [REDACTED_TOKEN]",
        error_msg,
    )
    sanitized = re.sub(
        r"eyJ[A-Za-z0-9_-]+\.eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+",
        "[REDACTED_JWT]",
        sanitized,
    )
    sanitized = re.sub(r"(https?://)[^/\s:@]+:[^/\s@]+@", r"\1[REDACTED]@", sanitized)
    return sanitized


def _one_line(value: Any) -> str:
    return str(value).replace("\n", "\\n")


def _json_payload(message: str) -> Optional[dict[str, Any]]:
    if not (message.startswith("{") and message.endswith("}")):
        return None
    try:
        payload = json.loads(message)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _http_request_fields(record: logging.LogRecord) -> Optional[dict[str, Any]]:
    """Fields of an httpx ``HTTP Request`` line, or None for other records."""
    if record.name != "httpx" or record.msg != _HTTPX_REQUEST_MSG:
        return None
    if not isinstance(record.args, tuple) or len(record.args) != 5:
        return None
    method, url, _version, status, reason = record.args
    return {
        "event": "http_request",
        "method": method,
        "url": sanitize_error_message(str(url)),
        "status": f"{status} {reason}",
    }


class StructuredTextFormatter(logging.Formatter):
    """Render records as ``=== event ===`` blocks, one ``key: value`` per line.

    Records carrying a ``log_event`` payload use its event name and fields.
    httpx request lines become ``http_request`` blocks. Anything else is
    shown under its logger name with the plain message.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._separator = ""

    def _fields(self, record: logging.LogRecord) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        message = record.getMessage()
        decoded = _json_payload(message) or _http_request_fields(record)
        if decoded is None:
            decoded = {"event": record.name, "message": message}
        fields.update(decoded)
        return fields

    def format(self, record: logging.LogRecord) -> str:
        fields = self._fields(record)
        event_name = str(fields.pop("event", record.name))

        preferred = EVENT_KEY_ORDER.get(event_name, DEFAULT_EVENT_KEY_ORDER)
        present = {k: v for k, v in fields.items() if v is not None}
        keys = [k for k in preferred if k in present]
        keys += sorted(k for k in present if k not in preferred)

        lines = [f"=== {event_name} ==="]
        lines.extend(f"{key}: {_one_line(present[key])}" for key in keys)
        if record.exc_info:
            lines.append("traceback:")
            lines.append(self.formatException(record.exc_info))

        # Blank line between entries, none after the last.
        body = self._separator + "\n".join(lines)
        self._separator = "\n"
        return body


def _to_log_safe(value: Any) -> Any:
    """Convert values to JSON-serializable, log-safe representations."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _to_log_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_log_safe(v) for v in value]
    return str(value)


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a structured log event."""
    if not _logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {"event": event}
    for key, value in fields.items():
        payload[key] = _to_log_safe(value)
    _logger.log(level, json.dumps(payload, ensure_ascii=False, separators=(",", ":")))


def before_sleep_log_event(*, operation: str, level: int = logging.WARNING):
    """Build a tenacity before_sleep callback that emits structured retry logs."""

    def _callback(retry_state: Any) -> None:
        outcome = getattr(retry_state, "outcome", None)
        next_action = getattr(retry_state, "next_action", None)
        if outcome is None or next_action is None:
            return

        payload: dict[str, Any] = {
            "operation": operation,
            "attempt": getattr(retry_state, "attempt_number", None),
            "sleep_sec": getattr(next_action, "sleep", None),
        }
        if outcome.failed:
            error = outcome.exception()
            payload["error_type"] = type(error).__name__
            payload["error"] = sanitize_error_message(str(error))

        log_event("api_request_retry", level=level, **payload)

    return _callback


def setup_logging(log_file: Optional[str] = None, debug: bool = False) -> None:
    """Set up logging configuration.

    With neither a log file nor debug mode, logging is left unconfigured.
    """
    handlers: list[logging.Handler] = []
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(log_path), encoding="utf-8"))
    elif debug:
        handlers.append(logging.StreamHandler(sys.stderr))

    if not handlers:
        return

    for handler in handlers:
        handler.setFormatter(StructuredTextFormatter())
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
        force=True,
    )
