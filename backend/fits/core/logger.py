"""JSON logging for FITS with per-request correlation ids.

Every record leaving the process is a single JSON line. Records emitted while a
request is being served carry the request id that is echoed back to the client
in ``X-Request-ID``, so a problem response can be matched to its log lines.

Only a fixed set of ``extra=`` keys is serialized. Passwords, raw tokens and key
material must never appear in log output, and anything not on the list is
dropped instead of being rendered.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Client supplied ids are echoed into logs and headers: keep them short and inert.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

AUDIT_FIELDS = (
    "event",
    "endpoint",
    "elapsed_ms",
    "identity_id",
    "role",
    "reason",
    "invitation_id",
)


class JSONFormatter(logging.Formatter):
    """Serialize a record, its correlation id and whitelisted audit fields."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "ts": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        entry.update(
            {field: getattr(record, field) for field in AUDIT_FIELDS if hasattr(record, field)}
        )
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class CorrelationFilter(logging.Filter):
    """Stamp ``request_id`` (``None`` outside a request) on every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = ensure_request_id() if has_request_context() else None
        return True


def _incoming_request_id() -> str | None:
    for header in CORRELATION_HEADERS:
        value = request.headers.get(header, "").strip()
        if value and _SAFE_REQUEST_ID.match(value):
            return value
    return None


def ensure_request_id() -> str:
    """Return the id of the current request, assigning one on first use.

    A well-formed ``X-Request-ID`` or ``X-Correlation-ID`` header is reused.
    Outside a request a fresh UUID4 is returned and nothing is stored.

    :returns: Correlation id for the request being served.
    :rtype: str
    """
    if not has_request_context():
        return str(uuid4())
    current = g.get("request_id")
    if current is None:
        current = _incoming_request_id() or str(uuid4())
        g.request_id = current
    return current


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int = "INFO") -> None:
    """Install one stdout JSON handler on the root logger.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    :param level: Level name (``"DEBUG"``) or numeric level. Unknown names
        fall back to ``INFO``.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(CorrelationFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Assign a request id per request and echo it on every response."""
    app.logger.addFilter(CorrelationFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # ``g`` may outlive a request when the app context is shared.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "AUDIT_FIELDS",
    "REQUEST_ID_HEADER",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
