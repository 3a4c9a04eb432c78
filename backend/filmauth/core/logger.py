"""JSON logging with request and principal correlation.

Every record emitted during a request carries the request id and, once the
bearer middleware has run, the authenticated user id. Raw tokens are never
attached: only whitelisted ``extra=`` keys reach the output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
_INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# Whitelist of ``extra=`` keys rendered by :class:`JSONFormatter`.
EXTRA_KEYS = frozenset(
    {
        "endpoint",
        "elapsed_ms",
        "user_id",
        "reason",
        "token_type",
        "removed_blacklist",
        "removed_refresh",
        "revoked_refresh",
    }
)


def ensure_request_id() -> str:
    """Return the id of the current request, adopting an inbound header if any.

    Outside a request a fresh UUID is returned on every call.
    """
    if not has_request_context():
        return str(uuid4())
    rid = g.get("request_id")
    if rid is None:
        rid = next(
            (request.headers[h] for h in _INBOUND_ID_HEADERS if request.headers.get(h)),
            str(uuid4()),
        )
        g.request_id = rid
    return rid


class RequestContextFilter(logging.Filter):
    """Stamp ``request_id`` and ``user_id`` onto records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not has_request_context():
            record.request_id = None
            return True
        record.request_id = ensure_request_id()
        auth = g.get("auth")
        if auth is not None and not hasattr(record, "user_id"):
            record.user_id = auth.principal.id
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(
                timespec="milliseconds"
            ),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({k: v for k, v in vars(record).items() if k in EXTRA_KEYS})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON handler on stdout."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it back on every response."""
    app.logger.addFilter(RequestContextFilter())

    @app.before_request
    def _assign_request_id() -> None:
        # ``g`` lives on the app context, which may outlive a single request.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app", "JSONFormatter"]
