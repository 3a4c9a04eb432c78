"""Unit tests for the logging utilities."""

from __future__ import annotations

import json
import logging

from filmauth.core.logger import JSONFormatter, configure_logging


def test_configure_logging_sets_level() -> None:
    configure_logging("DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
    finally:
        configure_logging("INFO")


def test_json_formatter_copies_known_extras() -> None:
    record = logging.LogRecord("filmauth.test", logging.INFO, __file__, 1, "auth.issue", None, None)
    record.user_id = 7
    record.reason = "expired"
    record.password = "never-logged"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.issue"
    assert payload["user_id"] == 7
    assert payload["reason"] == "expired"
    assert "password" not in payload


def test_request_id_is_fresh_for_every_request(client) -> None:
    first = client.get("/api/v1/health")
    tagged = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    last = client.get("/api/v1/health")

    assert tagged.headers["X-Request-ID"] == "abc-123"
    assert first.headers["X-Request-ID"] != last.headers["X-Request-ID"]
    assert last.headers["X-Request-ID"] != "abc-123"


def test_request_id_is_generated_when_missing(client) -> None:
    resp = client.get("/api/v1/health")

    assert resp.headers["X-Request-ID"]
