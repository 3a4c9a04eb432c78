"""Mapping of service errors onto HTTP problems."""

from __future__ import annotations

import pytest
from filmauth.core.errors import translate_service_error
from filmauth.services._shared.errors import (
    ConflictError,
    InvalidToken,
    MissingCredential,
    RevocationError,
    ServiceError,
    StoreUnavailable,
    UserNotFound,
)


@pytest.mark.parametrize(
    ("exc", "status", "code"),
    [
        (MissingCredential(), 401, "missing_credential"),
        (InvalidToken(reason="expired"), 401, "invalid_token"),
        (UserNotFound(3), 404, "user_not_found"),
        (ConflictError("User", "email taken"), 409, "conflict"),
        (StoreUnavailable(), 503, "service_unavailable"),
        (RevocationError(), 500, "revocation_failed"),
        (ServiceError("boom"), 400, "bad_request"),
    ],
)
def test_translate_service_error(exc, status, code) -> None:
    err = translate_service_error(exc)

    assert err.status_code == status
    assert err.code == code


def test_unauthorized_carries_bearer_challenge() -> None:
    err = translate_service_error(InvalidToken())

    assert err.headers["WWW-Authenticate"].startswith("Bearer")


def test_store_failure_does_not_leak_backend_detail(app) -> None:
    with app.test_request_context("/api/v1/auth/me"):
        resp, status = translate_service_error(StoreUnavailable("redis timeout")).to_response()

    assert status == 503
    assert resp.mimetype == "application/problem+json"
    assert "redis" not in resp.get_json()["detail"]
