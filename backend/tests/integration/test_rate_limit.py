"""Flask-Limiter guards on the credential endpoints."""

from __future__ import annotations

import pytest
from filmauth.core.config import TestingConfig
from filmauth.factory import create_app

API = "/api/v1"


class TightLimitsConfig(TestingConfig):
    AUTH_LOGIN_RATE_LIMIT = "2 per minute"
    AUTH_REFRESH_RATE_LIMIT = "2 per minute"


@pytest.fixture()
def limited_client():
    return create_app(TightLimitsConfig).test_client()


@pytest.mark.parametrize(
    ("path", "kwargs"),
    [
        (f"{API}/auth/login", {"json": {}}),
        (f"{API}/auth/refresh", {"headers": {"Authorization": "Bearer not-a-token"}}),
    ],
)
def test_credential_endpoints_are_rate_limited(limited_client, path, kwargs) -> None:
    allowed = [limited_client.post(path, **kwargs).status_code for _ in range(2)]
    blocked = limited_client.post(path, **kwargs)

    assert 429 not in allowed
    assert blocked.status_code == 429
    assert blocked.mimetype == "application/problem+json"
    assert blocked.get_json()["code"] == "too_many_requests"
