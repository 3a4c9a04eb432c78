"""Integration tests for the authentication pipeline over HTTP."""

from __future__ import annotations

import pytest

from tests.factories.user import DEFAULT_PASSWORD
from tests.helpers.auth import bearer, login_pair

API = "/api/v1"


def _problem(resp) -> dict:
    assert resp.mimetype == "application/problem+json"
    return resp.get_json()


# ------------------------------ Register / login ------------------------- #
def test_register_then_login(client) -> None:
    payload = {"email": "viewer@example.com", "username": "viewer", "password": "secret123"}

    resp = client.post(f"{API}/auth/register", json=payload)
    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["email"] == "viewer@example.com"
    assert data["role"] == "USER"
    assert "password" not in data and "password_hash" not in data

    resp = client.post(f"{API}/auth/login", json={"email": payload["email"], "password": payload["password"]})
    assert resp.status_code == 200
    tokens = resp.get_json()["data"]
    assert tokens["token_type"] == "Bearer"
    assert tokens["access_token"] and tokens["refresh_token"]


def test_register_validation_error(client) -> None:
    resp = client.post(f"{API}/auth/register", json={"email": "nope", "username": "x", "password": "1"})
    assert resp.status_code == 422
    body = _problem(resp)
    assert body["code"] == "validation_error"
    assert set(body["details"]["errors"]) == {"email", "username", "password"}


def test_register_duplicate_is_conflict(client, user) -> None:
    resp = client.post(
        f"{API}/auth/register",
        json={"email": user.email, "username": "another1", "password": "secret123"},
    )
    assert resp.status_code == 409
    assert _problem(resp)["code"] == "conflict"


def test_login_wrong_password(client, user) -> None:
    resp = client.post(f"{API}/auth/login", json={"email": user.email, "password": "wrong-one"})
    assert resp.status_code == 401
    assert _problem(resp)["code"] == "invalid_credentials"


# ------------------------------ Authenticator ---------------------------- #
def test_missing_and_malformed_credentials_are_distinguishable(client) -> None:
    missing = client.get(f"{API}/auth/me")
    malformed = client.get(f"{API}/auth/me", headers={"Authorization": "Token xyz"})

    assert missing.status_code == malformed.status_code == 401
    assert _problem(missing)["code"] == "missing_credential"
    assert _problem(malformed)["code"] == "malformed_credential"
    for resp in (missing, malformed):
        assert resp.headers["WWW-Authenticate"].startswith("Bearer")


def test_invalid_token_details_are_not_leaked(client) -> None:
    resp = client.get(f"{API}/auth/me", headers=bearer("not.a.jwt"))
    body = _problem(resp)
    assert resp.status_code == 401
    assert body["code"] == "invalid_token"
    assert body["detail"] == "Invalid or expired token."


def test_me_returns_principal(client, user, auth_header) -> None:
    resp = client.get(f"{API}/auth/me", headers=auth_header)
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"id": user.id, "email": user.email, "role": "USER"}


def test_refresh_token_is_rejected_as_access_token(client, pair) -> None:
    resp = client.get(f"{API}/auth/me", headers=bearer(pair.refresh_token))
    assert resp.status_code == 401
    assert _problem(resp)["code"] == "invalid_token"


def test_public_and_unknown_routes_skip_authentication(client) -> None:
    assert client.get(f"{API}/health").status_code == 200
    assert client.get(f"{API}/does-not-exist").status_code == 404


def test_request_id_is_echoed(client) -> None:
    resp = client.get(f"{API}/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


# ------------------------------ Refresh / logout ------------------------- #
def test_refresh_rotates_once(client, pair) -> None:
    resp = client.post(f"{API}/auth/refresh", headers=bearer(pair.refresh_token))
    assert resp.status_code == 200
    rotated = resp.get_json()["data"]
    assert rotated["refresh_token"] != pair.refresh_token

    replay = client.post(f"{API}/auth/refresh", headers=bearer(pair.refresh_token))
    assert replay.status_code == 401
    assert _problem(replay)["code"] == "invalid_token"


def test_refresh_without_header(client) -> None:
    resp = client.post(f"{API}/auth/refresh")
    assert resp.status_code == 401
    assert _problem(resp)["code"] == "missing_credential"


def test_logout_revokes_current_token_and_refresh(client, pair, auth_header) -> None:
    resp = client.post(f"{API}/auth/logout", headers=auth_header)
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"revoked_refresh_tokens": 1}

    assert client.get(f"{API}/auth/me", headers=auth_header).status_code == 401
    assert client.post(f"{API}/auth/refresh", headers=bearer(pair.refresh_token)).status_code == 401


# ------------------------------ Account endpoints ------------------------ #
def test_password_change_logs_out_everywhere(client, sessions, user, pair, auth_header) -> None:
    other_device = login_pair(sessions, user)

    resp = client.put(
        f"{API}/users/me/password",
        headers=auth_header,
        json={"current_password": DEFAULT_PASSWORD, "new_password": "Brand-new-pass1"},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["revoked_refresh_tokens"] == 2

    assert client.get(f"{API}/auth/me", headers=auth_header).status_code == 401
    for refresh in (pair.refresh_token, other_device.refresh_token):
        assert client.post(f"{API}/auth/refresh", headers=bearer(refresh)).status_code == 401


def test_password_change_with_wrong_current_password(client, auth_header) -> None:
    resp = client.put(
        f"{API}/users/me/password",
        headers=auth_header,
        json={"current_password": "nope", "new_password": "Brand-new-pass1"},
    )
    assert resp.status_code == 401
    assert _problem(resp)["code"] == "invalid_credentials"


def test_delete_account(client, auth_header) -> None:
    assert client.delete(f"{API}/users/me", headers=auth_header).status_code == 204
    assert client.get(f"{API}/auth/me", headers=auth_header).status_code == 401


# ------------------------------ Admin ------------------------------------ #
@pytest.fixture()
def admin_header(sessions, admin) -> dict[str, str]:
    return bearer(login_pair(sessions, admin).access_token)


def test_admin_route_forbidden_for_users(client, user, auth_header) -> None:
    resp = client.delete(f"{API}/admin/users/{user.id}/sessions", headers=auth_header)
    assert resp.status_code == 403
    assert _problem(resp)["code"] == "forbidden"


def test_admin_revokes_user_sessions(client, user, pair, admin_header) -> None:
    resp = client.delete(f"{API}/admin/users/{user.id}/sessions", headers=admin_header)
    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"revoked_refresh_tokens": 1}
    assert client.post(f"{API}/auth/refresh", headers=bearer(pair.refresh_token)).status_code == 401


def test_admin_revocation_unknown_user(client, admin_header) -> None:
    resp = client.delete(f"{API}/admin/users/999999/sessions", headers=admin_header)
    assert resp.status_code == 404
    assert _problem(resp)["code"] == "user_not_found"


def test_principal_does_not_leak_into_the_next_request(client, auth_header) -> None:
    assert client.get(f"{API}/auth/me", headers=auth_header).status_code == 200

    resp = client.get(f"{API}/auth/me")

    assert resp.status_code == 401
    assert _problem(resp)["code"] == "missing_credential"


def test_sole_admin_cannot_delete_own_account(client, admin_header) -> None:
    resp = client.delete(f"{API}/users/me", headers=admin_header)

    assert resp.status_code == 409
    assert _problem(resp)["code"] == "conflict"
    assert client.get(f"{API}/auth/me", headers=admin_header).status_code == 200
