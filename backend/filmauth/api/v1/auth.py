"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from filmauth.api.authn import AuthContext, extract_bearer
from filmauth.api.deps import json_response, require_auth, timing
from filmauth.core.auth import get_account_service, get_session_manager
from filmauth.core.extensions import limiter
from filmauth.schemas import (
    AccountSchema,
    LoginSchema,
    PrincipalSchema,
    RegisterSchema,
    RevocationResultSchema,
    TokenPairSchema,
)
from filmauth.services.account import RegisterIn
from filmauth.services.auth import LoginIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
account_schema = AccountSchema()
principal_schema = PrincipalSchema()
token_schema = TokenPairSchema()
revocation_schema = RevocationResultSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _refresh_rate_limit() -> str:
    return str(current_app.config.get("AUTH_REFRESH_RATE_LIMIT", "30 per minute"))


@bp.post("/register")
@timing
def register():
    """Create a ``USER`` account and return its public representation."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    account = get_account_service().register(RegisterIn(**payload))
    return json_response({"data": account_schema.dump(account)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a fresh token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = get_session_manager().login(LoginIn(email=data["email"], password=data["password"]))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@limiter.limit(_refresh_rate_limit)
@timing
def refresh():
    """Rotate the refresh token sent as ``Authorization: Bearer <refresh>``.

    Public to the authenticator: the presented credential is a refresh
    token, which access-token validation would reject.
    """

    token = extract_bearer(request.headers.get("Authorization"))
    pair = get_session_manager().rotate(token)
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout(auth: AuthContext):
    """Revoke the caller's current token and every refresh token they hold."""

    revoked = get_session_manager().logout(auth.token)
    return json_response({"data": revocation_schema.dump({"revoked_refresh_tokens": revoked})})


@bp.get("/me")
@require_auth
@timing
def me(auth: AuthContext):
    """Return the principal established from the bearer token."""

    return json_response({"data": principal_schema.dump(auth.principal)})
