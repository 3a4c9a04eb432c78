"""Self-service account endpoints that trigger session revocation."""

from __future__ import annotations

from flask import Blueprint, request

from filmauth.api.authn import AuthContext
from filmauth.api.deps import json_response, require_auth, timing
from filmauth.core.auth import get_account_service
from filmauth.schemas import AccountSchema, PasswordChangeSchema, RevocationResultSchema
from filmauth.services.account import PasswordChangeIn

bp = Blueprint("users", __name__, url_prefix="/users")

password_schema = PasswordChangeSchema()
account_schema = AccountSchema()
revocation_schema = RevocationResultSchema()


@bp.get("/me")
@require_auth
@timing
def get_me(auth: AuthContext):
    """Return the caller's account."""

    account = get_account_service().get(auth.principal.id)
    return json_response({"data": account_schema.dump(account)})


@bp.put("/me/password")
@require_auth
@timing
def change_password(auth: AuthContext):
    """Change the caller's password; every existing session is revoked."""

    data = password_schema.load(request.get_json(silent=True) or {})
    revoked = get_account_service().change_password(
        auth.principal.id,
        PasswordChangeIn(**data),
        current_access_token=auth.token,
    )
    return json_response({"data": revocation_schema.dump({"revoked_refresh_tokens": revoked})})


@bp.delete("/me")
@require_auth
@timing
def delete_me(auth: AuthContext):
    """Revoke every session of the caller, then delete the account."""

    get_account_service().delete_account(auth.principal.id, current_access_token=auth.token)
    return "", 204
