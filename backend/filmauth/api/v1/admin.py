"""Administrative endpoints."""

from __future__ import annotations

from flask import Blueprint

from filmauth.api.authn import AuthContext
from filmauth.api.deps import json_response, require_role, timing
from filmauth.core.auth import get_account_service
from filmauth.models.user import Role
from filmauth.schemas import RevocationResultSchema

bp = Blueprint("admin", __name__, url_prefix="/admin")

revocation_schema = RevocationResultSchema()


@bp.delete("/users/<int:user_id>/sessions")
@require_role(Role.ADMIN)
@timing
def revoke_sessions(user_id: int, auth: AuthContext):
    """Revoke every refresh token of ``user_id`` (ADMIN only)."""

    revoked = get_account_service().revoke_user_sessions(user_id)
    return json_response({"data": revocation_schema.dump({"revoked_refresh_tokens": revoked})})
