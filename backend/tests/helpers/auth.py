"""Token helpers shared across test modules."""

from __future__ import annotations

from datetime import timedelta

from filmauth.infra.jwt import FlaskJWTTokenCodec
from filmauth.models.user import Role
from filmauth.services._shared.ports.token_codec import IdentityClaims
from filmauth.services.auth import LoginIn, SessionManager, TokenPair

from tests.factories.user import DEFAULT_PASSWORD


def login_pair(sessions: SessionManager, user, password: str = DEFAULT_PASSWORD) -> TokenPair:
    """Log ``user`` in through the session manager."""
    return sessions.login(LoginIn(email=user.email, password=password))


def bearer(token: str) -> dict[str, str]:
    """Build an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def mint(
    *,
    user_id: int = 1,
    email: str = "someone@example.com",
    role: Role = Role.USER,
    ttl: timedelta = timedelta(minutes=5),
    token_type: str = "access",
) -> str:
    """Encode a token directly, bypassing the stores (needs an app context)."""
    return FlaskJWTTokenCodec().encode(
        IdentityClaims(id=user_id, email=email, role=role), ttl=ttl, token_type=token_type
    )
