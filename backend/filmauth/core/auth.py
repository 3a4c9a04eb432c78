"""Wire the token session components onto the Flask app.

Components are built once per app and stored in ``app.extensions``; views,
CLI commands and the cleanup thread fetch them through the ``get_*``
helpers instead of module-level globals.
"""

from __future__ import annotations

import logging
from typing import cast

from flask import Flask, current_app

from filmauth.core.extensions import get_redis
from filmauth.infra.jwt import FlaskJWTTokenCodec, validate_signing_key
from filmauth.infra.redis import RedisBlacklistStore
from filmauth.repositories import (
    RefreshTokenRepository,
    TokenBlacklistRepository,
    UserRepository,
)
from filmauth.services._shared.ports import BlacklistStore
from filmauth.services.account import AccountService
from filmauth.services.auth import SessionManager, TokenCleanupService, TokenTTLConfig

log = logging.getLogger(__name__)

SESSIONS_KEY = "filmauth.sessions"
ACCOUNTS_KEY = "filmauth.accounts"
CLEANUP_KEY = "filmauth.cleanup"


def _build_blacklist(app: Flask) -> BlacklistStore:
    backend = str(app.config.get("TOKEN_BLACKLIST_BACKEND", "sqlalchemy")).lower()
    if backend == "sqlalchemy":
        return TokenBlacklistRepository()
    if backend == "redis":
        return RedisBlacklistStore(get_redis(app))
    raise RuntimeError(f"Unknown TOKEN_BLACKLIST_BACKEND {backend!r}; use 'sqlalchemy' or 'redis'.")


def init_app(app: Flask) -> None:
    """Validate the signing key and build the session components.

    :raises InvalidSigningKey: ``JWT_SECRET_KEY`` unusable (fatal at startup).
    :raises ValueError: Refresh TTL not longer than access TTL.
    """
    validate_signing_key(app.config.get("JWT_SECRET_KEY"), app.config.get("JWT_ALGORITHM", "HS256"))

    ttl = TokenTTLConfig.from_seconds(
        int(app.config["ACCESS_TOKEN_TTL_SECONDS"]),
        int(app.config["REFRESH_TOKEN_TTL_SECONDS"]),
    )
    blacklist = _build_blacklist(app)
    refresh_tokens = RefreshTokenRepository()

    sessions = SessionManager(
        codec=FlaskJWTTokenCodec(),
        blacklist=blacklist,
        refresh_tokens=refresh_tokens,
        users=UserRepository(),
        ttl=ttl,
    )
    app.extensions[SESSIONS_KEY] = sessions
    app.extensions[ACCOUNTS_KEY] = AccountService(sessions=sessions)
    app.extensions[CLEANUP_KEY] = TokenCleanupService(
        blacklist=blacklist, refresh_tokens=refresh_tokens
    )
    log.info("auth.configured blacklist=%s", type(blacklist).__name__)


def get_session_manager() -> SessionManager:
    return cast(SessionManager, current_app.extensions[SESSIONS_KEY])


def get_account_service() -> AccountService:
    return cast(AccountService, current_app.extensions[ACCOUNTS_KEY])


def get_cleanup_service() -> TokenCleanupService:
    return cast(TokenCleanupService, current_app.extensions[CLEANUP_KEY])
