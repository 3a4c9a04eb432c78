"""Flask extension singletons plus the Redis client bound per app."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

REDIS_KEY = "filmauth.redis"

# Deterministic constraint names so alembic autogenerate diffs stay stable.
metadata = MetaData(
    naming_convention={
        "pk": "pk_%(table_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "uq": "uq_%(table_name)s_%(column_0_name)s",
        "ix": "ix_%(table_name)s_%(column_0_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
    }
)

db: SQLAlchemy = SQLAlchemy(metadata=metadata, session_options={"autoflush": False})
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
# Limits are declared per view; storage comes from ``RATELIMIT_STORAGE_URI``.
limiter = Limiter(key_func=get_remote_address)


def _connect_redis(app: Flask) -> redis.Redis:
    url = app.config.get("REDIS_URL")
    if not url:
        raise RuntimeError("TOKEN_BLACKLIST_BACKEND='redis' requires REDIS_URL to be set.")
    timeout = app.config.get("REDIS_SOCKET_TIMEOUT")
    client = redis.Redis.from_url(url, socket_timeout=timeout, socket_connect_timeout=timeout)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis unreachable at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """Bind SQLAlchemy, Flask-Migrate, Flask-JWT-Extended and Flask-Limiter.

    A Redis client is only created when the blacklist runs on Redis; it is
    pinged once so a bad URL fails the boot instead of the first logout.

    :raises RuntimeError: Redis selected but missing or unreachable.
    """
    db.init_app(app)

    # Registers the mapped classes on ``metadata`` before alembic inspects it.
    from filmauth import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)

    if str(app.config.get("TOKEN_BLACKLIST_BACKEND", "")).lower() == "redis":
        app.extensions[REDIS_KEY] = _connect_redis(app)


def get_redis(app: Flask | None = None) -> redis.Redis:
    """Return the Redis client of ``app`` (defaults to ``current_app``)."""
    target = app if app is not None else current_app
    client = target.extensions.get(REDIS_KEY)
    if client is None:
        raise RuntimeError("Redis client is not configured for this app.")
    return client
