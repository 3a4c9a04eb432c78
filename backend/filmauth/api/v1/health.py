"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from filmauth.api.deps import json_response, timing
from filmauth.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


def _blacklist_status() -> str:
    if current_app.config.get("TOKEN_BLACKLIST_BACKEND") != "redis":
        return "sqlalchemy"
    try:
        get_redis().ping()
    except (RedisError, RuntimeError):
        current_app.logger.exception("healthcheck.redis_error")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def healthcheck():
    """Return application, database and blacklist backend health."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    blacklist_status = _blacklist_status()
    status = "ok" if db_status == "ok" and blacklist_status != "fail" else "degraded"
    payload = {
        "status": status,
        "db": db_status,
        "blacklist": blacklist_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if status == "ok" else 503)
