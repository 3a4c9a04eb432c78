"""Environment-driven settings for tokens, revocation stores and the database."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # development | testing | production

# Routes reachable without a bearer token (see ``filmauth.api.authn``).
# The catalogue listing/detail routes belong to the host API mounted next to us.
DEFAULT_PUBLIC_ROUTES: Final[str] = ",".join(
    [
        "/api/v1/health",
        "/api/v1/auth/login",
        "/api/v1/auth/register",
        "/api/v1/auth/refresh",
        "/api/v1/movies",
        "/api/v1/movies/{id}",
    ]
)

# Development-only signing key; long enough to pass ``validate_signing_key``.
_DEV_JWT_SECRET: Final[str] = "dev-only-signing-key-change-me-0123456789"


load_dotenv()

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """Read a truthy flag (``1/true/yes/y/on``, any case) from the environment."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Parse a positive integer from an environment variable.

    Raises ``ValueError`` at import time for garbage values so a broken
    deployment fails on startup rather than on the first request.
    """
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    parsed = int(val.strip())
    if parsed <= 0:
        raise ValueError(f"{name} must be a positive integer, got {parsed}")
    return parsed


def env_list(name: str, default: str = "") -> tuple[str, ...]:
    """Split a comma-separated environment variable into trimmed items."""
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    JWT_SECRET_KEY: str
        Symmetric key used by ``flask-jwt-extended`` for signing tokens.
        Validated once at startup; an unusable key aborts ``create_app``.
    JWT_ALGORITHM: str
        HMAC algorithm used for signing (``HS256`` by default).
    ACCESS_TOKEN_TTL_SECONDS: int
        Lifetime of access tokens.
    REFRESH_TOKEN_TTL_SECONDS: int
        Lifetime of refresh tokens. Must be larger than the access TTL.
    TOKEN_BLACKLIST_BACKEND: str
        ``"sqlalchemy"`` (default) or ``"redis"``.
    REDIS_URL: str | None
        Connection URL, required when the blacklist backend is Redis.
    REDIS_SOCKET_TIMEOUT: int
        Seconds before a Redis call gives up (``StoreUnavailable`` then).
    TOKEN_CLEANUP_ENABLED: bool
        Start the background purge thread with the app.
    TOKEN_CLEANUP_INTERVAL_SECONDS: int
        Delay between two purge passes (once a day by default).
    AUTH_PUBLIC_ROUTES: tuple[str, ...]
        Paths exempt from bearer authentication.
    AUTH_LOGIN_RATE_LIMIT, AUTH_REFRESH_RATE_LIMIT: str
        Flask-Limiter strings applied per client address to login and refresh.
    RATELIMIT_STORAGE_URI: str
        Counter storage for Flask-Limiter (``memory://`` or a Redis URL).
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")

    # Tokens
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 3600)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 86400)

    # Revocation state
    TOKEN_BLACKLIST_BACKEND = os.getenv("TOKEN_BLACKLIST_BACKEND", "sqlalchemy").strip().lower()
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_SOCKET_TIMEOUT = env_int("REDIS_SOCKET_TIMEOUT", 2)
    TOKEN_CLEANUP_ENABLED = env_bool("TOKEN_CLEANUP_ENABLED", True)
    TOKEN_CLEANUP_INTERVAL_SECONDS = env_int("TOKEN_CLEANUP_INTERVAL_SECONDS", 86400)

    AUTH_PUBLIC_ROUTES = env_list("AUTH_PUBLIC_ROUTES", DEFAULT_PUBLIC_ROUTES)

    # Rate limits
    AUTH_LOGIN_RATE_LIMIT = os.getenv("AUTH_LOGIN_RATE_LIMIT", "5 per minute")
    AUTH_REFRESH_RATE_LIMIT = os.getenv("AUTH_REFRESH_RATE_LIMIT", "30 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Falls back to a development signing key when ``JWT_SECRET_KEY`` is unset.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", _DEV_JWT_SECRET)


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Never starts the cleanup thread; tests drive purges explicitly.
    - Forces the SQL blacklist so no Redis server is needed.
    - Raises the auth rate limits out of reach of the suite.
    """

    TESTING = True
    DEBUG = False
    JWT_SECRET_KEY = _DEV_JWT_SECRET
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    TOKEN_BLACKLIST_BACKEND = "sqlalchemy"
    TOKEN_CLEANUP_ENABLED = False
    PROPAGATE_EXCEPTIONS = True
    AUTH_LOGIN_RATE_LIMIT = "1000 per minute"
    AUTH_REFRESH_RATE_LIMIT = "1000 per minute"


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    ``JWT_SECRET_KEY`` has no default here: startup fails without it.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the config class named by ``APP_ENV``; unknown values mean development."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
