"""
Service-layer exceptions shared by stores, the token codec and services.

Nothing here knows about Flask or HTTP; ``filmauth.core.errors`` maps these
to problem+json responses.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """Return ``True`` when ``exc`` was raised by ``constraint_name``."""
    message = str(exc.orig).lower() if exc.orig else ""
    return constraint_name.lower() in message


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """Root of every error a service may raise; never an HTTP error itself."""


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


# --------------------------------------------------------------------------- #
# Token codec failures
# --------------------------------------------------------------------------- #


class TokenError(ServiceError):
    """
    Base class for decode failures reported by the token codec.

    ``reason`` is a short stable label (``"expired"``, ``"bad_signature"``...)
    kept for logs and diagnostics. It is never shown to clients.
    """

    reason = "invalid"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or f"Token rejected: {self.reason}")


class TokenExpired(TokenError):
    reason = "expired"


class InvalidSignature(TokenError):
    reason = "bad_signature"


class TokenMalformed(TokenError):
    reason = "malformed"


class InvalidIdFormat(TokenError):
    """The ``id`` claim is present but not an integer."""

    reason = "invalid_id_format"


class InvalidSigningKey(ServiceError):
    """
    The configured signing key cannot be used.

    Raised once while building the application; never per request.
    """


# --------------------------------------------------------------------------- #
# Authentication outcomes
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for failures that map to HTTP 401."""

    code = "unauthorized"


class MissingCredential(AuthenticationError):
    """No ``Authorization`` header on a protected route."""

    code = "missing_credential"

    def __init__(self, message: str = "Authorization header is missing.") -> None:
        super().__init__(message)


class MalformedCredential(AuthenticationError):
    """``Authorization`` header present but not ``Bearer <token>``."""

    code = "malformed_credential"

    def __init__(self, message: str = "Invalid Authorization header format.") -> None:
        super().__init__(message)


class InvalidToken(AuthenticationError):
    """
    Token rejected: blacklisted, expired, badly signed or structurally broken.

    All causes are deliberately coalesced. ``reason`` only feeds the logs.
    """

    code = "invalid_token"

    def __init__(self, message: str = "Invalid or expired token.", *, reason: str = "invalid") -> None:
        super().__init__(message)
        self.reason = reason


class InvalidCredentials(AuthenticationError):
    """Email/password pair does not match a user."""

    code = "invalid_credentials"

    def __init__(self, message: str = "Invalid credentials.") -> None:
        super().__init__(message)


class UserNotFound(NotFoundError):
    """A valid token references a user that no longer exists."""

    def __init__(self, key: str | int) -> None:
        super().__init__(entity="User", key=key)


# --------------------------------------------------------------------------- #
# Infrastructure failures
# --------------------------------------------------------------------------- #


class StoreUnavailable(ServiceError):
    """
    A token store (database, Redis) failed or timed out.

    Distinct from :class:`InvalidToken`: callers must fail closed with a 5xx,
    not treat the token as invalid.
    """

    def __init__(self, message: str = "Token store unavailable.") -> None:
        super().__init__(message)


class RevocationError(ServiceError):
    """
    Cascading revocation did not complete.

    The enclosing credential change must be treated as failed.
    """

    def __init__(self, message: str = "Token revocation failed.") -> None:
        super().__init__(message)
