# filmauth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from filmauth.models.user import Role

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized).
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated identity produced by token validation.

    Only :meth:`SessionManager.validate` creates these; they are never
    persisted and are passed explicitly to whatever needs them.

    :param id: User id from the ``id`` claim.
    :param email: User email from the ``sub`` claim.
    :param role: User role from the ``role`` claim.
    """

    id: int
    email: str
    role: Role


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access and refresh tokens minted together.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenTTLConfig:
    """
    Token lifetimes.

    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime; must exceed ``access_ttl``.
    :type refresh_ttl: timedelta
    """

    access_ttl: timedelta
    refresh_ttl: timedelta

    def __post_init__(self) -> None:
        if self.access_ttl <= timedelta(0):
            raise ValueError("access_ttl must be positive")
        if self.refresh_ttl <= self.access_ttl:
            raise ValueError("refresh_ttl must be longer than access_ttl")

    @classmethod
    def from_seconds(cls, access: int, refresh: int) -> TokenTTLConfig:
        return cls(access_ttl=timedelta(seconds=access), refresh_ttl=timedelta(seconds=refresh))
