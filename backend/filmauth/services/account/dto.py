# filmauth/services/account/dto.py
from __future__ import annotations

from dataclasses import dataclass

from filmauth.models.user import Role


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account creation.

    :param email: Login email.
    :param username: Public handle.
    :param password: Raw password (hashed by the model).
    :param role: Account role; self-registration is always ``USER``.
    """

    email: str
    username: str
    password: str
    role: Role = Role.USER


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for a password change.

    :param current_password: Password the caller claims to hold.
    :param new_password: Replacement password.
    """

    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class AccountOut:
    """Public view of a user account."""

    id: int
    email: str
    username: str
    role: Role
