from __future__ import annotations

from typing import Protocol

from filmauth.models.user import Role


class AuthUser(Protocol):
    """Minimal user shape the session manager reads."""

    id: int
    email: str
    role: Role
    password_hash: str

    def verify_password(self, raw: str) -> bool: ...


class UserLookup(Protocol):
    """Read access to users, implemented by :class:`~filmauth.repositories.user.UserRepository`."""

    def find_by_id(self, user_id: int) -> AuthUser | None: ...

    def find_by_email(self, email: str) -> AuthUser | None: ...
