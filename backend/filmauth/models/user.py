"""User model: the authentication identity consumed by the session manager."""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from filmauth.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class Role(str, Enum):
    """Closed set of roles carried in token claims."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity.

    Fields
    ------
    email : str
        Login email and token subject. Stored normalized (lowercase, trimmed).
    username : str
        Public alias or handle. Unique per system.
    password_hash : str
        Hashed password (write-only setter via ``password``).
    role : Role
        ``USER`` or ``ADMIN``; copied into every token minted for the user.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="user_role", native_enum=False, length=16),
        nullable=False,
        default=Role.USER,
        server_default=Role.USER.value,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_email", "email"),
    )

    # -------------------- Credentials --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - write-only attribute
        """Write-only; assigning hashes the value into ``password_hash``."""
        raise AttributeError("User.password is write-only; use verify_password().")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        """Return ``True`` when ``raw`` matches the stored hash.

        Rotating the password does not touch issued tokens; callers revoke
        sessions explicitly (see ``AccountService.change_password``).
        """
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    # -------------------- Normalization --------------------
    @validates("email")
    def _clean_email(self, _key: str, value: str) -> str:
        """Lowercase and trim; the result is also the token subject.

        :raises ValueError: Empty value or no ``local@domain.tld`` shape.
        """
        email = value.strip().lower() if isinstance(value, str) else ""
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise ValueError("Email format looks invalid." if email else "Email is required.")
        return email

    @validates("username")
    def _clean_username(self, _key: str, value: str) -> str:
        name = value.strip() if isinstance(value, str) else ""
        if not name:
            raise ValueError("Username is required.")
        return name
