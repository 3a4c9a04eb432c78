"""User repository for persistence and authentication utilities."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, select

from filmauth.models.user import Role, User
from filmauth.repositories.base import BaseRepository, store_errors


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Implements the user lookup port consumed by the session manager. It
    NEVER handles tokens, only DB-level user management.
    """

    model = User

    # ---------------------------- Lookup port ----------------------------

    def find_by_id(self, user_id: int) -> User | None:
        """Fetch a user by primary key."""
        with store_errors():
            return self.get(user_id)

    def find_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.lower().strip())
        with store_errors():
            result = self.session.execute(stmt).scalars().first()
        return cast(User | None, result)

    # ---------------------------- Helpers ----------------------------

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        return bool(self.session.execute(stmt).first())

    def count_by_role(self, role: Role) -> int:
        stmt = select(func.count()).select_from(User).where(User.role == role)
        return int(self.session.execute(stmt).scalar_one())

    def update_password(self, user: User, new_password: str) -> None:
        """Assign a new password (the model hashes it) and flush.

        :param user: Persistent user instance.
        :param new_password: Raw password.
        """
        user.password = new_password
        self.flush()
