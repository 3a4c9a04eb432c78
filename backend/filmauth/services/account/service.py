# filmauth/services/account/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from filmauth.models.user import Role, User
from filmauth.services._shared.base import BaseService
from filmauth.services._shared.errors import (
    ConflictError,
    InvalidCredentials,
    UserNotFound,
    violates,
)
from filmauth.services.account.dto import AccountOut, PasswordChangeIn, RegisterIn
from filmauth.services.auth.service import SessionManager

log = logging.getLogger(__name__)


def _to_out(user: User) -> AccountOut:
    return AccountOut(id=user.id, email=user.email, username=user.username, role=user.role)


class AccountService(BaseService):
    """
    Account operations that create users or trigger session revocation.

    Credential changes run the revocation inside the same unit of work as the
    change itself: if revoking fails, the change is rolled back and the error
    propagates. Stale sessions never survive a password change.
    """

    def __init__(self, *, sessions: SessionManager) -> None:
        self.sessions = sessions

    def register(self, dto: RegisterIn) -> AccountOut:
        """
        Create an account.

        :raises ConflictError: Email or username already taken.
        """
        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "email already registered")
            if uow.users.exists_by_username(dto.username):
                raise ConflictError("User", "username already taken")
            user = User(email=dto.email, username=dto.username, role=dto.role)
            user.password = dto.password
            uow.users.add(user)
            try:
                uow.users.flush()
            except IntegrityError as exc:
                if violates(exc, "uq_users_email") or violates(exc, "uq_users_username"):
                    raise ConflictError("User", "email or username already taken") from exc
                raise
            out = _to_out(user)
        log.info("account.register", extra={"user_id": out.id})
        return out

    def get(self, user_id: int) -> AccountOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFound(user_id)
            return _to_out(user)

    def change_password(self, user_id: int, dto: PasswordChangeIn, *, current_access_token: str) -> int:
        """
        Replace the password and revoke every session of the user.

        :returns: Number of refresh tokens revoked.
        :raises InvalidCredentials: ``current_password`` does not match.
        :raises RevocationError: Revocation failed; the password is unchanged.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFound(user_id)
            if not user.verify_password(dto.current_password):
                raise InvalidCredentials("Current password is incorrect.")
            uow.users.update_password(user, dto.new_password)
            revoked = self.sessions.revoke_all(user_id, current_access_token)
        log.info("account.password_changed", extra={"user_id": user_id})
        return revoked

    def delete_account(self, user_id: int, *, current_access_token: str) -> None:
        """
        Revoke every session, then delete the user.

        :raises ConflictError: The user is the last remaining admin.
        :raises RevocationError: Revocation failed; the account is kept.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UserNotFound(user_id)
            if user.role is Role.ADMIN and uow.users.count_by_role(Role.ADMIN) <= 1:
                raise ConflictError("User", "cannot delete the last admin")
            self.sessions.revoke_all(user_id, current_access_token)
            uow.users.delete(user)
        log.info("account.deleted", extra={"user_id": user_id})

    def revoke_user_sessions(self, user_id: int) -> int:
        """
        Administrative revocation of another user's sessions.

        :returns: Number of refresh tokens revoked.
        """
        with self.rw_uow() as uow:
            if uow.users.get(user_id) is None:
                raise UserNotFound(user_id)
            revoked = self.sessions.revoke_all(user_id)
        log.info("account.sessions_revoked", extra={"user_id": user_id, "revoked_refresh": revoked})
        return revoked
