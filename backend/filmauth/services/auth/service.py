# filmauth/services/auth/service.py
from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from filmauth.models.user import Role
from filmauth.services._shared.base import BaseService
from filmauth.services._shared.errors import (
    InvalidCredentials,
    InvalidToken,
    RevocationError,
    ServiceError,
    TokenError,
    UserNotFound,
)
from filmauth.services._shared.ports.blacklist_store import BlacklistEntry, BlacklistStore
from filmauth.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
)
from filmauth.services._shared.ports.token_codec import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    IdentityClaims,
    TokenClaims,
    TokenCodec,
)
from filmauth.services._shared.ports.user_lookup import AuthUser, UserLookup
from filmauth.services.auth.dto import LoginIn, Principal, TokenPair, TokenTTLConfig

log = logging.getLogger(__name__)


class SessionManager(BaseService):
    """
    Token session lifecycle: issue, validate, rotate, revoke.

    Each access/refresh pair goes Issued -> Active -> Expired | Revoked |
    Rotated. Any terminal state makes :meth:`validate` reject the token.

    Revocation model
    ----------------
    Every refresh token that is consumed (rotation) or revoked (logout,
    credential change, admin action) is deleted from the refresh store *and*
    recorded in the blacklist until its natural expiry. Access tokens are
    revoked through the blacklist only.

    Concurrency
    -----------
    No in-process locks. Rotation is single-use because only one caller can
    delete a given refresh row; blacklist inserts are idempotent. Writes run
    in one read-write unit of work so the visible row set is all-or-nothing.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        blacklist: BlacklistStore,
        refresh_tokens: RefreshTokenStore,
        users: UserLookup,
        ttl: TokenTTLConfig,
    ) -> None:
        """
        Initialize the manager with its collaborators.

        :param codec: Adapter that signs and verifies tokens.
        :param blacklist: Durable set of revoked tokens.
        :param refresh_tokens: Durable set of outstanding refresh tokens.
        :param users: Read access to users (by id and email).
        :param ttl: Access/refresh lifetimes.
        """
        self.codec = codec
        self.blacklist = blacklist
        self.refresh_tokens = refresh_tokens
        self.users = users
        self.ttl = ttl

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue(self, user: AuthUser, *, fresh: bool = False) -> TokenPair:
        """
        Mint an access/refresh pair for ``user`` and persist the refresh token.

        :param user: Any object exposing ``id``, ``email`` and ``role``.
        :param fresh: Mark the access token as fresh (direct credential login).
        :returns: The new pair.
        """
        identity = self._identity(user)
        with self.rw_uow():
            pair = self._mint(identity, fresh=fresh)
        log.info("auth.issue", extra={"user_id": identity.id})
        return pair

    def login(self, dto: LoginIn) -> TokenPair:
        """
        Verify credentials and issue a fresh pair.

        :raises InvalidCredentials: Unknown email or wrong password.
        """
        with self.ro_uow():
            user = self.users.find_by_email(dto.email)
            if user is None or not user.verify_password(dto.password):
                log.warning("auth.login.rejected")
                raise InvalidCredentials()
            identity = self._identity(user)
        with self.rw_uow():
            pair = self._mint(identity, fresh=True)
        log.info("auth.login", extra={"user_id": identity.id})
        return pair

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self, token: str) -> Principal:
        """
        Turn an access token into a :class:`Principal`.

        The blacklist is consulted before any signature work. Every failure
        is reported as the same :class:`InvalidToken`; the precise cause only
        reaches the logs.

        :raises InvalidToken: Blacklisted, expired, badly signed, malformed,
            or not an access token.
        :raises StoreUnavailable: The blacklist could not be queried.
        """
        with self.ro_uow():
            if self.blacklist.exists(token):
                raise self._rejected("blacklisted")
            claims = self._decode(token, expected_type=ACCESS_TOKEN_TYPE)
        identity = claims.identity
        return Principal(id=identity.id, email=identity.email, role=identity.role)

    # ------------------------------------------------------------------ #
    # Rotation
    # ------------------------------------------------------------------ #

    def rotate(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new pair; the old one becomes unusable.

        Of several concurrent rotations of the same token at most one wins;
        the others find the row gone and get :class:`InvalidToken`.

        :raises InvalidToken: Token invalid, not a refresh token, blacklisted,
            or already consumed.
        :raises UserNotFound: The owner no longer exists.
        """
        now = self.now_utc()
        with self.rw_uow():
            if self.blacklist.exists(refresh_token):
                raise self._rejected("blacklisted")
            claims = self._decode(refresh_token, expected_type=REFRESH_TOKEN_TYPE)

            user = self.users.find_by_id(claims.identity.id)
            if user is None:
                raise UserNotFound(claims.identity.id)

            if not self.refresh_tokens.delete_by_token(refresh_token):
                log.warning(
                    "auth.rotate.rejected",
                    extra={"user_id": claims.identity.id, "reason": "consumed"},
                )
                raise InvalidToken("refresh token invalid or expired", reason="consumed")
            self._blacklist(refresh_token, claims.expires_at, now)

            pair = self._mint(self._identity(user))
        log.info("auth.rotate", extra={"user_id": claims.identity.id})
        return pair

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_all(self, user_id: int, current_access_token: str | None = None) -> int:
        """
        Revoke every session of ``user_id``.

        Blacklists ``current_access_token`` (when given), then blacklists and
        deletes every outstanding refresh token of the user. Runs in one
        read-write unit of work; when called inside an enclosing one (e.g. a
        password change) both commit or roll back together.

        :returns: Number of refresh tokens revoked.
        :raises RevocationError: Any step failed; nothing must be assumed revoked.
        """
        now = self.now_utc()
        try:
            with self.rw_uow():
                if current_access_token:
                    claims = self.codec.decode(current_access_token, allow_expired=True)
                    self._blacklist(current_access_token, claims.expires_at, now)

                records = self.refresh_tokens.find_all_by_user(user_id)
                for record in records:
                    self._blacklist(record.token, record.expires_at, now)
                    self.refresh_tokens.delete_by_token(record.token)
        except (ServiceError, SQLAlchemyError) as exc:
            log.error(
                "auth.revoke_all.failed",
                extra={"user_id": user_id, "reason": type(exc).__name__},
            )
            raise RevocationError() from exc

        log.info("auth.revoke_all", extra={"user_id": user_id, "revoked_refresh": len(records)})
        return len(records)

    def logout(self, access_token: str) -> int:
        """
        Revoke every session of the token's owner.

        The signature is verified but an expired token is accepted, so a
        client can always log out. Calling it twice is harmless.

        :raises InvalidToken: The token cannot be verified at all.
        :raises RevocationError: Revocation did not complete.
        """
        try:
            claims = self.codec.decode(access_token, allow_expired=True)
        except TokenError as exc:
            raise self._rejected(exc.reason) from exc
        return self.revoke_all(claims.identity.id, access_token)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    @staticmethod
    def _identity(user: AuthUser) -> IdentityClaims:
        return IdentityClaims(id=int(user.id), email=user.email, role=Role(user.role))

    def _mint(self, identity: IdentityClaims, *, fresh: bool = False) -> TokenPair:
        """Encode both tokens and persist the refresh one. Caller owns the UoW."""
        access = self.codec.encode(
            identity, ttl=self.ttl.access_ttl, token_type=ACCESS_TOKEN_TYPE, fresh=fresh
        )
        refresh = self.codec.encode(identity, ttl=self.ttl.refresh_ttl, token_type=REFRESH_TOKEN_TYPE)
        # Store the exact iat/exp embedded in the token.
        minted = self.codec.decode(refresh)
        self.refresh_tokens.insert(
            RefreshTokenRecord(
                token=refresh,
                user_id=identity.id,
                created_at=minted.issued_at,
                expires_at=minted.expires_at,
            )
        )
        return TokenPair(access_token=access, refresh_token=refresh)

    def _blacklist(self, token: str, expires_at: datetime, now: datetime) -> bool:
        return self.blacklist.insert(
            BlacklistEntry(token=token, blacklisted_at=now, expires_at=expires_at)
        )

    def _decode(self, token: str, *, expected_type: str) -> TokenClaims:
        try:
            claims = self.codec.decode(token)
        except TokenError as exc:
            raise self._rejected(exc.reason) from exc
        if claims.token_type != expected_type:
            raise self._rejected("wrong_type")
        return claims

    @staticmethod
    def _rejected(reason: str) -> InvalidToken:
        log.warning("auth.validate.rejected", extra={"reason": reason})
        return InvalidToken(reason=reason)
