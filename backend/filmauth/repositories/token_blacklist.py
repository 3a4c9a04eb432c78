"""SQL implementation of the blacklist store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from filmauth.models.tokens import TokenBlacklist
from filmauth.repositories.base import BaseRepository, store_errors
from filmauth.services._shared.ports.blacklist_store import BlacklistEntry, BlacklistStore


class TokenBlacklistRepository(BaseRepository[TokenBlacklist], BlacklistStore):
    """Persistence for revoked tokens (``token_blacklist`` table).

    The unique constraint on ``token`` is what makes concurrent inserts of
    the same token safe; no in-process locking is involved.
    """

    model = TokenBlacklist

    def exists(self, token: str) -> bool:
        stmt = select(TokenBlacklist.id).where(TokenBlacklist.token == token).limit(1)
        with store_errors():
            return self.session.execute(stmt).first() is not None

    def insert(self, entry: BlacklistEntry) -> bool:
        """Record a revocation; a duplicate or already-expired token is a no-op.

        :returns: ``True`` when a row was created.
        """
        if entry.expires_at <= entry.blacklisted_at:
            return False
        with store_errors():
            return self._insert_ignore(
                {
                    "token": entry.token,
                    "blacklisted_at": entry.blacklisted_at,
                    "expires_at": entry.expires_at,
                },
                conflict_column="token",
                constraint="uq_token_blacklist_token",
            )

    def delete_by_token(self, token: str) -> bool:
        stmt = (
            delete(TokenBlacklist)
            .where(TokenBlacklist.token == token)
            .execution_options(synchronize_session=False)
        )
        with store_errors():
            return bool(self.session.execute(stmt).rowcount)

    def delete_expired_before(self, moment: datetime) -> int:
        stmt = (
            delete(TokenBlacklist)
            .where(TokenBlacklist.expires_at < moment)
            .execution_options(synchronize_session=False)
        )
        with store_errors():
            return int(self.session.execute(stmt).rowcount or 0)
