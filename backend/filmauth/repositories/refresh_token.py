"""SQL implementation of the refresh token store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from filmauth.models.tokens import RefreshToken
from filmauth.repositories.base import BaseRepository, store_errors
from filmauth.services._shared.ports.refresh_token_store import (
    RefreshTokenRecord,
    RefreshTokenStore,
)


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=row.token,
        user_id=row.user_id,
        created_at=row.created_at,
        expires_at=row.expires_at,
    )


class RefreshTokenRepository(BaseRepository[RefreshToken], RefreshTokenStore):
    """Persistence for outstanding refresh tokens (``refresh_tokens`` table).

    ``delete_by_token`` relies on the row count of ``DELETE ... WHERE token``:
    when two requests rotate the same token, only one of them removes a row.
    """

    model = RefreshToken

    def exists(self, token: str) -> bool:
        stmt = select(RefreshToken.id).where(RefreshToken.token == token).limit(1)
        with store_errors():
            return self.session.execute(stmt).first() is not None

    def insert(self, record: RefreshTokenRecord) -> bool:
        with store_errors():
            return self._insert_ignore(
                {
                    "token": record.token,
                    "user_id": record.user_id,
                    "created_at": record.created_at,
                    "expires_at": record.expires_at,
                },
                conflict_column="token",
                constraint="uq_refresh_tokens_token",
            )

    def delete_by_token(self, token: str) -> bool:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        with store_errors():
            return bool(self.session.execute(stmt).rowcount)

    def delete_expired_before(self, moment: datetime) -> int:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expires_at < moment)
            .execution_options(synchronize_session=False)
        )
        with store_errors():
            return int(self.session.execute(stmt).rowcount or 0)

    def find_all_by_user(self, user_id: int) -> list[RefreshTokenRecord]:
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id).order_by(RefreshToken.id)
        with store_errors():
            rows = self.session.execute(stmt).scalars().all()
        return [_to_record(row) for row in rows]
