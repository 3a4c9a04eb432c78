from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for an outstanding refresh token.

    :ivar token: Full refresh token string.
    :ivar user_id: Owner user id.
    :ivar created_at: Issuance time (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    """

    token: str
    user_id: int
    created_at: datetime
    expires_at: datetime


class RefreshTokenStore(Protocol):
    """
    Durable set of refresh tokens that have been issued and not yet consumed.

    ``delete_by_token`` is the single-use guard for rotation: of several
    concurrent callers deleting the same token, exactly one sees ``True``.
    """

    def exists(self, token: str) -> bool:
        """Return ``True`` if the token is outstanding."""

    def insert(self, record: RefreshTokenRecord) -> bool:
        """Persist a record; an already-present token is a no-op. :returns: True if stored."""

    def delete_by_token(self, token: str) -> bool:
        """Remove the record. :returns: True only for the caller that removed it."""

    def delete_expired_before(self, moment: datetime) -> int:
        """Remove every record with ``expires_at < moment``. :returns: rows removed."""

    def find_all_by_user(self, user_id: int) -> list[RefreshTokenRecord]:
        """List every outstanding record owned by ``user_id``."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    In-memory refresh token store with single-winner deletes.

    .. note::
       Uses a threading lock to simulate atomicity in unit tests.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def exists(self, token: str) -> bool:
        with self._lock:
            return token in self._by_token

    def insert(self, record: RefreshTokenRecord) -> bool:
        with self._lock:
            if record.token in self._by_token:
                return False
            self._by_token[record.token] = record
            return True

    def delete_by_token(self, token: str) -> bool:
        with self._lock:
            return self._by_token.pop(token, None) is not None

    def delete_expired_before(self, moment: datetime) -> int:
        with self._lock:
            stale = [t for t, r in self._by_token.items() if r.expires_at < moment]
            for token in stale:
                del self._by_token[token]
            return len(stale)

    def find_all_by_user(self, user_id: int) -> list[RefreshTokenRecord]:
        with self._lock:
            return [r for r in self._by_token.values() if r.user_id == user_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_token)
