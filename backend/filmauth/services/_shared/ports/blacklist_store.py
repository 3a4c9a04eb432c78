from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class BlacklistEntry:
    """
    A revoked token.

    :ivar token: Full token string as presented by clients.
    :ivar blacklisted_at: When the revocation happened (UTC).
    :ivar expires_at: The token's own expiry; the entry is useless after it.
    """

    token: str
    blacklisted_at: datetime
    expires_at: datetime


class BlacklistStore(Protocol):
    """
    Durable set of revoked tokens, shared by every serving instance.

    Implementations MUST be safe under concurrent calls from request threads
    and the cleanup task. ``insert`` MUST be idempotent.
    """

    def exists(self, token: str) -> bool:
        """Return ``True`` if the token has been revoked."""

    def insert(self, entry: BlacklistEntry) -> bool:
        """
        Record a revocation.

        A token already present, or one whose ``expires_at`` is not after
        ``blacklisted_at``, is a no-op.

        :returns: ``True`` when a new entry was stored.
        """

    def delete_by_token(self, token: str) -> bool:
        """Remove one entry. :returns: True if it existed."""

    def delete_expired_before(self, moment: datetime) -> int:
        """
        Remove every entry with ``expires_at < moment``.

        :returns: Number of entries removed.
        """


class InMemoryBlacklistStore(BlacklistStore):
    """
    Process-local blacklist for unit tests.

    .. note::
       A threading lock emulates the atomicity a unique constraint gives.
    """

    def __init__(self) -> None:
        self._entries: dict[str, BlacklistEntry] = {}
        self._lock = threading.Lock()

    def exists(self, token: str) -> bool:
        with self._lock:
            return token in self._entries

    def insert(self, entry: BlacklistEntry) -> bool:
        if entry.expires_at <= entry.blacklisted_at:
            return False
        with self._lock:
            if entry.token in self._entries:
                return False
            self._entries[entry.token] = entry
            return True

    def delete_by_token(self, token: str) -> bool:
        with self._lock:
            return self._entries.pop(token, None) is not None

    def delete_expired_before(self, moment: datetime) -> int:
        with self._lock:
            stale = [t for t, e in self._entries.items() if e.expires_at < moment]
            for token in stale:
                del self._entries[token]
            return len(stale)

    def get(self, token: str) -> BlacklistEntry | None:
        """Test helper: fetch the stored entry."""
        with self._lock:
            return self._entries.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
