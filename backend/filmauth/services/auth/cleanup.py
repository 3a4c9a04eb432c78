# filmauth/services/auth/cleanup.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from filmauth.services._shared.base import BaseService
from filmauth.services._shared.ports.blacklist_store import BlacklistStore
from filmauth.services._shared.ports.refresh_token_store import RefreshTokenStore

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CleanupReport:
    """
    Outcome of one purge pass.

    :param ran_at: Cut-off used; only rows expiring strictly before it went.
    :param removed_blacklist: Blacklist entries deleted.
    :param removed_refresh: Refresh tokens deleted.
    """

    ran_at: datetime
    removed_blacklist: int
    removed_refresh: int


class TokenCleanupService(BaseService):
    """
    Purge revocation state that can no longer matter.

    A blacklist entry or refresh token past its ``expires_at`` protects
    nothing: the token it describes fails signature-time expiry checks anyway.
    Passes are idempotent and safe next to live traffic, so missing a run or
    running twice is harmless.
    """

    def __init__(self, *, blacklist: BlacklistStore, refresh_tokens: RefreshTokenStore) -> None:
        self.blacklist = blacklist
        self.refresh_tokens = refresh_tokens

    def purge_expired(self, now: datetime | None = None) -> CleanupReport:
        """
        Delete every entry with ``expires_at < now`` from both stores.

        :param now: Cut-off; defaults to the current UTC time.
        :returns: Counts of removed rows.
        """
        moment = now or self.now_utc()
        with self.rw_uow():
            removed_blacklist = self.blacklist.delete_expired_before(moment)
            removed_refresh = self.refresh_tokens.delete_expired_before(moment)
        log.info(
            "tokens.cleanup",
            extra={"removed_blacklist": removed_blacklist, "removed_refresh": removed_refresh},
        )
        return CleanupReport(
            ran_at=moment,
            removed_blacklist=removed_blacklist,
            removed_refresh=removed_refresh,
        )
