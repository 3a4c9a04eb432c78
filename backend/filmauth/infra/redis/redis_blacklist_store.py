from __future__ import annotations

import hashlib
import math
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from filmauth.services._shared.errors import StoreUnavailable
from filmauth.services._shared.ports.blacklist_store import BlacklistEntry, BlacklistStore


@contextmanager
def _redis_errors() -> Iterator[None]:
    try:
        yield
    except RedisError as exc:
        raise StoreUnavailable() from exc


class RedisBlacklistStore(BlacklistStore):
    """
    Blacklist backed by Redis, shared by every serving instance.

    Layout
    ------
    - ``bl:{sha256(token)}``: marker written with ``SET NX EX``; the TTL ends
      when the token would have expired anyway.
    - ``bl:index``: sorted set of marker keys scored by expiry timestamp,
      used by :meth:`delete_expired_before`.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "bl") -> None:
        self.r = r
        self.prefix = prefix
        self.index_key = f"{prefix}:index"

    def _k(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self.prefix}:{digest}"

    def exists(self, token: str) -> bool:
        with _redis_errors():
            return cast(int, self.r.exists(self._k(token))) == 1

    def insert(self, entry: BlacklistEntry) -> bool:
        ttl = math.ceil((entry.expires_at - entry.blacklisted_at).total_seconds())
        if ttl <= 0:
            return False
        key = self._k(entry.token)
        with _redis_errors():
            created = self.r.set(key, entry.blacklisted_at.isoformat(), nx=True, ex=ttl)
            if not created:
                return False
            self.r.zadd(self.index_key, {key: entry.expires_at.timestamp()})
        return True

    def delete_by_token(self, token: str) -> bool:
        key = self._k(token)
        with _redis_errors():
            pipe = self.r.pipeline()
            pipe.delete(key)
            pipe.zrem(self.index_key, key)
            deleted, _ = pipe.execute()
        return int(deleted) > 0

    def delete_expired_before(self, moment: datetime) -> int:
        # "(" makes the upper bound exclusive: expires_at < moment
        upper = f"({moment.timestamp()}"
        with _redis_errors():
            keys = self.r.zrangebyscore(self.index_key, "-inf", upper)
            if not keys:
                return 0
            pipe = self.r.pipeline()
            pipe.delete(*keys)
            pipe.zrem(self.index_key, *keys)
            _, removed = pipe.execute()
        return int(removed)
