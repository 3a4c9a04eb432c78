"""
Unit tests for RedisBlacklistStore using fakeredis.

Flows covered:
- insert + exists (idempotent, expired no-op)
- delete_by_token
- delete_expired_before (strict cut-off)
- RedisError surfaces as StoreUnavailable
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from filmauth.infra.redis import RedisBlacklistStore
from filmauth.services._shared.errors import StoreUnavailable
from filmauth.services._shared.ports.blacklist_store import BlacklistEntry
from redis.exceptions import ConnectionError as RedisConnectionError


def _now() -> datetime:
    """Return a timezone-aware UTC "now"."""
    return datetime.now(UTC)


def _entry(token: str, *, now: datetime, seconds: int) -> BlacklistEntry:
    return BlacklistEntry(token=token, blacklisted_at=now, expires_at=now + timedelta(seconds=seconds))


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisBlacklistStore(fake_redis)


def test_insert_then_exists(store):
    now = _now()
    assert store.exists("tok-1") is False
    assert store.insert(_entry("tok-1", now=now, seconds=120)) is True
    assert store.exists("tok-1") is True


def test_insert_is_idempotent(store, fake_redis):
    now = _now()
    assert store.insert(_entry("tok-1", now=now, seconds=120)) is True
    assert store.insert(_entry("tok-1", now=now, seconds=300)) is False
    assert fake_redis.zcard(store.index_key) == 1


def test_marker_ttl_follows_token_expiry(store, fake_redis):
    now = _now()
    store.insert(_entry("tok-1", now=now, seconds=90))
    ttl = fake_redis.ttl(store._k("tok-1"))
    assert 0 < ttl <= 90


def test_token_is_not_stored_in_clear(store, fake_redis):
    store.insert(_entry("very-secret-token", now=_now(), seconds=60))
    assert all(b"very-secret-token" not in key for key in fake_redis.keys("*"))


def test_already_expired_entry_is_a_no_op(store):
    now = _now()
    assert store.insert(_entry("tok-old", now=now, seconds=0)) is False
    assert store.insert(_entry("tok-older", now=now, seconds=-30)) is False
    assert store.exists("tok-old") is False


def test_delete_by_token(store):
    store.insert(_entry("tok-1", now=_now(), seconds=60))
    assert store.delete_by_token("tok-1") is True
    assert store.delete_by_token("tok-1") is False
    assert store.exists("tok-1") is False


def test_delete_expired_before_is_strict(store):
    base = datetime(2030, 1, 1, tzinfo=UTC)
    store.insert(BlacklistEntry("early", base - timedelta(hours=1), base - timedelta(seconds=1)))
    store.insert(BlacklistEntry("boundary", base - timedelta(hours=1), base))
    store.insert(BlacklistEntry("late", base - timedelta(hours=1), base + timedelta(hours=1)))

    assert store.delete_expired_before(base) == 1
    assert store.exists("early") is False
    assert store.exists("boundary") is True
    assert store.exists("late") is True
    # Second pass finds nothing new
    assert store.delete_expired_before(base) == 0


def test_redis_failure_is_store_unavailable(fake_redis, monkeypatch):
    store = RedisBlacklistStore(fake_redis)

    def _boom(*_args, **_kwargs):
        raise RedisConnectionError("down")

    monkeypatch.setattr(fake_redis, "exists", _boom)
    with pytest.raises(StoreUnavailable):
        store.exists("tok-1")
