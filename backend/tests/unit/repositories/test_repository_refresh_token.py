"""Unit tests for RefreshTokenRepository (SQL refresh token store)."""

from datetime import UTC, datetime, timedelta

import pytest
from filmauth.repositories import RefreshTokenRepository
from filmauth.services._shared.ports.refresh_token_store import RefreshTokenRecord

from tests.factories.user import UserFactory

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


def _record(token: str, user_id: int, *, expires_in: timedelta = timedelta(days=1)) -> RefreshTokenRecord:
    return RefreshTokenRecord(token=token, user_id=user_id, created_at=NOW, expires_at=NOW + expires_in)


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self):
        return RefreshTokenRepository()

    @pytest.fixture()
    def owner(self, session):
        u = UserFactory()
        session.commit()
        return u

    def test_insert_exists_and_duplicate(self, repo, owner, session):
        assert repo.insert(_record("rt-1", owner.id)) is True
        assert repo.insert(_record("rt-1", owner.id)) is False
        session.commit()

        assert repo.exists("rt-1") is True
        assert repo.exists("rt-2") is False

    def test_find_all_by_user_only_returns_owned_rows(self, repo, owner, session):
        other = UserFactory()
        session.commit()
        repo.insert(_record("rt-1", owner.id))
        repo.insert(_record("rt-2", owner.id))
        repo.insert(_record("rt-3", other.id))
        session.commit()

        records = repo.find_all_by_user(owner.id)

        assert [r.token for r in records] == ["rt-1", "rt-2"]
        assert all(r.user_id == owner.id for r in records)
        assert records[0].expires_at == NOW + timedelta(days=1)

    def test_delete_by_token_is_single_use(self, repo, owner, session):
        repo.insert(_record("rt-1", owner.id))
        session.commit()

        assert repo.delete_by_token("rt-1") is True
        assert repo.delete_by_token("rt-1") is False
        assert repo.find_all_by_user(owner.id) == []

    def test_delete_expired_before_keeps_unexpired(self, repo, owner, session):
        repo.insert(_record("gone", owner.id, expires_in=-timedelta(minutes=1)))
        repo.insert(_record("boundary", owner.id, expires_in=timedelta(0)))
        repo.insert(_record("kept", owner.id))
        session.commit()

        assert repo.delete_expired_before(NOW) == 1
        assert sorted(r.token for r in repo.find_all_by_user(owner.id)) == ["boundary", "kept"]
