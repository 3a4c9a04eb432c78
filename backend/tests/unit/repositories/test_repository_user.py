"""Unit tests for UserRepository (user lookup port)."""

import pytest
from filmauth.repositories import UserRepository

from tests.factories.user import UserFactory


class TestUserRepository:
    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_find_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com", username="alice")
        session.commit()

        fetched = repo.find_by_email("  Alice@Example.COM ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_find_by_id_missing_returns_none(self, repo, session):
        assert repo.find_by_id(999_999) is None

    def test_exists_flags(self, repo, session):
        UserFactory(email="bob@example.com", username="bobby")
        session.commit()

        assert repo.exists_by_email("bob@example.com")
        assert repo.exists_by_username("bobby")
        assert not repo.exists_by_email("nobody@example.com")

    def test_update_password_rehashes(self, repo, session):
        u = UserFactory(password="oldpass123")
        session.commit()
        old_hash = u.password_hash

        repo.update_password(u, "newpass123")
        session.commit()

        refreshed = repo.find_by_id(u.id)
        assert refreshed.password_hash != old_hash
        assert refreshed.verify_password("newpass123")
        assert not refreshed.verify_password("oldpass123")
