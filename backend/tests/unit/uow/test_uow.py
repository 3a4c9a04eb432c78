"""
Unit tests for the SQLAlchemy units of work, using factories.
"""

from __future__ import annotations

import pytest
from filmauth.models import User
from filmauth.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from sqlalchemy import func, select

from tests.factories.user import UserFactory
from tests.helpers.auth import login_pair


def _users(db) -> int:
    return db.session.execute(select(func.count()).select_from(User)).scalar_one()


class TestSQLAlchemyUnitOfWorkWriter:
    def test_commits_on_success(self, app, db, session):
        initial = _users(db)

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())

        assert _users(db) == initial + 1

    def test_rolls_back_on_exception(self, app, db, session):
        initial = _users(db)

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")

        assert _users(db) == initial

    def test_inner_scope_joins_outer_transaction(self, app, db, session):
        """
        GIVEN an outer writer UoW
        WHEN an inner scope succeeds but the outer one then fails
        THEN nothing from either scope is persisted.
        """
        initial = _users(db)

        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as outer:
            outer.users.add(UserFactory.build())
            with SQLAlchemyUnitOfWork() as inner:
                inner.users.add(UserFactory.build())
            assert session.info["uow_depth"] == 1
            raise RuntimeError("outer failed")

        assert _users(db) == initial
        assert session.info["uow_depth"] == 0


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, app, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError, match="cannot flush pending"):
            uow.session.add(UserFactory.build())
            uow.session.flush()

    def test_allows_reads(self, app, db, session):
        UserFactory(email="reader@example.com")
        session.commit()

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.exists_by_email("reader@example.com")

    def test_disallows_commit(self, app, db, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError):
            uow.commit()

    def test_keeps_enclosing_writer_work(self, app, db, session):
        """A read-only scope nested in a writer must not discard its pending rows."""
        initial = _users(db)

        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            uow.users.flush()
            with SQLAlchemyReadOnlyUnitOfWork():
                pass

        assert _users(db) == initial + 1

    def test_works_through_the_scoped_session_proxy(self, app, db, session):
        assert hasattr(db.session, "registry")

        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.find_by_email("nobody@example.com") is None

    def test_validate_runs_against_the_app_session(self, app, db, sessions, user):
        pair = login_pair(sessions, user)

        principal = sessions.validate(pair.access_token)

        assert principal.id == user.id
        assert principal.email == user.email
