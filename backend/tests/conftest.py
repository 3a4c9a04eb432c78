"""Shared fixtures: one app per run, one rolled-back transaction per test.

Services commit exactly as in production. Inside a test that commit only
releases the session's SAVEPOINT; the outer transaction is rolled back at
teardown so nothing leaks between cases.
"""

from __future__ import annotations

import os

import pytest
from filmauth.core.config import TestingConfig
from filmauth.core.extensions import db as flask_db
from filmauth.factory import create_app
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from tests.helpers.auth import login_pair


def _hand_transactions_to_sqlalchemy(engine) -> None:
    """Stop pysqlite from managing BEGIN itself so SAVEPOINTs nest correctly."""

    @event.listens_for(engine, "connect")
    def _autocommit_driver(dbapi_connection, _record):  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _explicit_begin(conn):  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture(scope="session")
def db(app):
    """Schema created once for the whole run on the in-memory database.

    No app context outlives this setup: each test pushes its own.
    """
    with app.app_context():
        _hand_transactions_to_sqlalchemy(flask_db.engine)
        flask_db.create_all()
    yield flask_db
    with app.app_context():
        flask_db.session.remove()
        flask_db.drop_all()


@pytest.fixture(scope="session")
def connection(app, db):
    with app.app_context():
        conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def app_ctx(app):
    """Fresh app context per test so ``g`` never carries over between tests."""
    with app.app_context() as ctx:
        yield ctx


@pytest.fixture()
def session(app_ctx, db, connection):
    """Scoped session joined to a per-test outer transaction.

    ``db.session`` is swapped for the duration of the test; repositories
    and units of work resolve it lazily and therefore pick it up.
    """
    outer = connection.begin()
    connection.begin_nested()
    scoped = scoped_session(sessionmaker(bind=connection, autoflush=False))

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            connection.begin_nested()

    previous = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = previous
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- Auth helpers -------------------------------------------------------------
@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def sessions(app):
    """The app's :class:`SessionManager` (SQL stores)."""
    from filmauth.core.auth import get_session_manager

    return get_session_manager()


@pytest.fixture()
def user(session):
    """Persist a ``USER`` account whose password is ``Passw0rd!``."""
    from tests.factories.user import UserFactory

    u = UserFactory()
    session.commit()
    return u


@pytest.fixture()
def admin(session):
    """Persist an ``ADMIN`` account whose password is ``Passw0rd!``."""
    from tests.factories.user import AdminFactory

    u = AdminFactory()
    session.commit()
    return u


@pytest.fixture()
def pair(sessions, user):
    """Token pair obtained through a real login of :func:`user`."""
    return login_pair(sessions, user)


@pytest.fixture()
def auth_header(pair):
    """Authorization header for authenticated requests."""
    return {"Authorization": f"Bearer {pair.access_token}"}
