"""
SQLAlchemy implementation of UnitOfWork for Flask.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import Session

from filmauth.core.extensions import db
from filmauth.repositories import (
    RefreshTokenRepository,
    TokenBlacklistRepository,
    UserRepository,
)
from filmauth.uow.base import UnitOfWork

_DEPTH_KEY = "uow_depth"


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.blacklist = TokenBlacklistRepository(session=self.session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW using the Flask-scoped session.

    Scopes nest: an inner ``with`` joins the outermost one, only flushes on
    success, and lets errors propagate. The outermost scope alone commits or
    rolls back, so a password update and the revocation it triggers land
    together or not at all.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._outermost = False

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        depth = self.session.info.get(_DEPTH_KEY, 0)
        self._outermost = depth == 0
        self.session.info[_DEPTH_KEY] = depth + 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.session.info[_DEPTH_KEY] = self.session.info.get(_DEPTH_KEY, 1) - 1
        if not self._outermost:
            if exc_type is None:
                self.session.flush()
            return
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def _reject_writes(session: Session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError("Read-only UnitOfWork cannot flush pending ORM changes.")


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope used by token validation and profile reads.

    Pending ORM writes abort the flush. On exit the transaction is rolled
    back only if this scope opened it, so nesting inside a read-write UoW
    leaves the outer work intact.
    """

    def __init__(self) -> None:
        super().__init__(session=db.session)
        self._owns_txn = False
        self._guarded: Session | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # ``db.session`` is a scoped proxy: transaction state and event
        # targets live on the concrete Session behind it.
        registry = getattr(self.session, "registry", None)
        concrete = registry() if registry is not None else self.session
        self._owns_txn = not concrete.in_transaction()
        self._guarded = concrete
        if not event.contains(self._guarded, "before_flush", _reject_writes):
            event.listen(self._guarded, "before_flush", _reject_writes)
        else:
            self._guarded = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_txn:
                self.session.rollback()
        finally:
            if self._guarded is not None:
                event.remove(self._guarded, "before_flush", _reject_writes)
                self._guarded = None

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
