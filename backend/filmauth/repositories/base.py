"""Shared SQLAlchemy repository plumbing for users and token state.

Repositories stay persistence-only: no use cases, no commit or rollback.
Services own the transaction through a unit of work. Uniqueness races on
token ids are settled by the database (``ON CONFLICT DO NOTHING``), never by
in-process locks.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from filmauth.core.extensions import db
from filmauth.services._shared.errors import StoreUnavailable, violates

E = TypeVar("E")  # SQLAlchemy mapped entity type


@contextmanager
def store_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy failures as :class:`StoreUnavailable`.

    Callers must fail closed on these: an unreachable database says nothing
    about whether a token is valid.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreUnavailable() from exc


class BaseRepository(Generic[E]):
    """Persistence for one mapped class; subclasses set ``model``."""

    #: SQLAlchemy mapped model (must be set by subclasses)
    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session: Session | None = session

    @property
    def session(self) -> Session:
        """Return the injected session, else the Flask-scoped one."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    # ------------------------------ CRUD ------------------------------------

    def add(self, instance: E) -> E:
        """Stage a new entity in the session (no flush)."""
        self.session.add(instance)
        return instance

    def get(self, entity_id: Any) -> E | None:
        """Fetch an entity by primary key.

        :param entity_id: Primary key value.
        :returns: Entity or ``None`` when absent.
        """
        stmt = select(self.model).where(self.model.id == entity_id)  # type: ignore[attr-defined]
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def delete(self, instance: E) -> None:
        """Mark an entity for deletion."""
        self.session.delete(instance)

    def flush(self) -> None:
        """Flush pending changes so constraint violations surface early."""
        self.session.flush()

    # ------------------------------ Idempotent insert -----------------------

    def _insert_ignore(
        self,
        values: Mapping[str, Any],
        *,
        conflict_column: str,
        constraint: str,
    ) -> bool:
        """Insert a row unless ``conflict_column`` already holds the value.

        Uses ``INSERT ... ON CONFLICT DO NOTHING`` on SQLite and PostgreSQL.
        Other dialects run a plain insert inside a SAVEPOINT and swallow only
        the violation of ``constraint``.

        :param values: Column values for the new row.
        :param conflict_column: Unique column acting as the idempotency key.
        :param constraint: Name of the unique constraint on that column.
        :returns: ``True`` when a row was created, ``False`` when it existed.
        :rtype: bool
        """
        table = self.model.__table__  # type: ignore[attr-defined]
        dialect = self.session.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            insert_fn = sqlite_insert if dialect == "sqlite" else pg_insert
            stmt = (
                insert_fn(table)
                .values(**values)
                .on_conflict_do_nothing(index_elements=[conflict_column])
            )
            result = self.session.execute(stmt)
            return bool(result.rowcount)

        try:
            with self.session.begin_nested():
                self.session.execute(insert(table).values(**values))
        except IntegrityError as exc:
            if violates(exc, constraint):
                return False
            raise
        return True
