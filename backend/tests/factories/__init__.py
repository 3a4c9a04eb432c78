"""factory_boy base classes writing into the per-test session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Slot filled by the autouse ``_factories_session`` fixture."""

    current = None

    @classmethod
    def set(cls, session) -> None:
        cls.current = session

    @classmethod
    def get(cls):
        if cls.current is None:
            raise RuntimeError("No factory session bound; request the 'session' fixture.")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        # Resolved at build time, after the fixture has swapped sessions.
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
