# filmauth/services/_shared/base.py
from __future__ import annotations

from datetime import UTC, datetime

from filmauth.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Provide a single clock (``now_utc``) so tests can freeze time.
    * Keep services thin, orchestration-only, no web leakage.

    Notes
    -----
    - Services must never commit the global session directly; always use a
      Unit of Work.
    """

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance (joins an enclosing one if active).
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork()

    # -------------------------- Clock ---------------------------------------

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
