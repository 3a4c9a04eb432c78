"""
Unit of Work contract shared by the session manager and account services.

Implementations must honour two rules the token lifecycle depends on:

* **Nesting joins.** Entering a read-write scope while another is open on
  the same session joins it. Only the outermost scope commits, so a password
  change and the ``revoke_all`` it triggers land or fail together.
* **Read-only scopes never write.** ``validate`` and profile reads run in a
  scope that rejects flushes and refuses ``commit()``; leaving it must not
  discard an enclosing writer's pending work.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType


class UnitOfWork(ABC):
    """Transactional boundary exposing ``users``, ``refresh_tokens`` and ``blacklist``."""

    @abstractmethod
    def __enter__(self) -> UnitOfWork:
        """Open (or join) the scope."""

    @abstractmethod
    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Commit on clean exit of the outermost scope, roll back on error.

        Exceptions are never suppressed.
        """

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
