"""
filmauth.services._shared.ports
===============================

Collection of *ports* (hexagonal interfaces) that define the contracts
for token handling and revocation state.

Modules
-------
- :mod:`token_codec`:
    Defines :class:`~.TokenCodec` plus the :class:`~.IdentityClaims` and
    :class:`~.TokenClaims` value objects.

- :mod:`blacklist_store`:
    Defines :class:`~.BlacklistStore` and :class:`~.BlacklistEntry`.

- :mod:`refresh_token_store`:
    Defines :class:`~.RefreshTokenStore` and :class:`~.RefreshTokenRecord`.

- :mod:`user_lookup`:
    Defines :class:`~.UserLookup`, the read access to users.

Design Notes
------------
Concrete adapters (SQLAlchemy repositories, Redis, Flask-JWT-Extended) live
under ``filmauth.repositories`` and ``filmauth.infra``. In-memory doubles sit
next to each port for unit tests.
"""

from __future__ import annotations

from .blacklist_store import BlacklistEntry, BlacklistStore, InMemoryBlacklistStore
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
)
from .token_codec import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    IdentityClaims,
    TokenClaims,
    TokenCodec,
)
from .user_lookup import AuthUser, UserLookup

__all__ = [
    "ACCESS_TOKEN_TYPE",
    "REFRESH_TOKEN_TYPE",
    "AuthUser",
    "BlacklistEntry",
    "BlacklistStore",
    "IdentityClaims",
    "InMemoryBlacklistStore",
    "InMemoryRefreshTokenStore",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "TokenClaims",
    "TokenCodec",
    "UserLookup",
]
