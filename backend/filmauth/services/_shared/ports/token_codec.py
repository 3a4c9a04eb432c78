from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from filmauth.models.user import Role

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True, slots=True)
class IdentityClaims:
    """
    Identity embedded in every token.

    :ivar id: Numeric user id; must round-trip exactly.
    :ivar email: User email, also used as the JWT subject.
    :ivar role: User role at issuance time.
    """

    id: int
    email: str
    role: Role


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Claims of a successfully decoded token.

    :ivar identity: Who the token was issued to.
    :ivar token_type: ``"access"`` or ``"refresh"``.
    :ivar issued_at: ``iat`` as an aware UTC datetime.
    :ivar expires_at: ``exp`` as an aware UTC datetime.
    :ivar jti: Unique token id, when present.
    """

    identity: IdentityClaims
    token_type: str
    issued_at: datetime
    expires_at: datetime
    jti: str | None = None


class TokenCodec(Protocol):
    """
    Port for minting and reading signed tokens.

    ``decode`` reports failures through :class:`~filmauth.services._shared.errors.TokenError`
    subclasses so callers can tell *expired* from *bad signature* from
    *malformed* apart (for logs) while still treating them all as invalid.
    """

    def encode(
        self,
        identity: IdentityClaims,
        *,
        ttl: timedelta,
        token_type: str = ACCESS_TOKEN_TYPE,
        fresh: bool = False,
    ) -> str: ...

    def decode(self, token: str, *, allow_expired: bool = False) -> TokenClaims: ...
