from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, create_refresh_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import ExpiredSignatureError, InvalidSignatureError, PyJWTError

from filmauth.models.user import Role
from filmauth.services._shared.errors import (
    InvalidIdFormat,
    InvalidSignature,
    InvalidSigningKey,
    TokenExpired,
    TokenMalformed,
)
from filmauth.services._shared.ports.token_codec import (
    ACCESS_TOKEN_TYPE,
    REFRESH_TOKEN_TYPE,
    IdentityClaims,
    TokenClaims,
    TokenCodec,
)

MIN_HMAC_KEY_BYTES = 32


def validate_signing_key(secret: str | bytes | None, algorithm: str) -> None:
    """
    Check that the configured key can sign tokens with ``algorithm``.

    Called once while building the app; a failure aborts startup.

    :param secret: ``JWT_SECRET_KEY`` value.
    :param algorithm: ``JWT_ALGORITHM`` value (HMAC family only).
    :raises InvalidSigningKey: On a missing, short or unusable key.
    """
    if not algorithm or not algorithm.upper().startswith("HS"):
        raise InvalidSigningKey(f"Unsupported JWT algorithm {algorithm!r}; expected HS256/384/512.")
    if not secret:
        raise InvalidSigningKey("Invalid JWT secret key: JWT_SECRET_KEY is not set.")
    raw = secret.encode("utf-8") if isinstance(secret, str) else secret
    if len(raw) < MIN_HMAC_KEY_BYTES:
        raise InvalidSigningKey(
            f"Invalid JWT secret key: need at least {MIN_HMAC_KEY_BYTES} bytes, got {len(raw)}."
        )


def _parse_user_id(raw: Any) -> int:
    # bool is an int subclass; "true" must not become user 1
    if isinstance(raw, bool):
        raise InvalidIdFormat("Invalid user ID format in token")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.isascii() and raw.isdigit():
        return int(raw)
    raise InvalidIdFormat("Invalid user ID format in token")


def _timestamp(payload: dict[str, Any], claim: str) -> datetime:
    value = payload.get(claim)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TokenMalformed(f"Missing or invalid '{claim}' claim.")
    return datetime.fromtimestamp(value, tz=UTC)


@dataclass(slots=True)
class FlaskJWTTokenCodec(TokenCodec):
    """
    Adapter for Flask-JWT-Extended.

    Tokens carry ``sub`` (email), ``id``, ``email`` and ``role`` next to the
    library's own ``iat``/``exp``/``jti``/``type`` claims.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def encode(
        self,
        identity: IdentityClaims,
        *,
        ttl: timedelta,
        token_type: str = ACCESS_TOKEN_TYPE,
        fresh: bool = False,
    ) -> str:
        claims = {
            "id": identity.id,
            "email": identity.email,
            "role": identity.role.value,
        }
        if token_type == ACCESS_TOKEN_TYPE:
            token = create_access_token(
                identity=identity.email,
                additional_claims=claims,
                expires_delta=ttl,
                fresh=fresh,
            )
        elif token_type == REFRESH_TOKEN_TYPE:
            token = create_refresh_token(
                identity=identity.email,
                additional_claims=claims,
                expires_delta=ttl,
            )
        else:
            raise ValueError(f"Unknown token type {token_type!r}")
        return cast(str, token)

    def decode(self, token: str, *, allow_expired: bool = False) -> TokenClaims:
        """
        Verify and read ``token``.

        :param token: Encoded JWT.
        :param allow_expired: Skip only the ``exp`` check (signature is still verified).
        :raises TokenExpired: Signature fine, ``exp`` in the past.
        :raises InvalidSignature: Signed with another key.
        :raises TokenMalformed: Not a JWT, or required claims missing.
        :raises InvalidIdFormat: ``id`` claim is not an integer.
        """
        try:
            payload = cast(dict[str, Any], decode_token(token, allow_expired=allow_expired))
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except (PyJWTError, JWTExtendedException) as exc:
            raise TokenMalformed() from exc

        if "id" not in payload:
            raise TokenMalformed("Missing 'id' claim.")
        user_id = _parse_user_id(payload["id"])

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise TokenMalformed("Missing 'sub' claim.")

        try:
            role = Role(payload.get("role"))
        except ValueError as exc:
            raise TokenMalformed("Missing or unknown 'role' claim.") from exc

        return TokenClaims(
            identity=IdentityClaims(id=user_id, email=subject, role=role),
            token_type=str(payload.get("type", ACCESS_TOKEN_TYPE)),
            issued_at=_timestamp(payload, "iat"),
            expires_at=_timestamp(payload, "exp"),
            jti=payload.get("jti"),
        )
