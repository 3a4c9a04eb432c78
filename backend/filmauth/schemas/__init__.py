from filmauth.schemas.auth import (
    AccountSchema,
    LoginSchema,
    PasswordChangeSchema,
    PrincipalSchema,
    RegisterSchema,
    RevocationResultSchema,
    TokenPairSchema,
)

__all__ = [
    "AccountSchema",
    "LoginSchema",
    "PasswordChangeSchema",
    "PrincipalSchema",
    "RegisterSchema",
    "RevocationResultSchema",
    "TokenPairSchema",
]
