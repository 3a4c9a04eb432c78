from filmauth.models.tokens import RefreshToken, TokenBlacklist
from filmauth.models.user import Role, User

__all__ = [
    "RefreshToken",
    "Role",
    "TokenBlacklist",
    "User",
]
