from .dto import AccountOut, PasswordChangeIn, RegisterIn
from .service import AccountService

__all__ = ["AccountOut", "AccountService", "PasswordChangeIn", "RegisterIn"]
