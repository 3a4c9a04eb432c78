from .cleanup import CleanupReport, TokenCleanupService
from .dto import LoginIn, Principal, TokenPair, TokenTTLConfig
from .service import SessionManager

__all__ = [
    "CleanupReport",
    "LoginIn",
    "Principal",
    "SessionManager",
    "TokenCleanupService",
    "TokenPair",
    "TokenTTLConfig",
]
