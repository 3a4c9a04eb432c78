"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from filmauth.repositories.base import BaseRepository, store_errors
from filmauth.repositories.refresh_token import RefreshTokenRepository
from filmauth.repositories.token_blacklist import TokenBlacklistRepository
from filmauth.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "store_errors",
    "RefreshTokenRepository",
    "TokenBlacklistRepository",
    "UserRepository",
]
