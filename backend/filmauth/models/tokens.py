"""Revocation state: outstanding refresh tokens and blacklisted tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from filmauth.core.extensions import db

from .base import PKMixin, ReprMixin, UTCDateTime


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    A refresh token that has been handed out and not yet consumed.

    Rows are single-use: rotation, logout, credential changes and the expiry
    sweep delete them. Deleting the owning user cascades at the database.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now()
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )


class TokenBlacklist(PKMixin, ReprMixin, db.Model):
    """
    A revoked token, kept until the token would have expired on its own.

    The unique constraint on ``token`` is the idempotency guard for
    concurrent inserts of the same token.
    """

    __tablename__ = "token_blacklist"

    token: Mapped[str] = mapped_column(Text, nullable=False)
    blacklisted_at: Mapped[datetime] = mapped_column(
        UTCDateTime(), nullable=False, server_default=func.now()
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        UniqueConstraint("token", name="uq_token_blacklist_token"),
        Index("ix_token_blacklist_expires_at", "expires_at"),
    )
