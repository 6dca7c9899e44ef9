"""Persisted refresh tokens (one row per live session)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatbot_api.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc, utcnow


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Server-side record of an issued refresh token.

    The signed token string itself is the lookup key. A row is single-use:
    redeeming deletes it, so a second redemption finds nothing.

    Fields
    ------
    user_id : int
        Owning user.
    token : str
        The signed refresh token, verbatim.
    expires_at : datetime
        Absolute expiry (UTC). Expired rows are removed lazily on use and by
        the periodic sweep.
    created_at : datetime
        Issuance time.
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user = relationship("User", back_populates="refresh_tokens")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
        Index("ix_refresh_tokens_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return ``True`` once ``now`` has reached ``expires_at``."""
        return as_utc(self.expires_at) <= (now or utcnow())
