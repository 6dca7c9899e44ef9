"""Per-user application preferences."""

from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from chatbot_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

DEFAULT_LANGUAGE = "en"


class UserPreferences(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One row per user, created alongside the account with default values.

    Fields
    ------
    user_id : int
        Owning user (unique).
    notifications : bool
        Push notifications enabled. Defaults to ``True``.
    language : str
        UI language code. Defaults to ``"en"``.
    save_chat_history : bool
        Whether conversations are persisted. Defaults to ``True``.
    """

    __tablename__ = "user_preferences"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    notifications: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    language: Mapped[str] = mapped_column(String(8), nullable=False, default=DEFAULT_LANGUAGE)
    save_chat_history: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    user = relationship("User", back_populates="preferences")

    __table_args__ = (UniqueConstraint("user_id", name="uq_user_preferences_user_id"),)
