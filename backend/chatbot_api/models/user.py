"""User model: the account identity behind every session."""

from __future__ import annotations

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from chatbot_api.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class AuthProvider(str, Enum):
    """Origin of the account's credentials."""

    LOCAL = "local"
    APPLE = "apple"
    GOOGLE = "google"


class Role(str, Enum):
    """Authorization role."""

    USER = "user"
    ADMIN = "admin"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Account identity.

    Fields
    ------
    email : str | None
        Login email, stored lowercased and trimmed. Unique when present;
        Apple sign-in may withhold it.
    password_hash : str | None
        Digest from :class:`chatbot_api.core.security.PasswordHasher`.
        Mandatory for ``local`` accounts, absent for OAuth-only accounts.
    name : str
        Display name.
    avatar : str | None
        Avatar URL.
    auth_provider : AuthProvider
        Provider that last established the account.
    apple_id / google_id : str | None
        Provider subject identifiers, unique when present.
    role : Role
        ``user`` or ``admin``.
    is_active : bool
        Inactive accounts cannot log in, refresh or pass the middleware.
    """

    __tablename__ = "users"

    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    auth_provider: Mapped[AuthProvider] = mapped_column(
        SAEnum(
            AuthProvider,
            name="auth_provider",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=AuthProvider.LOCAL,
    )
    apple_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    google_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[Role] = mapped_column(
        SAEnum(
            Role,
            name="user_role",
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=Role.USER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    preferences = relationship(
        "UserPreferences",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    refresh_tokens = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    # NULLs never collide under UNIQUE, which gives "unique when present".
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("apple_id", name="uq_users_apple_id"),
        UniqueConstraint("google_id", name="uq_users_google_id"),
        CheckConstraint(
            "auth_provider <> 'local' OR password_hash IS NOT NULL",
            name="local_requires_password",
        ),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def check_credentials_invariant(self) -> None:
        """
        Refuse a local account without a password hash.

        :raises ValueError: If ``auth_provider`` is ``local`` and no hash is set.
        """
        if self.auth_provider in (AuthProvider.LOCAL, None) and not self.password_hash:
            raise ValueError("Local accounts require a password.")

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str | None) -> str | None:
        """
        Normalize email to lowercase without surrounding whitespace.

        :param key: Field name (``email``).
        :type key: str
        :param value: Email to normalize, or ``None``.
        :type value: str | None
        :returns: Normalized email or ``None``.
        :rtype: str | None
        :raises ValueError: If a non-empty value lacks an ``@``.
        """
        if value is None:
            return None
        v = value.strip().lower()
        if not v:
            return None
        if "@" not in v:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Name is required.")
        return value.strip()
