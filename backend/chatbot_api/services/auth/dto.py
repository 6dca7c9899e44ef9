# chatbot_api/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chatbot_api.models.base import as_utc
from chatbot_api.models.user import User

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for local account registration.

    :param email: Email address (normalized by the service).
    :type email: str
    :param password: Raw password.
    :type password: str
    :param name: Display name.
    :type name: str
    """

    email: str
    password: str
    name: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param refresh_token: Refresh token to revoke.
    :type refresh_token: str
    :param identity_id: Authenticated caller; the revoke is scoped to it.
    :type identity_id: int
    :param access_token: Access token to blacklist, when known.
    :type access_token: str | None
    """

    refresh_token: str
    identity_id: int
    access_token: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class UserOut:
    """
    Detached snapshot of a :class:`~chatbot_api.models.user.User`.

    Built inside the Unit of Work so callers never touch expired ORM state.
    """

    id: int
    email: str | None
    name: str
    avatar: str | None
    role: str
    auth_provider: str
    is_active: bool
    created_at: datetime | None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_model(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar=user.avatar,
            role=getattr(user.role, "value", user.role),
            auth_provider=getattr(user.auth_provider, "value", user.auth_provider),
            is_active=bool(user.is_active),
            created_at=as_utc(user.created_at) if user.created_at else None,
        )


@dataclass(frozen=True, slots=True)
class AuthResultOut:
    """
    Identity plus a freshly issued token pair.

    :param user: Public identity snapshot.
    :type user: UserOut
    :param tokens: Access/refresh pair.
    :type tokens: TokenPairOut
    """

    user: UserOut
    tokens: TokenPairOut
