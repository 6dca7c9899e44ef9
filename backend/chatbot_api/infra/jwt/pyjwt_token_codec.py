# chatbot_api/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, cast
from uuid import uuid4

import jwt

from chatbot_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from chatbot_api.services._shared.ports.token_codec import (
    AccessClaims,
    RefreshClaims,
    TokenCodec,
    parse_ttl,
)

log = logging.getLogger(__name__)

ALGORITHM = "HS256"
REFRESH_TYPE = "refresh"


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    HS256 adapter built on PyJWT.

    Access and refresh tokens are signed with independent secrets, so a
    leaked access secret cannot mint refresh tokens and vice versa.

    :param access_secret: Key for access tokens.
    :param refresh_secret: Key for refresh tokens.
    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    :param issuer: ``iss`` stamped on and required from every token.
    :param audience: ``aud`` stamped on and required from every token.
    """

    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = field(default_factory=lambda: timedelta(hours=1))
    refresh_ttl: timedelta = field(default_factory=lambda: timedelta(days=7))
    issuer: str = "chatbot-api"
    audience: str = "chatbot-app"

    @classmethod
    def from_config(cls, config: Any) -> JWTTokenCodec:
        """Build a codec from a Flask config mapping."""
        return cls(
            access_secret=config["JWT_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_ttl=parse_ttl(config.get("JWT_EXPIRES_IN", "1h")),
            refresh_ttl=parse_ttl(config.get("REFRESH_TOKEN_EXPIRES_IN", "7d")),
            issuer=config.get("JWT_ISSUER", "chatbot-api"),
            audience=config.get("JWT_AUDIENCE", "chatbot-app"),
        )

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def _registered(self, ttl: timedelta) -> dict[str, Any]:
        now = datetime.now(UTC)
        return {
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": uuid4().hex,
        }

    def issue_access(self, claims: AccessClaims) -> str:
        payload = {
            "sub": str(claims.identity_id),
            "email": claims.email,
            "role": claims.role,
            **self._registered(self.access_ttl),
        }
        return jwt.encode(payload, self.access_secret, algorithm=ALGORITHM)

    def issue_refresh(self, identity_id: int) -> str:
        payload = {
            "sub": str(identity_id),
            "type": REFRESH_TYPE,
            **self._registered(self.refresh_ttl),
        }
        return jwt.encode(payload, self.refresh_secret, algorithm=ALGORITHM)

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def _verify(self, token: str, secret: str) -> dict[str, Any]:
        if not token or not isinstance(token, str):
            raise TokenInvalidError("Invalid token")
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": ["exp", "iat", "sub", "iss", "aud"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            log.debug("token.rejected reason=%s", type(exc).__name__)
            raise TokenInvalidError("Invalid token") from exc
        return cast(dict[str, Any], payload)

    @staticmethod
    def _identity(payload: dict[str, Any]) -> int:
        subject = payload.get("sub")
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        raise TokenInvalidError("Invalid token subject")

    @staticmethod
    def _expiry(payload: dict[str, Any]) -> datetime:
        return datetime.fromtimestamp(int(payload["exp"]), tz=UTC)

    def verify_access(self, token: str) -> AccessClaims:
        payload = self._verify(token, self.access_secret)
        if payload.get("type") == REFRESH_TYPE:
            raise TokenInvalidError("Invalid token type")
        role = payload.get("role")
        email = payload.get("email")
        if not isinstance(role, str) or not (email is None or isinstance(email, str)):
            raise TokenInvalidError("Invalid token claims")
        return AccessClaims(
            identity_id=self._identity(payload),
            email=email,
            role=role,
            expires_at=self._expiry(payload),
            jti=payload.get("jti"),
        )

    def verify_refresh(self, token: str) -> RefreshClaims:
        payload = self._verify(token, self.refresh_secret)
        if payload.get("type") != REFRESH_TYPE:
            raise TokenInvalidError("Invalid token type")
        return RefreshClaims(
            identity_id=self._identity(payload),
            expires_at=self._expiry(payload),
            jti=str(payload.get("jti", "")),
        )

    def decode_unsafe(self, token: str) -> dict[str, Any] | None:
        """Read claims without any verification. Only for bookkeeping such as ``exp``."""
        try:
            return cast(
                dict[str, Any],
                jwt.decode(token, options={"verify_signature": False}),
            )
        except jwt.PyJWTError:
            return None
