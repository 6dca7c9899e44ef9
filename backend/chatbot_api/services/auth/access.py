"""Access gate: turns a presented access token into an authenticated identity."""

from __future__ import annotations

from chatbot_api.services._shared.base import BaseService
from chatbot_api.services._shared.errors import (
    AuthFailedError,
    TokenInvalidError,
    UnauthorizedError,
)
from chatbot_api.services._shared.ports.token_blacklist import TokenBlacklist
from chatbot_api.services._shared.ports.token_codec import TokenCodec
from chatbot_api.services.auth.dto import UserOut


class AccessGate(BaseService):
    """
    Framework-agnostic request authentication.

    Checks run in a fixed order: presence, blacklist, signature and expiry,
    then a fresh identity lookup so that deactivation takes effect on the
    next request rather than at token expiry.
    """

    def __init__(self, *, codec: TokenCodec, blacklist: TokenBlacklist) -> None:
        super().__init__()
        self.codec = codec
        self.blacklist = blacklist

    def authenticate(self, token: str | None) -> UserOut:
        """
        Resolve ``token`` to an active identity.

        :param token: Raw access token, or ``None`` when none was presented.
        :returns: Identity snapshot.
        :raises AuthFailedError: No token, identity gone or deactivated.
        :raises TokenInvalidError: Token blacklisted or unverifiable.
        :raises TokenExpiredError: Token past its expiry.
        """
        if not token:
            raise AuthFailedError("Authentication required")
        if self.blacklist.is_blacklisted(token):
            raise TokenInvalidError("Token has been revoked")
        claims = self.codec.verify_access(token)

        with self.ro_uow() as uow:
            user = uow.users.get(claims.identity_id)
            if user is None or not user.is_active:
                raise AuthFailedError("User not found or inactive")
            return UserOut.from_model(user)

    @staticmethod
    def ensure_admin(user: UserOut | None) -> UserOut:
        """
        :raises AuthFailedError: No authenticated identity.
        :raises UnauthorizedError: Identity is not an admin.
        """
        if user is None:
            raise AuthFailedError("Authentication required")
        if not user.is_admin:
            raise UnauthorizedError("Admin access required")
        return user
