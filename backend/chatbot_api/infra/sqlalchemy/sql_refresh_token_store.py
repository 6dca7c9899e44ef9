"""Relational refresh-token store backed by the ``refresh_tokens`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from chatbot_api.models.refresh_token import RefreshToken
from chatbot_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from chatbot_api.services._shared.ports.refresh_token_store import RefreshTokenStore
from chatbot_api.services._shared.ports.token_codec import TokenCodec
from chatbot_api.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Refresh-token store with a conditional delete as the rotation primitive.

    Each call runs in its own read-write Unit of Work. :meth:`redeem` reads
    the row, then issues ``DELETE ... WHERE id = :id``; only the caller whose
    delete reports one affected row gets the identity back. A concurrent
    redeemer sees zero rows and fails with ``TOKEN_INVALID``.

    :param codec: Signs the refresh token strings.
    :param uow_factory: Builds the Unit of Work; injectable for tests.
    """

    def __init__(
        self,
        codec: TokenCodec,
        uow_factory: Callable[[], SQLAlchemyUnitOfWork] = SQLAlchemyUnitOfWork,
    ) -> None:
        self.codec = codec
        self.uow_factory = uow_factory

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def issue(self, identity_id: int) -> str:
        token = self.codec.issue_refresh(identity_id)
        with self.uow_factory() as uow:
            uow.refresh_tokens.add(
                RefreshToken(
                    user_id=identity_id,
                    token=token,
                    expires_at=self._now() + self.codec.refresh_ttl,
                )
            )
        return token

    def redeem(self, token: str) -> int:
        expired = False
        with self.uow_factory() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            if row is None:
                raise TokenInvalidError("Invalid refresh token")
            row_id, identity_id = row.id, row.user_id
            if row.is_expired(self._now()):
                uow.refresh_tokens.delete_by_id(row_id)
                expired = True
            elif uow.refresh_tokens.delete_by_id(row_id) != 1:
                log.warning("refresh.redeem_race_lost", extra={"user_id": identity_id})
                raise TokenInvalidError("Invalid refresh token")
        # Raised after the UoW committed so the expired row stays deleted.
        if expired:
            raise TokenExpiredError("Refresh token expired")
        return identity_id

    def revoke(self, token: str, identity_id: int) -> bool:
        with self.uow_factory() as uow:
            return uow.refresh_tokens.delete_for_user(token, identity_id) > 0

    def revoke_all(self, identity_id: int) -> int:
        with self.uow_factory() as uow:
            return uow.refresh_tokens.delete_all_for_user(identity_id)

    def sweep_expired(self) -> int:
        with self.uow_factory() as uow:
            removed = uow.refresh_tokens.delete_expired(self._now())
        if removed:
            log.info("refresh.sweep", extra={"removed": removed})
        return removed
