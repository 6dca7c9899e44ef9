"""Repository for persisted refresh tokens."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from chatbot_api.models.refresh_token import RefreshToken
from chatbot_api.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Row-level access to ``refresh_tokens``.

    ``delete_by_id`` reports the database rowcount; the store relies on it to
    decide which of two concurrent redemptions won.
    """

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def delete_by_id(self, row_id: int) -> int:
        """Conditionally delete one row.

        :param row_id: Primary key.
        :type row_id: int
        :returns: ``1`` when this call removed the row, ``0`` if it was gone.
        :rtype: int
        """
        return self.delete_where(RefreshToken.id == row_id)

    def delete_for_user(self, token: str, user_id: int) -> int:
        return self.delete_where(RefreshToken.token == token, RefreshToken.user_id == user_id)

    def delete_all_for_user(self, user_id: int) -> int:
        return self.delete_where(RefreshToken.user_id == user_id)

    def delete_expired(self, now: datetime) -> int:
        return self.delete_where(RefreshToken.expires_at <= now)
