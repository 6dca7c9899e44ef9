"""Repository for :class:`UserPreferences`."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from chatbot_api.models.preferences import DEFAULT_LANGUAGE, UserPreferences
from chatbot_api.repositories.base import BaseRepository


class PreferencesRepository(BaseRepository[UserPreferences]):
    model = UserPreferences

    def _updatable_fields(self):
        return {"notifications", "language", "save_chat_history"}

    def get_for_user(self, user_id: int) -> UserPreferences | None:
        stmt = select(UserPreferences).where(UserPreferences.user_id == user_id)
        return cast(UserPreferences | None, self.session.execute(stmt).scalars().first())

    def create_default(self, user_id: int) -> UserPreferences:
        """Insert the default preference row for ``user_id``.

        :param user_id: Owning user id.
        :type user_id: int
        :returns: The flushed row.
        :rtype: UserPreferences
        """
        return self.add(
            UserPreferences(
                user_id=user_id,
                notifications=True,
                language=DEFAULT_LANGUAGE,
                save_chat_history=True,
            )
        )

    def delete_for_user(self, user_id: int) -> int:
        return self.delete_where(UserPreferences.user_id == user_id)
