"""User repository: identity lookups by email and provider id."""

from __future__ import annotations

from chatbot_api.models.user import User
from chatbot_api.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Never handles tokens or password hashing; the services do.
    """

    model = User

    def _filterable_fields(self):
        return {
            "email": User.email,
            "apple_id": User.apple_id,
            "google_id": User.google_id,
            "role": User.role,
            "is_active": User.is_active,
        }

    def _updatable_fields(self):
        """Fields the auth services may change on an existing identity."""
        return {
            "name",
            "avatar",
            "auth_provider",
            "apple_id",
            "google_id",
            "role",
            "is_active",
        }

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one(email=self.normalize_email(email))

    def exists_by_email(self, email: str) -> bool:
        return self.exists(email=self.normalize_email(email))

    def get_by_apple_id(self, apple_id: str) -> User | None:
        return self.find_one(apple_id=apple_id)

    def get_by_google_id(self, google_id: str) -> User | None:
        return self.find_one(google_id=google_id)
