"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from chatbot_api.repositories.base import BaseRepository
from chatbot_api.repositories.preferences import PreferencesRepository
from chatbot_api.repositories.refresh_token import RefreshTokenRepository
from chatbot_api.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PreferencesRepository",
    "RefreshTokenRepository",
    "UserRepository",
]
