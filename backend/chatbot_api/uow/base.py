"""
Unit of Work contract shared by the auth services.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chatbot_api.repositories import (
        PreferencesRepository,
        RefreshTokenRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    Transactional boundary for one auth use-case.

    Exposes the identity, preference and refresh-token repositories bound
    to a single session, so a registration or an account deletion lands
    atomically.
    """

    users: UserRepository
    preferences: PreferencesRepository
    refresh_tokens: RefreshTokenRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
