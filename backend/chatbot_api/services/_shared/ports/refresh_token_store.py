from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from chatbot_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from chatbot_api.services._shared.ports.token_codec import TokenCodec


class RefreshTokenStore(Protocol):
    """
    Stateful store for refresh tokens.

    Rows are single-use: :meth:`redeem` removes the row it succeeds on, and
    of two concurrent redemptions of one token exactly one succeeds.
    """

    def issue(self, identity_id: int) -> str:
        """Sign a refresh token for ``identity_id`` and persist it."""

    def redeem(self, token: str) -> int:
        """
        Consume ``token`` and return the owning identity id.

        :raises TokenInvalidError: Unknown token, or lost a concurrent race.
        :raises TokenExpiredError: Row past expiry (the row is deleted).
        """

    def revoke(self, token: str, identity_id: int) -> bool:
        """Delete ``token`` if it belongs to ``identity_id``. :returns: True if removed."""

    def revoke_all(self, identity_id: int) -> int:
        """Delete every token of ``identity_id``. :returns: Rows removed."""

    def sweep_expired(self) -> int:
        """Delete rows past expiry. :returns: Rows removed."""


@dataclass(frozen=True, slots=True)
class _Entry:
    identity_id: int
    expires_at: datetime


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local refresh store.

    A single lock serialises every operation, which makes the
    check-and-delete in :meth:`redeem` atomic.
    """

    def __init__(self, codec: TokenCodec) -> None:
        self.codec = codec
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def issue(self, identity_id: int) -> str:
        token = self.codec.issue_refresh(identity_id)
        entry = _Entry(identity_id=identity_id, expires_at=self._now() + self.codec.refresh_ttl)
        with self._lock:
            self._entries[token] = entry
        return token

    def redeem(self, token: str) -> int:
        with self._lock:
            entry = self._entries.pop(token, None)
        if entry is None:
            raise TokenInvalidError("Invalid refresh token")
        if entry.expires_at <= self._now():
            raise TokenExpiredError("Refresh token expired")
        return entry.identity_id

    def revoke(self, token: str, identity_id: int) -> bool:
        with self._lock:
            entry = self._entries.get(token)
            if entry is None or entry.identity_id != identity_id:
                return False
            del self._entries[token]
            return True

    def revoke_all(self, identity_id: int) -> int:
        with self._lock:
            doomed = [t for t, e in self._entries.items() if e.identity_id == identity_id]
            for t in doomed:
                del self._entries[t]
            return len(doomed)

    def sweep_expired(self) -> int:
        now = self._now()
        with self._lock:
            doomed = [t for t, e in self._entries.items() if e.expires_at <= now]
            for t in doomed:
                del self._entries[t]
            return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._entries
