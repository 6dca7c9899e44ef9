from __future__ import annotations

from typing import Protocol


class TokenBlacklist(Protocol):
    """
    Registry of revoked **access tokens**, keyed by the token string.

    An entry lives until ``expires_at_ms`` (epoch milliseconds), after which
    the token would fail verification anyway and the entry may be swept.
    Presence means "reject"; absence says nothing about validity.
    """

    def add(self, token: str, expires_at_ms: int) -> None: ...
    def is_blacklisted(self, token: str) -> bool: ...
    def remove(self, token: str) -> None: ...
    def sweep(self) -> int: ...
    def clear(self) -> None: ...
    def size(self) -> int: ...
