"""
chatbot_api.services._shared.ports
==================================

*Ports* (hexagonal interfaces) for the session-token infrastructure.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec` signs and verifies access/refresh tokens, with the
    typed :class:`~.AccessClaims` / :class:`~.RefreshClaims` payloads.

- :mod:`token_blacklist`:
    :class:`~.TokenBlacklist` registry of revoked access tokens.

- :mod:`refresh_token_store`:
    :class:`~.RefreshTokenStore` single-use refresh token persistence, plus
    the lock-based :class:`~.InMemoryRefreshTokenStore`.

Concrete adapters (PyJWT, Redis, SQLAlchemy, in-process) live under
``chatbot_api.infra``.
"""

from __future__ import annotations

from .refresh_token_store import InMemoryRefreshTokenStore, RefreshTokenStore
from .token_blacklist import TokenBlacklist
from .token_codec import AccessClaims, RefreshClaims, TokenCodec, parse_ttl

__all__ = [
    "AccessClaims",
    "InMemoryRefreshTokenStore",
    "RefreshClaims",
    "RefreshTokenStore",
    "TokenBlacklist",
    "TokenCodec",
    "parse_ttl",
]
