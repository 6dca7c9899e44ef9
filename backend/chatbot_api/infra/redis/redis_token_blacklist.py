import hashlib
import time
from typing import cast

import redis  # type: ignore[import-untyped]

from chatbot_api.services._shared.ports.token_blacklist import TokenBlacklist


class RedisTokenBlacklist(TokenBlacklist):
    """
    Shared blacklist for **access tokens**, visible to every worker.

    Keys are ``<prefix><sha256(token)>`` with a millisecond TTL equal to the
    token's remaining lifetime, so Redis expires entries on its own.
    """

    def __init__(self, r: redis.Redis, prefix: str = "blacklist:at:"):
        self.r = r
        self.prefix = prefix

    def _k(self, token: str) -> str:
        return self.prefix + hashlib.sha256(token.encode("utf-8")).hexdigest()

    def add(self, token: str, expires_at_ms: int) -> None:
        ttl_ms = max(1, int(expires_at_ms) - int(time.time() * 1000))
        self.r.set(self._k(token), str(int(expires_at_ms)), px=ttl_ms)

    def is_blacklisted(self, token: str) -> bool:
        return cast(int, self.r.exists(self._k(token))) == 1

    def remove(self, token: str) -> None:
        self.r.delete(self._k(token))

    def sweep(self) -> int:
        # Redis expires keys itself.
        return 0

    def _keys(self) -> list[bytes]:
        return list(self.r.scan_iter(match=self.prefix + "*"))

    def clear(self) -> None:
        keys = self._keys()
        if keys:
            self.r.delete(*keys)

    def size(self) -> int:
        return len(self._keys())
