"""Process-local access-token blacklist with a background sweeper."""

from __future__ import annotations

import logging
import threading
import time

from chatbot_api.services._shared.ports.token_blacklist import TokenBlacklist

log = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryTokenBlacklist(TokenBlacklist):
    """
    Thread-safe ``token -> expires_at_ms`` registry.

    State is per process and lost on restart; deployments with several
    workers should use :class:`~chatbot_api.infra.redis.redis_token_blacklist.RedisTokenBlacklist`.

    :param sweep_interval: Seconds between automatic sweeps once
        :meth:`start` is called. ``0`` disables the sweeper.
    :type sweep_interval: float
    """

    def __init__(self, sweep_interval: float = 3600) -> None:
        self.sweep_interval = sweep_interval
        self._entries: dict[str, int] = {}
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    # -------------------------- registry ----------------------------

    def add(self, token: str, expires_at_ms: int) -> None:
        with self._lock:
            self._entries[token] = int(expires_at_ms)

    def is_blacklisted(self, token: str) -> bool:
        # Expired entries still count until swept; the token itself is
        # rejected by verification at that point anyway.
        with self._lock:
            return token in self._entries

    def remove(self, token: str) -> None:
        with self._lock:
            self._entries.pop(token, None)

    def sweep(self) -> int:
        """Drop entries whose expiry has passed. :returns: Entries removed."""
        cutoff = now_ms()
        with self._lock:
            expired = [t for t, exp in self._entries.items() if exp < cutoff]
            for t in expired:
                del self._entries[t]
        if expired:
            log.info("blacklist.sweep", extra={"removed": len(expired)})
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------- sweeper -----------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the daemon sweeper thread (no-op when disabled or running)."""
        if self.sweep_interval <= 0 or self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="token-blacklist-sweeper", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the sweeper to exit and wait for it."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.sweep_interval):
            try:
                self.sweep()
            except Exception:  # pragma: no cover - keep the sweeper alive
                log.exception("blacklist.sweep_failed")
