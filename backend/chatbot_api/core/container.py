"""Build the token infrastructure once per app and hand it to the services."""

from __future__ import annotations

import atexit
import logging
import weakref
from dataclasses import dataclass
from typing import cast

from flask import Flask, current_app

from chatbot_api.core.security import PasswordHasher
from chatbot_api.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from chatbot_api.infra.memory.in_memory_token_blacklist import InMemoryTokenBlacklist
from chatbot_api.infra.redis.redis_token_blacklist import RedisTokenBlacklist
from chatbot_api.infra.sqlalchemy.sql_refresh_token_store import SQLAlchemyRefreshTokenStore
from chatbot_api.services._shared.ports import (
    InMemoryRefreshTokenStore,
    RefreshTokenStore,
    TokenBlacklist,
    TokenCodec,
)
from chatbot_api.services.auth.access import AccessGate
from chatbot_api.services.auth.service import AuthService
from chatbot_api.services.oauth.service import OAuthService

log = logging.getLogger(__name__)

EXTENSION_KEY = "auth_container"

# Containers of every live app; one exit hook stops them all.
_live_containers: weakref.WeakSet[AuthContainer] = weakref.WeakSet()


@dataclass(slots=True, weakref_slot=True, eq=False)
class AuthContainer:
    """
    Process-wide auth collaborators.

    Services are cheap and built per request from these; the blacklist and
    the stores are shared, so every request sees the same revocations.
    """

    codec: TokenCodec
    blacklist: TokenBlacklist
    refresh_store: RefreshTokenStore
    hasher: PasswordHasher

    def auth_service(self) -> AuthService:
        return AuthService(
            codec=self.codec,
            refresh_store=self.refresh_store,
            blacklist=self.blacklist,
            hasher=self.hasher,
        )

    def oauth_service(self) -> OAuthService:
        return OAuthService(auth=self.auth_service())

    def access_gate(self) -> AccessGate:
        return AccessGate(codec=self.codec, blacklist=self.blacklist)

    def shutdown(self) -> None:
        if isinstance(self.blacklist, InMemoryTokenBlacklist):
            self.blacklist.stop()


def _build_blacklist(app: Flask) -> TokenBlacklist:
    backend = str(app.config.get("TOKEN_BLACKLIST_BACKEND", "memory")).lower()
    if backend == "redis":
        from chatbot_api.core.extensions import get_redis

        return RedisTokenBlacklist(get_redis())
    if backend != "memory":
        raise RuntimeError(f"Unknown TOKEN_BLACKLIST_BACKEND: {backend!r}")
    blacklist = InMemoryTokenBlacklist(
        sweep_interval=float(app.config.get("BLACKLIST_SWEEP_INTERVAL_SECONDS", 3600))
    )
    blacklist.start()
    return blacklist


def _build_refresh_store(app: Flask, codec: TokenCodec) -> RefreshTokenStore:
    backend = str(app.config.get("REFRESH_TOKEN_STORE", "sql")).lower()
    if backend == "memory":
        return InMemoryRefreshTokenStore(codec)
    if backend != "sql":
        raise RuntimeError(f"Unknown REFRESH_TOKEN_STORE: {backend!r}")
    return SQLAlchemyRefreshTokenStore(codec)


def init_app(app: Flask) -> AuthContainer:
    """Create the container, register it on ``app`` and stop it at exit."""
    codec = JWTTokenCodec.from_config(app.config)
    container = AuthContainer(
        codec=codec,
        blacklist=_build_blacklist(app),
        refresh_store=_build_refresh_store(app, codec),
        hasher=PasswordHasher(app.config.get("PASSWORD_HASH_SCHEME", "sha256")),
    )
    app.extensions[EXTENSION_KEY] = container
    app.extensions["token_blacklist"] = container.blacklist
    _live_containers.add(container)
    log.debug("auth.container_ready")
    return container


def shutdown_all() -> None:
    """Stop the background work of every container still alive."""
    for container in list(_live_containers):
        container.shutdown()


atexit.register(shutdown_all)


def get_container() -> AuthContainer:
    """Return the container of the current app."""
    try:
        return cast(AuthContainer, current_app.extensions[EXTENSION_KEY])
    except KeyError as exc:
        raise RuntimeError("Auth container is not initialized. Call init_app() first.") from exc
