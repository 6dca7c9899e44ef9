"""Tests for the per-app auth container and its exit hook."""

from __future__ import annotations

import atexit

import pytest
from flask import Flask

from chatbot_api.core import container as container_module
from chatbot_api.core.config import TestingConfig
from chatbot_api.infra.memory.in_memory_token_blacklist import InMemoryTokenBlacklist


def _app(**overrides) -> Flask:
    app = Flask(__name__)
    app.config.from_object(TestingConfig)
    app.config.update(overrides)
    return app


def test_building_apps_registers_no_extra_exit_hooks(monkeypatch):
    calls = []
    monkeypatch.setattr(atexit, "register", lambda *args, **kwargs: calls.append(args))

    first = container_module.init_app(_app())
    second = container_module.init_app(_app())

    assert calls == []
    assert first is not second
    assert first in container_module._live_containers
    assert second in container_module._live_containers


def test_shutdown_all_stops_every_sweeper():
    containers = [
        container_module.init_app(_app(BLACKLIST_SWEEP_INTERVAL_SECONDS=60)) for _ in range(2)
    ]
    blacklists = [c.blacklist for c in containers]
    assert all(isinstance(b, InMemoryTokenBlacklist) and b.running for b in blacklists)

    container_module.shutdown_all()

    assert not any(b.running for b in blacklists)


def test_unknown_backend_is_rejected():
    with pytest.raises(RuntimeError, match="TOKEN_BLACKLIST_BACKEND"):
        container_module.init_app(_app(TOKEN_BLACKLIST_BACKEND="memcached"))
