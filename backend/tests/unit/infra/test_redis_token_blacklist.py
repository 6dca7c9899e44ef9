"""Unit tests for RedisTokenBlacklist using fakeredis."""

from __future__ import annotations

import hashlib

import fakeredis
import pytest

from chatbot_api.infra.memory.in_memory_token_blacklist import now_ms
from chatbot_api.infra.redis.redis_token_blacklist import RedisTokenBlacklist


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def blacklist(fake_redis):
    return RedisTokenBlacklist(r=fake_redis)


def test_add_stores_hashed_key_with_ttl(blacklist, fake_redis):
    blacklist.add("tok", now_ms() + 60_000)
    key = "blacklist:at:" + hashlib.sha256(b"tok").hexdigest()
    assert fake_redis.exists(key) == 1
    assert 0 < fake_redis.pttl(key) <= 60_000
    assert blacklist.is_blacklisted("tok") is True
    assert blacklist.is_blacklisted("other") is False


def test_remove_clear_and_size(blacklist):
    blacklist.add("a", now_ms() + 60_000)
    blacklist.add("b", now_ms() + 60_000)
    assert blacklist.size() == 2
    blacklist.remove("a")
    assert blacklist.is_blacklisted("a") is False
    blacklist.clear()
    assert blacklist.size() == 0


def test_sweep_is_left_to_redis(blacklist):
    blacklist.add("a", now_ms() + 60_000)
    assert blacklist.sweep() == 0
    assert blacklist.size() == 1


def test_clear_ignores_foreign_keys(blacklist, fake_redis):
    fake_redis.set("unrelated", "1")
    blacklist.add("a", now_ms() + 60_000)
    blacklist.clear()
    assert fake_redis.exists("unrelated") == 1
