from __future__ import annotations

import threading
from datetime import timedelta

import pytest
from freezegun import freeze_time

from chatbot_api.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from chatbot_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from chatbot_api.services._shared.ports import InMemoryRefreshTokenStore


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    codec = JWTTokenCodec(
        access_secret="a", refresh_secret="r", refresh_ttl=timedelta(minutes=5)
    )
    return InMemoryRefreshTokenStore(codec)


def test_redeem_is_single_use(store):
    token = store.issue(7)
    assert token in store
    assert store.redeem(token) == 7
    assert token not in store
    with pytest.raises(TokenInvalidError):
        store.redeem(token)


def test_unknown_token_is_invalid(store):
    with pytest.raises(TokenInvalidError):
        store.redeem("never-issued")


def test_expired_entry_is_removed_and_reported(store):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = store.issue(7)
        frozen.tick(timedelta(minutes=6))
        with pytest.raises(TokenExpiredError):
            store.redeem(token)
    assert token not in store


def test_revoke_is_scoped_to_owner(store):
    token = store.issue(7)
    assert store.revoke(token, identity_id=8) is False
    assert store.revoke(token, identity_id=7) is True
    assert store.revoke(token, identity_id=7) is False


def test_revoke_all_and_sweep(store):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        store.issue(1)
        store.issue(1)
        store.issue(2)
        assert store.revoke_all(1) == 2
        assert len(store) == 1

        frozen.tick(timedelta(minutes=10))
        assert store.sweep_expired() == 1
        assert len(store) == 0


def test_concurrent_redeem_has_exactly_one_winner(store):
    token = store.issue(7)
    workers = 8
    barrier = threading.Barrier(workers)
    outcomes: list[object] = []
    outcomes_lock = threading.Lock()

    def attempt() -> None:
        barrier.wait()
        try:
            result: object = store.redeem(token)
        except TokenInvalidError as exc:
            result = exc
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert outcomes.count(7) == 1
    assert sum(isinstance(o, TokenInvalidError) for o in outcomes) == workers - 1
