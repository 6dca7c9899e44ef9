"""Unit tests for :class:`JWTTokenCodec` (PyJWT, HS256)."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from chatbot_api.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from chatbot_api.services._shared.errors import TokenExpiredError, TokenInvalidError
from chatbot_api.services._shared.ports.token_codec import AccessClaims, parse_ttl


@pytest.fixture()
def codec() -> JWTTokenCodec:
    return JWTTokenCodec(
        access_secret="access-secret",
        refresh_secret="refresh-secret",
        access_ttl=timedelta(hours=1),
        refresh_ttl=timedelta(days=7),
    )


def _claims(identity_id: int = 42) -> AccessClaims:
    return AccessClaims(identity_id=identity_id, email="alice@example.com", role="user")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1h", timedelta(hours=1)),
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("30s", timedelta(seconds=30)),
        ("45", timedelta(seconds=45)),
        ("10w", timedelta(seconds=10)),
        (90, timedelta(seconds=90)),
    ],
)
def test_parse_ttl(raw, expected):
    assert parse_ttl(raw) == expected


def test_parse_ttl_rejects_garbage():
    with pytest.raises(ValueError):
        parse_ttl("soon")


def test_access_roundtrip_carries_claims(codec):
    token = codec.issue_access(_claims())
    claims = codec.verify_access(token)
    assert claims.identity_id == 42
    assert claims.email == "alice@example.com"
    assert claims.role == "user"
    assert claims.jti

    payload = jwt.decode(token, options={"verify_signature": False})
    assert payload["sub"] == "42"
    assert payload["iss"] == "chatbot-api"
    assert payload["aud"] == "chatbot-app"
    assert payload["exp"] - payload["iat"] == 3600


def test_refresh_roundtrip_and_type_marker(codec):
    token = codec.issue_refresh(42)
    claims = codec.verify_refresh(token)
    assert claims.identity_id == 42
    assert jwt.decode(token, options={"verify_signature": False})["type"] == "refresh"


def test_tokens_issued_in_same_second_differ(codec):
    with freeze_time("2026-01-01 12:00:00"):
        assert codec.issue_refresh(1) != codec.issue_refresh(1)
        assert codec.issue_access(_claims(1)) != codec.issue_access(_claims(1))


def test_expired_access_token_is_token_expired(codec):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue_access(_claims())
        frozen.tick(timedelta(hours=1, seconds=1))
        with pytest.raises(TokenExpiredError):
            codec.verify_access(token)


def test_expired_refresh_token_is_token_expired(codec):
    with freeze_time("2026-01-01 12:00:00") as frozen:
        token = codec.issue_refresh(1)
        frozen.tick(timedelta(days=8))
        with pytest.raises(TokenExpiredError):
            codec.verify_refresh(token)


def test_wrong_secret_is_token_invalid(codec):
    forged = JWTTokenCodec(access_secret="x", refresh_secret="other-secret").issue_refresh(42)
    with pytest.raises(TokenInvalidError):
        codec.verify_refresh(forged)


def test_secrets_are_not_interchangeable(codec):
    with pytest.raises(TokenInvalidError):
        codec.verify_refresh(codec.issue_access(_claims()))
    with pytest.raises(TokenInvalidError):
        codec.verify_access(codec.issue_refresh(42))


def test_refresh_without_type_marker_is_invalid(codec):
    token = jwt.encode(
        {"sub": "1", "iss": "chatbot-api", "aud": "chatbot-app", "iat": 0, "exp": 4102444800},
        "refresh-secret",
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        codec.verify_refresh(token)


def test_wrong_audience_and_issuer_are_invalid(codec):
    other = JWTTokenCodec(
        access_secret="access-secret",
        refresh_secret="refresh-secret",
        issuer="someone-else",
        audience="another-app",
    )
    with pytest.raises(TokenInvalidError):
        codec.verify_access(other.issue_access(_claims()))


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
def test_malformed_tokens_are_invalid(codec, garbage):
    with pytest.raises(TokenInvalidError):
        codec.verify_access(garbage)


def test_decode_unsafe_reads_exp_without_verifying(codec):
    token = codec.issue_access(_claims())
    payload = codec.decode_unsafe(token)
    assert payload is not None
    assert isinstance(payload["exp"], int)
    assert codec.decode_unsafe("garbage") is None


def test_from_config_reads_ttls():
    codec = JWTTokenCodec.from_config(
        {
            "JWT_SECRET": "a",
            "REFRESH_TOKEN_SECRET": "b",
            "JWT_EXPIRES_IN": "15m",
            "REFRESH_TOKEN_EXPIRES_IN": "30d",
        }
    )
    assert codec.access_ttl == timedelta(minutes=15)
    assert codec.refresh_ttl == timedelta(days=30)
    assert codec.issuer == "chatbot-api"
