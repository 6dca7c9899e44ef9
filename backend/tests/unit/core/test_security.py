from __future__ import annotations

import hashlib

import pytest

from chatbot_api.core.security import PasswordHasher


def test_sha256_is_deterministic_hex():
    hasher = PasswordHasher()
    digest = hasher.hash("hunter2")
    assert digest == hashlib.sha256(b"hunter2").hexdigest()
    assert hasher.hash("hunter2") == digest


def test_empty_password_hashes_to_empty_digest():
    assert PasswordHasher().hash("") == hashlib.sha256(b"").hexdigest()


def test_verify_matches_and_rejects():
    hasher = PasswordHasher()
    digest = hasher.hash("correct horse")
    assert hasher.verify("correct horse", digest) is True
    assert hasher.verify("wrong horse", digest) is False
    assert hasher.verify("correct horse", None) is False
    assert hasher.verify("correct horse", "") is False


def test_werkzeug_scheme_salts_and_still_reads_sha256_rows():
    legacy = PasswordHasher().hash("secret")
    hardened = PasswordHasher("werkzeug")

    first, second = hardened.hash("secret"), hardened.hash("secret")
    assert first != second
    assert hardened.verify("secret", first) is True
    assert hardened.verify("secret", legacy) is True
    assert hardened.verify("other", legacy) is False


def test_unknown_scheme_is_rejected():
    with pytest.raises(ValueError):
        PasswordHasher("md5")
