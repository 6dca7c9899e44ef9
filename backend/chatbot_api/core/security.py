"""Password hashing used by local (email + password) accounts."""

from __future__ import annotations

import hashlib
import hmac
import re

from werkzeug.security import check_password_hash, generate_password_hash

SHA256_SCHEME = "sha256"
WERKZEUG_SCHEME = "werkzeug"

_SHA256_HEX = re.compile(r"^[0-9a-f]{64}$")


class PasswordHasher:
    """
    Hash and verify account passwords.

    The default ``sha256`` scheme produces the unsalted hex digest that
    existing account rows were written with. ``werkzeug`` switches new hashes
    to a salted KDF; :meth:`verify` recognises both formats, so rows written
    under either scheme keep verifying after a switch.

    :param scheme: ``"sha256"`` or ``"werkzeug"``.
    :type scheme: str
    :raises ValueError: If ``scheme`` is unknown.
    """

    def __init__(self, scheme: str = SHA256_SCHEME) -> None:
        scheme = (scheme or SHA256_SCHEME).strip().lower()
        if scheme not in (SHA256_SCHEME, WERKZEUG_SCHEME):
            raise ValueError(f"Unknown password hash scheme: {scheme!r}")
        self.scheme = scheme

    @staticmethod
    def sha256_hex(plaintext: str) -> str:
        """Return the lowercase hex SHA-256 of ``plaintext`` (UTF-8)."""
        return hashlib.sha256(plaintext.encode("utf-8")).hexdigest()

    def hash(self, plaintext: str) -> str:
        """
        Hash ``plaintext`` with the configured scheme.

        :param plaintext: Raw password. The empty string is accepted.
        :type plaintext: str
        :returns: Digest suitable for ``users.password_hash``.
        :rtype: str
        """
        if self.scheme == WERKZEUG_SCHEME:
            return generate_password_hash(plaintext)
        return self.sha256_hex(plaintext)

    def verify(self, plaintext: str, digest: str | None) -> bool:
        """
        Check ``plaintext`` against a stored digest in constant time.

        :param plaintext: Candidate password.
        :type plaintext: str
        :param digest: Stored digest, possibly ``None`` for OAuth accounts.
        :type digest: str | None
        :returns: ``True`` on match.
        :rtype: bool
        """
        if not digest:
            return False
        if _SHA256_HEX.match(digest):
            return hmac.compare_digest(self.sha256_hex(plaintext), digest)
        return bool(check_password_hash(digest, plaintext))
