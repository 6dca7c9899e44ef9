"""Port for signing and verifying bearer tokens."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol

# Milliseconds per TTL unit.
TTL_UNIT_MS: dict[str, int] = {
    "s": 1_000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}

_TTL_RE = re.compile(r"^\s*(\d+)\s*([a-zA-Z]*)\s*$")


def parse_ttl(value: str | int) -> timedelta:
    """
    Convert a duration such as ``"15m"`` or ``"7d"`` into a ``timedelta``.

    Units are ``s``, ``m``, ``h`` and ``d``. A missing or unknown unit is
    read as seconds. Bare integers are seconds as well.

    :param value: Duration string or integer seconds.
    :type value: str | int
    :returns: Parsed duration.
    :rtype: timedelta
    :raises ValueError: If ``value`` has no leading integer.
    """
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _TTL_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = int(match.group(1)), match.group(2).lower()
    return timedelta(milliseconds=amount * TTL_UNIT_MS.get(unit, 1_000))


@dataclass(frozen=True, slots=True)
class AccessClaims:
    """
    Payload of a verified access token.

    :param identity_id: User id (``sub``).
    :param email: Email at issuance, ``None`` for accounts without one.
    :param role: Role at issuance.
    :param expires_at: Absolute expiry (UTC); unset when issuing.
    :param jti: Unique token id; unset when issuing.
    """

    identity_id: int
    email: str | None
    role: str
    expires_at: datetime | None = None
    jti: str | None = None


@dataclass(frozen=True, slots=True)
class RefreshClaims:
    """
    Payload of a verified refresh token.

    :param identity_id: User id (``sub``).
    :param expires_at: Absolute expiry (UTC).
    :param jti: Unique token id.
    """

    identity_id: int
    expires_at: datetime
    jti: str


class TokenCodec(Protocol):
    """Issue, verify and inspect access and refresh tokens.

    ``verify_*`` raise ``TokenExpiredError`` when the only problem is the
    expiry, and ``TokenInvalidError`` for anything else.
    """

    access_ttl: timedelta
    refresh_ttl: timedelta

    def issue_access(self, claims: AccessClaims) -> str: ...

    def issue_refresh(self, identity_id: int) -> str: ...

    def verify_access(self, token: str) -> AccessClaims: ...

    def verify_refresh(self, token: str) -> RefreshClaims: ...

    def decode_unsafe(self, token: str) -> dict[str, Any] | None: ...
