"""Tiny helpers shared across test modules."""

from __future__ import annotations

from typing import Any


def envelope_error(response) -> dict[str, Any]:
    """Assert the failure envelope and return its ``error`` object."""
    body = response.get_json()
    assert body["success"] is False, body
    return body["error"]


def envelope_data(response) -> Any:
    """Assert the success envelope and return its ``data`` member."""
    body = response.get_json()
    assert body["success"] is True, body
    return body["data"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def cookie_header(response, name: str) -> str | None:
    """Return the raw ``Set-Cookie`` header that sets ``name``, if any."""
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith(f"{name}="):
            return header
    return None
