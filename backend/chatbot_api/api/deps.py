"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from chatbot_api.core.container import get_container
from chatbot_api.services._shared.errors import ServiceError
from chatbot_api.services.auth.access import AccessGate
from chatbot_api.services.auth.dto import UserOut

F = TypeVar("F", bound=Callable[..., Any])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def success(data: Any = None, *, message: str | None = None, status: int = 200) -> Response:
    """Wrap ``data`` in the success envelope ``{"success": true, "data": ...}``."""

    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return json_response(body, status=status)


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def json_body() -> dict[str, Any]:
    """Return the request JSON object, or an empty dict for anything else."""

    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def extract_access_token() -> str | None:
    """
    Return the presented access token.

    The ``Authorization: Bearer`` header wins over the ``accessToken`` cookie.
    """

    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return request.cookies.get(ACCESS_COOKIE) or None


def access_gate() -> AccessGate:
    return get_container().access_gate()


def current_user() -> UserOut | None:
    """Identity resolved for this request by one of the auth decorators."""

    return getattr(g, "current_user", None)


def _authenticate() -> UserOut:
    token = extract_access_token()
    user = access_gate().authenticate(token)
    g.current_user = user
    g.access_token = token
    return user


def require_auth(func: F) -> F:
    """Reject the request unless it carries a valid, non-revoked access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        _authenticate()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def optional_auth(func: F) -> F:
    """
    Attach the identity when a usable token is present, never fail.

    Any authentication failure leaves ``g.current_user`` set to ``None``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.current_user = None
        g.access_token = None
        try:
            _authenticate()
        except ServiceError:
            g.current_user = None
            g.access_token = None
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_admin(func: F) -> F:
    """Like :func:`require_auth`, additionally requiring the admin role."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        AccessGate.ensure_admin(_authenticate())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
