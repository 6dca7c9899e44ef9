"""Auth cookie helpers mirroring the tokens returned in JSON bodies."""

from __future__ import annotations

from flask import Response, current_app

from chatbot_api.api.deps import ACCESS_COOKIE, REFRESH_COOKIE
from chatbot_api.core.container import get_container
from chatbot_api.services.auth.dto import TokenPairOut


def _cookie_flags() -> dict[str, object]:
    production = str(current_app.config.get("APP_ENV", "")).lower() == "production"
    return {
        "httponly": True,
        "path": "/",
        "secure": production,
        "samesite": "Strict" if production else "Lax",
    }


def set_auth_cookies(response: Response, tokens: TokenPairOut) -> Response:
    """Attach ``accessToken`` / ``refreshToken`` cookies with their token TTLs."""
    codec = get_container().codec
    flags = _cookie_flags()
    response.set_cookie(
        ACCESS_COOKIE,
        tokens.access_token,
        max_age=int(codec.access_ttl.total_seconds()),
        **flags,  # type: ignore[arg-type]
    )
    response.set_cookie(
        REFRESH_COOKIE,
        tokens.refresh_token,
        max_age=int(codec.refresh_ttl.total_seconds()),
        **flags,  # type: ignore[arg-type]
    )
    return response


def clear_auth_cookies(response: Response) -> Response:
    flags = _cookie_flags()
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name,
            path="/",
            secure=bool(flags["secure"]),
            httponly=True,
            samesite=str(flags["samesite"]),
        )
    return response
