"""CORS policy for the API surface."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from chatbot_api.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str]:
    """Split a comma-separated ``CORS_ORIGINS`` value into clean entries."""
    return [o.strip() for o in (raw or "").split(",") if o.strip()]


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` from ``CORS_ORIGINS``.

    Session cookies only travel cross-origin when credentials are allowed,
    which browsers refuse for a ``*`` origin. A blank or ``"*"`` value
    therefore disables credential support; bearer-header clients (the mobile
    app) are unaffected either way.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    wildcard = len(origins) == 0 or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if wildcard else origins}},
        supports_credentials=not wildcard,
        allow_headers=["Authorization", "Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
