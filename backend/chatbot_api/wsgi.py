"""WSGI entry point for gunicorn (``chatbot_api.wsgi:app``)."""

from __future__ import annotations

from chatbot_api.factory import create_app

app = create_app()
