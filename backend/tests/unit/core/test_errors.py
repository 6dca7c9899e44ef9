from __future__ import annotations

import pytest
from flask import Flask
from werkzeug.exceptions import TooManyRequests

from chatbot_api.core import errors
from chatbot_api.core.errors import APIError, error_body, redact, status_for
from chatbot_api.services._shared.errors import (
    DuplicateEntryError,
    ErrorCode,
    TokenExpiredError,
    UnauthorizedError,
)


def test_status_map():
    assert status_for(ErrorCode.VALIDATION_ERROR) == 400
    assert status_for(ErrorCode.AUTH_FAILED) == 401
    assert status_for(ErrorCode.TOKEN_EXPIRED) == 401
    assert status_for(ErrorCode.TOKEN_INVALID) == 401
    assert status_for(ErrorCode.UNAUTHORIZED) == 403
    assert status_for(ErrorCode.NOT_FOUND) == 404
    assert status_for(ErrorCode.DUPLICATE_ENTRY) == 409
    assert status_for(ErrorCode.RATE_LIMIT_EXCEEDED) == 429
    assert status_for(ErrorCode.SERVER_ERROR) == 500


def test_error_body_omits_empty_details():
    assert error_body("AUTH_FAILED", "nope") == {
        "success": False,
        "error": {"code": "AUTH_FAILED", "message": "nope"},
    }
    body = error_body("VALIDATION_ERROR", "bad", {"email": ["required"]})
    assert body["error"]["details"] == {"email": ["required"]}


def test_api_error_from_service_error():
    err = APIError.from_service_error(TokenExpiredError())
    assert err.status_code == 401
    assert err.code == "TOKEN_EXPIRED"

    dup = APIError.from_service_error(DuplicateEntryError("User", "email"))
    assert dup.status_code == 409
    assert dup.to_dict()["error"]["message"] == "User with this email already exists"

    forbidden = APIError.from_service_error(UnauthorizedError("Account is deactivated"))
    assert forbidden.status_code == 403


def test_redact_masks_secrets_recursively():
    payload = {
        "email": "a@b.c",
        "password": "hunter2",
        "nested": {"refreshToken": "abc", "items": [{"newPassword": "x"}]},
    }
    masked = redact(payload)
    assert masked["email"] == "a@b.c"
    assert masked["password"] == "[REDACTED]"
    assert masked["nested"]["refreshToken"] == "[REDACTED]"
    assert masked["nested"]["items"][0]["newPassword"] == "[REDACTED]"
    assert redact(None) is None


# ---------------------------- handlers ------------------------------------ #
@pytest.fixture()
def tiny_app():
    app = Flask(__name__)
    errors.init_app(app)

    @app.get("/throttled")
    def throttled():
        raise TooManyRequests(retry_after=30)

    @app.get("/forbidden")
    def forbidden():
        raise UnauthorizedError("Admin access required")

    @app.get("/boom")
    def boom():
        raise RuntimeError("database password is hunter2")

    return app


def test_rate_limit_maps_to_envelope(tiny_app):
    response = tiny_app.test_client().get("/throttled")
    assert response.status_code == 429
    assert response.headers["Retry-After"] == "30"
    assert response.get_json()["error"] == {
        "code": "RATE_LIMIT_EXCEEDED",
        "message": "Too many requests, please try again later",
    }


def test_service_error_maps_to_status(tiny_app):
    response = tiny_app.test_client().get("/forbidden")
    assert response.status_code == 403
    assert response.get_json() == {
        "success": False,
        "error": {"code": "UNAUTHORIZED", "message": "Admin access required"},
    }


def test_unexpected_error_hides_internals(tiny_app):
    response = tiny_app.test_client().get("/boom")
    assert response.status_code == 500
    error = response.get_json()["error"]
    assert error == {"code": "SERVER_ERROR", "message": "Internal server error"}
    assert "hunter2" not in response.get_data(as_text=True)


def test_unexpected_error_details_in_debug(tiny_app):
    tiny_app.debug = True
    response = tiny_app.test_client().get("/boom")
    assert response.get_json()["error"]["details"]["type"] == "RuntimeError"
