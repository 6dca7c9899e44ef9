"""Centralized JSON error handling for the API.

Every failure leaves the service as::

    {"success": false, "error": {"code": "...", "message": "...", "details": ...}}

with ``details`` omitted when empty.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, current_app, g, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from chatbot_api.core.logger import ensure_request_id
from chatbot_api.services._shared.errors import ErrorCode, ServiceError

log = logging.getLogger(__name__)

STATUS_BY_CODE: Mapping[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: HTTPStatus.BAD_REQUEST,
    ErrorCode.AUTH_FAILED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    ErrorCode.TOKEN_INVALID: HTTPStatus.UNAUTHORIZED,
    ErrorCode.UNAUTHORIZED: HTTPStatus.FORBIDDEN,
    ErrorCode.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorCode.DUPLICATE_ENTRY: HTTPStatus.CONFLICT,
    ErrorCode.RATE_LIMIT_EXCEEDED: HTTPStatus.TOO_MANY_REQUESTS,
    ErrorCode.SERVER_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}

CODE_BY_STATUS: Mapping[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTH_FAILED,
    403: ErrorCode.UNAUTHORIZED,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.DUPLICATE_ENTRY,
    429: ErrorCode.RATE_LIMIT_EXCEEDED,
}

SENSITIVE_KEYS = frozenset(
    {"password", "newpassword", "currentpassword", "refreshtoken", "accesstoken", "token"}
)


def status_for(code: ErrorCode) -> int:
    """Return the HTTP status bound to an :class:`ErrorCode`."""
    return int(STATUS_BY_CODE.get(code, HTTPStatus.INTERNAL_SERVER_ERROR))


def error_body(code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Build the failure envelope.

    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional structured details.
    :returns: Envelope dictionary.
    :rtype: dict
    """
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def redact(payload: Any) -> Any:
    """Return ``payload`` with password and token values masked, recursively."""
    if isinstance(payload, Mapping):
        return {
            k: "[REDACTED]" if str(k).replace("_", "").lower() in SENSITIVE_KEYS else redact(v)
            for k, v in payload.items()
        }
    if isinstance(payload, list):
        return [redact(item) for item in payload]
    return payload


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier from :class:`ErrorCode`. Defaults to
        ``"VALIDATION_ERROR"``.
    details : Any, optional
        Optional structured payload (e.g., validation messages) included in
        the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = ErrorCode.VALIDATION_ERROR.value,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details

    @classmethod
    def from_service_error(cls, exc: ServiceError) -> APIError:
        """Translate a :class:`ServiceError` using :data:`STATUS_BY_CODE`."""
        return cls(
            exc.message,
            status_code=status_for(exc.code),
            code=exc.code.value,
            details=exc.details,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize into the failure envelope."""
        return error_body(self.code, self.message, self.details)


# Domain conveniences
class BadRequest(APIError):
    """400 for requests missing required input."""

    def __init__(self, message: str = "Validation failed", details: Any = None) -> None:
        super().__init__(
            message,
            status_code=HTTPStatus.BAD_REQUEST,
            code=ErrorCode.VALIDATION_ERROR.value,
            details=details,
        )


def _envelope_response(body: dict[str, Any], status: int) -> tuple[Response, int]:
    return jsonify(body), status


def _request_context_for_log() -> dict[str, Any]:
    """Collect sanitized request data for server-error logs."""
    if not has_request_context():
        return {}
    user = getattr(g, "current_user", None)
    return {
        "path": request.path,
        "method": request.method,
        "user_id": getattr(user, "id", None),
        "body": redact(request.get_json(silent=True)),
    }


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees the failure envelope for all handled errors.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    - Internal exception text reaches clients only when ``DEBUG`` is on.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s request_id=%s",
            err.code,
            err.status_code,
            err.message,
            ensure_request_id(),
        )
        return _envelope_response(err.to_dict(), err.status_code)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        return handle_api_error(APIError.from_service_error(err))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = CODE_BY_STATUS.get(status, ErrorCode.SERVER_ERROR)
        message = (err.description or HTTPStatus(status).phrase).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        elif status == HTTPStatus.TOO_MANY_REQUESTS:
            message = "Too many requests, please try again later"
        level = log.error if status >= 500 else log.warning
        level(
            "HTTPException: code=%s status=%s detail=%s request_id=%s",
            code.value,
            status,
            message,
            ensure_request_id(),
        )
        response, _ = _envelope_response(error_body(code.value, message), status)
        # Keep Retry-After and similar headers set by the raising extension
        for header, value in err.get_headers():
            if header.lower() != "content-type":
                response.headers[header] = value
        return response, status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.warning("ValidationError: request_id=%s", ensure_request_id())
        body = error_body(
            ErrorCode.VALIDATION_ERROR.value,
            "Validation failed",
            err.messages,
        )
        return _envelope_response(body, HTTPStatus.BAD_REQUEST)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        log.error("IntegrityError: request_id=%s", ensure_request_id(), exc_info=True)
        body = error_body(ErrorCode.DUPLICATE_ENTRY.value, "Resource already exists")
        return _envelope_response(body, HTTPStatus.CONFLICT)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error(
            "OperationalError: request_id=%s context=%s",
            ensure_request_id(),
            _request_context_for_log(),
            exc_info=True,
        )
        body = error_body(ErrorCode.SERVER_ERROR.value, "Service temporarily unavailable")
        return _envelope_response(body, HTTPStatus.SERVICE_UNAVAILABLE)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        context = _request_context_for_log()
        log.error(
            "Unhandled exception: request_id=%s context=%s",
            ensure_request_id(),
            context,
            exc_info=True,
        )
        details = None
        if current_app.debug:
            details = {"type": type(err).__name__, "message": str(err)}
        body = error_body(ErrorCode.SERVER_ERROR.value, "Internal server error", details)
        return _envelope_response(body, HTTPStatus.INTERNAL_SERVER_ERROR)
