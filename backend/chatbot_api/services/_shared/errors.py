"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
concerns. Each carries a stable :class:`ErrorCode` that clients branch on.

The translation to HTTP responses is handled by the error handlers in
``chatbot_api/core/errors.py``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from sqlalchemy.exc import IntegrityError


class ErrorCode(str, Enum):
    """Machine-readable error identifiers exposed in the error envelope."""

    AUTH_FAILED = "AUTH_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    UNAUTHORIZED = "UNAUTHORIZED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVER_ERROR = "SERVER_ERROR"


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :type exc: IntegrityError
    :param constraint_name: Constraint to match (e.g. ``"uq_users_email"``).
    :type constraint_name: str
    :returns: ``True`` if the driver message names the constraint or, for
              SQLite, the constrained column.
    :rtype: bool
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    # SQLite reports "UNIQUE constraint failed: users.email"
    column = constraint_name.lower().split("_", 2)[-1]
    return f".{column}" in message


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories, stores or domain logic.
    - The API layer later translates them to ``APIError``.
    """

    code: ErrorCode = ErrorCode.SERVER_ERROR
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# --------------------------------------------------------------------------- #
# Specific errors
# --------------------------------------------------------------------------- #


class AuthFailedError(ServiceError):
    """Credentials or session could not be established."""

    code = ErrorCode.AUTH_FAILED
    default_message = "Authentication failed"


class TokenExpiredError(ServiceError):
    """Token was well-formed and correctly signed but is past its expiry."""

    code = ErrorCode.TOKEN_EXPIRED
    default_message = "Token has expired"


class TokenInvalidError(ServiceError):
    """Token is malformed, mis-signed, revoked or already consumed."""

    code = ErrorCode.TOKEN_INVALID
    default_message = "Invalid token"


class UnauthorizedError(ServiceError):
    """Identity is known but not allowed (inactive account, missing role)."""

    code = ErrorCode.UNAUTHORIZED
    default_message = "Not authorized"


class ValidationFailedError(ServiceError):
    """Input failed a business-level validation."""

    code = ErrorCode.VALIDATION_ERROR
    default_message = "Validation failed"


class DuplicateEntryError(ServiceError):
    """
    Unique key collision.

    :param entity: Entity name (e.g., ``"User"``).
    :param field: Colliding field name.
    """

    code = ErrorCode.DUPLICATE_ENTRY

    def __init__(self, entity: str, field: str, message: str | None = None) -> None:
        self.entity = entity
        self.field = field
        super().__init__(message or f"{entity} with this {field} already exists")


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the repository.

    :param entity: Entity name (e.g., ``"User"``).
    :param key: Identifier or search key.
    """

    code = ErrorCode.NOT_FOUND

    def __init__(self, entity: str, key: str | int) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")
