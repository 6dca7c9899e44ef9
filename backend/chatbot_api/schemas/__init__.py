"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AppleSignInSchema,
    AuthResultSchema,
    GoogleSignInSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from .user import UserSchema

__all__ = [
    "AppleSignInSchema",
    "AuthResultSchema",
    "GoogleSignInSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserSchema",
]
