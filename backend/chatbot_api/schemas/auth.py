"""Authentication-related Marshmallow schemas.

Wire names are camelCase (``refreshToken``, ``appleId``); loaded dicts use
snake_case keys. Unknown keys are dropped.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from chatbot_api.schemas.user import UserSchema

_NOT_BLANK = validate.Length(min=1)


class _Input(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_Input):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))


class LoginSchema(_Input):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=_NOT_BLANK)


class AppleSignInSchema(_Input):
    """Profile forwarded by the mobile client after Sign in with Apple."""

    provider_id = fields.String(
        required=True,
        data_key="appleId",
        validate=_NOT_BLANK,
        error_messages={"required": "Apple ID is required"},
    )
    email = fields.Email(load_default=None, allow_none=True)
    display_name = fields.String(load_default=None, allow_none=True, data_key="displayName")


class GoogleSignInSchema(_Input):
    """Profile forwarded by the mobile client after Google Sign-In."""

    provider_id = fields.String(
        required=True,
        data_key="googleId",
        validate=_NOT_BLANK,
        error_messages={"required": "Google ID is required"},
    )
    email = fields.Email(load_default=None, allow_none=True)
    display_name = fields.String(load_default=None, allow_none=True, data_key="displayName")
    photo_url = fields.String(load_default=None, allow_none=True, data_key="photoURL")


class RefreshSchema(_Input):
    """Optional body of ``/refresh`` and ``/logout``; the cookie is the fallback."""

    refresh_token = fields.String(load_default=None, allow_none=True, data_key="refreshToken")


class TokenPairSchema(Schema):
    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class AuthResultSchema(Schema):
    """Identity plus tokens, as returned by register/login/OAuth."""

    user = fields.Nested(UserSchema, required=True)
    access_token = fields.Function(lambda obj: obj.tokens.access_token, data_key="accessToken")
    refresh_token = fields.Function(lambda obj: obj.tokens.refresh_token, data_key="refreshToken")
