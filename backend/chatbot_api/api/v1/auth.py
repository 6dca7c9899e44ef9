"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app, g, request

from chatbot_api.api.cookies import clear_auth_cookies, set_auth_cookies
from chatbot_api.api.deps import (
    REFRESH_COOKIE,
    current_user,
    json_body,
    optional_auth,
    require_auth,
    success,
    timing,
)
from chatbot_api.core.container import get_container
from chatbot_api.core.errors import BadRequest
from chatbot_api.core.extensions import limiter
from chatbot_api.schemas import (
    AppleSignInSchema,
    AuthResultSchema,
    GoogleSignInSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from chatbot_api.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn
from chatbot_api.services.oauth.dto import OAuthProfileIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
apple_schema = AppleSignInSchema()
google_schema = GoogleSignInSchema()
refresh_schema = RefreshSchema()
auth_result_schema = AuthResultSchema()
token_pair_schema = TokenPairSchema()
user_schema = UserSchema()


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_RATE_LIMIT", "5 per 15 minutes"))


def _presented_refresh_token() -> str:
    """Refresh token from the JSON body, else from the ``refreshToken`` cookie."""
    data = refresh_schema.load(json_body())
    token = data.get("refresh_token") or request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise BadRequest("Refresh token is required")
    return token


@bp.post("/register")
@limiter.limit(_auth_rate_limit)
@timing
def register():
    """Create a local account and sign it in."""

    data = register_schema.load(json_body())
    result = get_container().auth_service().register(RegisterIn(**data))
    response = success(auth_result_schema.dump(result), status=201)
    return set_auth_cookies(response, result.tokens)


@bp.post("/login")
@limiter.limit(_auth_rate_limit)
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(json_body())
    result = get_container().auth_service().login(LoginIn(**data))
    return set_auth_cookies(success(auth_result_schema.dump(result)), result.tokens)


@bp.post("/apple")
@limiter.limit(_auth_rate_limit)
@timing
def apple_sign_in():
    data = apple_schema.load(json_body())
    result = get_container().oauth_service().authenticate_with_apple(OAuthProfileIn(**data))
    return set_auth_cookies(success(auth_result_schema.dump(result)), result.tokens)


@bp.post("/google")
@limiter.limit(_auth_rate_limit)
@timing
def google_sign_in():
    data = google_schema.load(json_body())
    result = get_container().oauth_service().authenticate_with_google(OAuthProfileIn(**data))
    return set_auth_cookies(success(auth_result_schema.dump(result)), result.tokens)


@bp.post("/refresh")
@limiter.limit(_auth_rate_limit)
@timing
def refresh():
    """Rotate the presented refresh token into a brand-new pair."""

    tokens = get_container().auth_service().refresh(RefreshIn(_presented_refresh_token()))
    return set_auth_cookies(success(token_pair_schema.dump(tokens)), tokens)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """End the current session and revoke its access token."""

    token = _presented_refresh_token()
    user = current_user()
    get_container().auth_service().logout(
        LogoutIn(refresh_token=token, identity_id=user.id, access_token=g.access_token)
    )
    return clear_auth_cookies(success(None, message="Logged out successfully"))


@bp.post("/logout-all")
@require_auth
@timing
def logout_all():
    """Revoke every refresh token of the caller."""

    user = current_user()
    revoked = get_container().auth_service().logout_all_devices(user.id, g.access_token)
    response = success({"revokedSessions": revoked}, message="Logged out from all devices")
    return clear_auth_cookies(response)


@bp.get("/me")
@require_auth
@timing
def me():
    return success({"user": user_schema.dump(current_user())})


@bp.get("/session")
@optional_auth
@timing
def session():
    """Report whether the request carries a usable access token."""

    user = current_user()
    return success(
        {
            "authenticated": user is not None,
            "user": user_schema.dump(user) if user is not None else None,
        }
    )
