"""Account endpoints for the authenticated identity."""

from __future__ import annotations

from flask import Blueprint, g

from chatbot_api.api.cookies import clear_auth_cookies
from chatbot_api.api.deps import current_user, require_auth, success, timing
from chatbot_api.core.container import get_container

bp = Blueprint("users", __name__)


@bp.delete("/me")
@require_auth
@timing
def delete_me():
    """Delete the caller's account, preferences and sessions."""

    user = current_user()
    get_container().auth_service().delete_account(user.id, access_token=g.access_token)
    return clear_auth_cookies(success(None, message="Account deleted successfully"))
