"""Administrative maintenance endpoints."""

from __future__ import annotations

from flask import Blueprint

from chatbot_api.api.deps import require_admin, success, timing
from chatbot_api.core.container import get_container

bp = Blueprint("admin", __name__)


@bp.post("/maintenance/sweep")
@require_admin
@timing
def sweep_tokens():
    """Drop expired refresh rows and blacklist entries now."""

    result = get_container().auth_service().cleanup_expired_tokens()
    return success(
        {
            "refreshTokens": result.refresh_tokens,
            "blacklistEntries": result.blacklist_entries,
        }
    )
