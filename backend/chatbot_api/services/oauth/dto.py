# chatbot_api/services/oauth/dto.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class OAuthProfileIn:
    """
    Provider profile as forwarded by the mobile client.

    The provider id is taken as already verified by the client SDK.

    :param provider_id: Apple ``sub`` / Google ``uid``.
    :type provider_id: str
    :param email: Email shared by the provider, if any.
    :type email: str | None
    :param display_name: Name shared by the provider, if any.
    :type display_name: str | None
    :param photo_url: Avatar URL (Google only).
    :type photo_url: str | None
    """

    provider_id: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None
