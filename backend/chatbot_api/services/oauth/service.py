# chatbot_api/services/oauth/service.py
from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from chatbot_api.models.user import AuthProvider, User
from chatbot_api.services._shared.base import BaseService
from chatbot_api.services._shared.errors import (
    DuplicateEntryError,
    UnauthorizedError,
    ValidationFailedError,
)
from chatbot_api.services.auth.dto import AuthResultOut, UserOut
from chatbot_api.services.auth.service import AuthService
from chatbot_api.services.oauth.dto import OAuthProfileIn

PROVIDER_FIELD: dict[AuthProvider, str] = {
    AuthProvider.APPLE: "apple_id",
    AuthProvider.GOOGLE: "google_id",
}

FALLBACK_NAME: dict[AuthProvider, str] = {
    AuthProvider.APPLE: "Apple User",
    AuthProvider.GOOGLE: "Google User",
}


class OAuthService(BaseService):
    """
    Sign in with Apple / Google.

    Resolution order for a provider profile:

    1. an identity already holding the provider id;
    2. otherwise an identity with the same email, which gets the provider id
       linked and ``auth_provider`` switched to this provider (the most
       recently linked provider wins);
    3. otherwise a new password-less identity.

    Tokens are then issued through :class:`AuthService`.
    """

    def __init__(self, *, auth: AuthService) -> None:
        super().__init__()
        self.auth = auth

    def authenticate_with_apple(self, profile: OAuthProfileIn) -> AuthResultOut:
        return self._authenticate(AuthProvider.APPLE, profile)

    def authenticate_with_google(self, profile: OAuthProfileIn) -> AuthResultOut:
        return self._authenticate(AuthProvider.GOOGLE, profile)

    @staticmethod
    def fallback_name(provider: AuthProvider, profile: OAuthProfileIn) -> str:
        """Display name, else the email local part, else a provider label."""
        if profile.display_name and profile.display_name.strip():
            return profile.display_name.strip()
        if profile.email and profile.email.split("@")[0]:
            return profile.email.split("@")[0]
        return FALLBACK_NAME[provider]

    def _authenticate(self, provider: AuthProvider, profile: OAuthProfileIn) -> AuthResultOut:
        if not profile.provider_id:
            raise ValidationFailedError(f"{provider.value.capitalize()} ID is required")

        field = PROVIDER_FIELD[provider]
        created = False
        with self.rw_uow() as uow:
            if provider is AuthProvider.APPLE:
                user = uow.users.get_by_apple_id(profile.provider_id)
            else:
                user = uow.users.get_by_google_id(profile.provider_id)

            if user is None and profile.email:
                user = uow.users.get_by_email(profile.email)
                if user is not None:
                    updates: dict[str, object] = {
                        field: profile.provider_id,
                        "auth_provider": provider,
                    }
                    if provider is AuthProvider.GOOGLE and not user.avatar and profile.photo_url:
                        updates["avatar"] = profile.photo_url
                    uow.users.assign_updates(user, updates)
                    self.log.info(
                        "oauth.linked",
                        extra={"user_id": user.id, "provider": provider.value},
                    )

            if user is None:
                user = User(
                    email=profile.email,
                    name=self.fallback_name(provider, profile),
                    auth_provider=provider,
                    avatar=profile.photo_url if provider is AuthProvider.GOOGLE else None,
                )
                setattr(user, field, profile.provider_id)
                try:
                    uow.users.add(user)
                except IntegrityError as exc:
                    raise DuplicateEntryError("User", field) from exc
                created = True
                self.log.info(
                    "oauth.created",
                    extra={"user_id": user.id, "provider": provider.value},
                )

            out = UserOut.from_model(user)

        if created:
            self.auth.create_default_preferences(out.id)
        if not out.is_active:
            raise UnauthorizedError("Account is deactivated")

        return AuthResultOut(user=out, tokens=self.auth.issue_tokens(out))
