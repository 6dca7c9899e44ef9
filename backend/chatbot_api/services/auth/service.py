# chatbot_api/services/auth/service.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from chatbot_api.core.security import PasswordHasher
from chatbot_api.models.user import AuthProvider, Role, User
from chatbot_api.services._shared.base import BaseService
from chatbot_api.services._shared.errors import (
    AuthFailedError,
    DuplicateEntryError,
    NotFoundError,
    TokenInvalidError,
    UnauthorizedError,
    ValidationFailedError,
    violates,
)
from chatbot_api.services._shared.ports.refresh_token_store import RefreshTokenStore
from chatbot_api.services._shared.ports.token_blacklist import TokenBlacklist
from chatbot_api.services._shared.ports.token_codec import AccessClaims, TokenCodec
from chatbot_api.services.auth.dto import (
    AuthResultOut,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    TokenPairOut,
    UserOut,
)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass(frozen=True, slots=True)
class SweepOut:
    """
    Result of a maintenance sweep.

    :param refresh_tokens: Expired refresh rows deleted.
    :param blacklist_entries: Expired blacklist entries dropped.
    """

    refresh_tokens: int
    blacklist_entries: int


class AuthService(BaseService):
    """
    Authentication lifecycle service (register / login / refresh / logout).

    Tokens are signed by a :class:`TokenCodec`; refresh tokens are persisted
    and consumed through a :class:`RefreshTokenStore` (single-use rotation);
    access tokens are revoked early through a :class:`TokenBlacklist`.
    """

    def __init__(
        self,
        *,
        codec: TokenCodec,
        refresh_store: RefreshTokenStore,
        blacklist: TokenBlacklist,
        hasher: PasswordHasher | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param codec: Adapter for issuing/verifying JWTs.
        :param refresh_store: Stateful store for refresh tokens.
        :param blacklist: Revoked access-token registry.
        :param hasher: Password hasher; SHA-256 by default.
        """
        super().__init__()
        self.codec = codec
        self.refresh_store = refresh_store
        self.blacklist = blacklist
        self.hasher = hasher or PasswordHasher()

    # ------------------------------------------------------------------ #
    # Registration / login
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> AuthResultOut:
        """
        Create a local account and sign it in.

        :param dto: Registration input.
        :returns: New identity and its first token pair.
        :raises DuplicateEntryError: If the email is taken (any letter case).
        """
        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise DuplicateEntryError("User", "email", "User with this email already exists")
            try:
                user = User(
                    email=dto.email,
                    password_hash=self.hasher.hash(dto.password),
                    name=dto.name,
                    auth_provider=AuthProvider.LOCAL,
                )
                user.check_credentials_invariant()
                uow.users.add(user)
            except ValueError as exc:
                raise ValidationFailedError(str(exc)) from exc
            except IntegrityError as exc:
                if violates(exc, "uq_users_email"):
                    raise DuplicateEntryError(
                        "User", "email", "User with this email already exists"
                    ) from exc
                raise
            out = UserOut.from_model(user)

        self.create_default_preferences(out.id)
        tokens = self.issue_tokens(out)
        self.log.info("auth.register", extra={"user_id": out.id})
        return AuthResultOut(user=out, tokens=tokens)

    def login(self, dto: LoginIn) -> AuthResultOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email, OAuth-only account and wrong password all fail with the
        same message.

        :param dto: Login input.
        :returns: Identity and token pair.
        :raises AuthFailedError: If credentials are invalid.
        :raises UnauthorizedError: If the account is deactivated.
        """
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            if (
                user is None
                or user.auth_provider != AuthProvider.LOCAL
                or not self.hasher.verify(dto.password, user.password_hash)
            ):
                self.log.info("auth.login_failed")
                raise AuthFailedError(INVALID_CREDENTIALS)
            if not user.is_active:
                raise UnauthorizedError("Account is deactivated")
            out = UserOut.from_model(user)

        tokens = self.issue_tokens(out)
        self.log.info("auth.login", extra={"user_id": out.id})
        return AuthResultOut(user=out, tokens=tokens)

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #

    def issue_tokens(self, user: UserOut) -> TokenPairOut:
        """
        Sign an access token and persist a new refresh token for ``user``.

        :param user: Identity snapshot.
        :returns: Access/refresh pair.
        """
        access = self.codec.issue_access(
            AccessClaims(identity_id=user.id, email=user.email, role=user.role)
        )
        refresh = self.refresh_store.issue(user.id)
        return TokenPairOut(access_token=access, refresh_token=refresh)

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh token for a brand-new pair.

        The presented token is consumed; presenting it again fails.

        :param dto: Refresh input.
        :returns: New access/refresh pair.
        :raises TokenExpiredError: Signature or stored row past expiry.
        :raises TokenInvalidError: Bad signature, unknown or already used.
        :raises UnauthorizedError: Identity gone or deactivated.
        """
        claims = self.codec.verify_refresh(dto.refresh_token)
        identity_id = self.refresh_store.redeem(dto.refresh_token)
        if identity_id != claims.identity_id:
            raise TokenInvalidError("Invalid refresh token")

        with self.ro_uow() as uow:
            user = uow.users.get(identity_id)
            if user is None or not user.is_active:
                raise UnauthorizedError("User not found or inactive")
            out = UserOut.from_model(user)

        return self.issue_tokens(out)

    def logout(self, dto: LogoutIn) -> bool:
        """
        End one session.

        Deletes the refresh row (only if owned by the caller) and blacklists
        the access token when one is supplied.

        :param dto: Logout input.
        :returns: ``True`` if a refresh row was removed.
        """
        removed = self.refresh_store.revoke(dto.refresh_token, dto.identity_id)
        if dto.access_token:
            self.blacklist_access_token(dto.access_token)
        self.log.info("auth.logout", extra={"user_id": dto.identity_id})
        return removed

    def logout_all_devices(self, identity_id: int, access_token: str | None = None) -> int:
        """
        Revoke every refresh token of ``identity_id``.

        :returns: Number of sessions revoked.
        """
        revoked = self.refresh_store.revoke_all(identity_id)
        if access_token:
            self.blacklist_access_token(access_token)
        self.log.info("auth.logout_all", extra={"user_id": identity_id, "removed": revoked})
        return revoked

    def blacklist_access_token(self, token: str) -> None:
        """Blacklist ``token`` until its own ``exp`` (or one access TTL if unreadable)."""
        payload = self.codec.decode_unsafe(token) or {}
        exp = payload.get("exp")
        if isinstance(exp, int | float):
            expires_at_ms = int(exp) * 1000
        else:
            expires_at_ms = int((self.now_utc() + self.codec.access_ttl).timestamp() * 1000)
        self.blacklist.add(token, expires_at_ms)

    def cleanup_expired_tokens(self) -> SweepOut:
        """Delete expired refresh rows and drop expired blacklist entries."""
        return SweepOut(
            refresh_tokens=self.refresh_store.sweep_expired(),
            blacklist_entries=self.blacklist.sweep(),
        )

    # ------------------------------------------------------------------ #
    # Account
    # ------------------------------------------------------------------ #

    def create_default_preferences(self, identity_id: int) -> None:
        """Best-effort insert of the default preference row; failures are logged only."""
        try:
            with self.rw_uow() as uow:
                if uow.preferences.get_for_user(identity_id) is None:
                    uow.preferences.create_default(identity_id)
        except SQLAlchemyError:
            self.log.exception("preferences.create_failed", extra={"user_id": identity_id})

    def get_user(self, identity_id: int) -> UserOut:
        with self.ro_uow() as uow:
            user = uow.users.get(identity_id)
            if user is None:
                raise NotFoundError("User", identity_id)
            return UserOut.from_model(user)

    def delete_account(self, identity_id: int, access_token: str | None = None) -> None:
        """
        Delete the identity with its preferences and refresh tokens.

        :param identity_id: Account to delete.
        :param access_token: Caller's access token, blacklisted afterwards.
        :raises NotFoundError: If the identity does not exist.
        """
        self.get_user(identity_id)
        self.refresh_store.revoke_all(identity_id)
        with self.rw_uow() as uow:
            uow.refresh_tokens.delete_all_for_user(identity_id)
            uow.preferences.delete_for_user(identity_id)
            user = uow.users.get(identity_id)
            if user is not None:
                uow.users.delete(user)
        if access_token:
            self.blacklist_access_token(access_token)
        self.log.info("auth.account_deleted", extra={"user_id": identity_id})

    def set_role(self, email: str, role: Role) -> UserOut:
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            uow.users.assign_updates(user, {"role": role})
            return UserOut.from_model(user)

    def set_active(self, email: str, active: bool) -> UserOut:
        """
        Activate or deactivate an account by email.

        Deactivation also revokes every refresh token of the account.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            uow.users.assign_updates(user, {"is_active": active})
            out = UserOut.from_model(user)
        if not active:
            self.refresh_store.revoke_all(out.id)
        return out
