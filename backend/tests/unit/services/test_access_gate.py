from __future__ import annotations

import pytest

from chatbot_api.models.user import User
from chatbot_api.services._shared.errors import (
    AuthFailedError,
    TokenInvalidError,
    UnauthorizedError,
)
from chatbot_api.services.auth.access import AccessGate
from chatbot_api.services.auth.dto import LoginIn
from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory


@pytest.fixture()
def gate(container) -> AccessGate:
    return container.access_gate()


def _access_token(auth_service, email: str) -> str:
    return auth_service.login(LoginIn(email=email, password=DEFAULT_PASSWORD)).tokens.access_token


def test_missing_token_is_auth_failed(gate):
    with pytest.raises(AuthFailedError):
        gate.authenticate(None)
    with pytest.raises(AuthFailedError):
        gate.authenticate("")


def test_valid_token_resolves_identity(gate, auth_service):
    user_id = UserFactory(email="hank@example.com").id
    user = gate.authenticate(_access_token(auth_service, "hank@example.com"))
    assert user.id == user_id
    assert user.email == "hank@example.com"


def test_blacklisted_token_is_checked_before_signature(gate, container):
    container.blacklist.add("whatever", 2**42)
    with pytest.raises(TokenInvalidError) as exc:
        gate.authenticate("whatever")
    assert exc.value.message == "Token has been revoked"


def test_garbage_token_is_invalid(gate):
    with pytest.raises(TokenInvalidError):
        gate.authenticate("not.a.jwt")


def test_deactivated_identity_fails_with_a_valid_token(gate, auth_service, session):
    user = UserFactory(email="ivy@example.com")
    token = _access_token(auth_service, "ivy@example.com")

    session.get(User, user.id).is_active = False
    session.flush()

    with pytest.raises(AuthFailedError):
        gate.authenticate(token)


def test_deleted_identity_fails(gate, auth_service):
    user_id = UserFactory(email="jack@example.com").id
    token = _access_token(auth_service, "jack@example.com")
    auth_service.delete_account(user_id)

    with pytest.raises(AuthFailedError):
        gate.authenticate(token)


def test_ensure_admin(gate, auth_service):
    AdminFactory(email="root@example.com")
    UserFactory(email="pleb@example.com")

    admin = gate.authenticate(_access_token(auth_service, "root@example.com"))
    assert AccessGate.ensure_admin(admin) is admin

    pleb = gate.authenticate(_access_token(auth_service, "pleb@example.com"))
    with pytest.raises(UnauthorizedError):
        AccessGate.ensure_admin(pleb)
    with pytest.raises(AuthFailedError):
        AccessGate.ensure_admin(None)
