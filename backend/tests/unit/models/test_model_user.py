"""Unit tests for the User model constraints and validators."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from chatbot_api.models.user import AuthProvider, Role, User
from tests.factories.user import AppleUserFactory, UserFactory


def test_email_is_normalized():
    user = User(email="  MiXeD@Example.COM ", name="x", password_hash="h")
    assert user.email == "mixed@example.com"


def test_blank_email_becomes_null():
    assert User(email="   ", name="x").email is None


def test_email_without_at_is_rejected():
    with pytest.raises(ValueError):
        User(email="nope", name="x")


def test_defaults(session):
    user = UserFactory()
    assert user.role == Role.USER
    assert user.is_active is True
    assert user.created_at is not None
    assert user.is_admin is False


def test_local_account_requires_password():
    user = User(email="a@example.com", name="x", auth_provider=AuthProvider.LOCAL)
    with pytest.raises(ValueError):
        user.check_credentials_invariant()


def test_oauth_account_needs_no_password(session):
    user = AppleUserFactory(email=None)
    user.check_credentials_invariant()
    assert user.password_hash is None


def test_database_check_rejects_local_without_hash(session):
    session.add(User(email="b@example.com", name="x", auth_provider=AuthProvider.LOCAL))
    with pytest.raises(IntegrityError):
        session.flush()
    session.rollback()


def test_email_unique_but_nulls_do_not_collide(session):
    AppleUserFactory(email=None)
    AppleUserFactory(email=None)
    UserFactory(email="dup@example.com")
    with pytest.raises(IntegrityError):
        UserFactory(email="DUP@example.com")
    session.rollback()


def test_users_table_columns():
    assert set(User.__table__.columns.keys()) == {
        "id",
        "email",
        "password_hash",
        "name",
        "avatar",
        "auth_provider",
        "apple_id",
        "google_id",
        "role",
        "is_active",
        "created_at",
        "updated_at",
    }
