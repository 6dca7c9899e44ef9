"""Tests for the ``flask auth`` command group."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from chatbot_api.models.refresh_token import RefreshToken
from chatbot_api.models.user import Role, User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def runner(app, container):
    return app.test_cli_runner()


def test_sweep_tokens_reports_counts(runner, session):
    user = UserFactory()
    RefreshTokenFactory(user=user, expires_at=datetime.now(UTC) - timedelta(days=1))
    RefreshTokenFactory(user=user)

    result = runner.invoke(args=["auth", "sweep-tokens"])

    assert result.exit_code == 0, result.output
    assert "refresh_tokens=1" in result.output
    assert session.query(RefreshToken).count() == 1


def test_set_role_promotes_user(runner, session):
    user_id = UserFactory(email="promote@example.com").id

    result = runner.invoke(args=["auth", "set-role", "promote@example.com", "admin"])

    assert result.exit_code == 0, result.output
    assert "role=admin" in result.output
    assert session.get(User, user_id).role == Role.ADMIN


def test_set_role_unknown_email_fails(runner):
    result = runner.invoke(args=["auth", "set-role", "ghost@example.com", "admin"])
    assert result.exit_code != 0
    assert "User not found: ghost@example.com" in result.output


def test_deactivate_revokes_sessions(runner, session):
    user = UserFactory(email="leaving@example.com")
    user_id = user.id
    RefreshTokenFactory(user=user)

    result = runner.invoke(args=["auth", "deactivate", "leaving@example.com"])

    assert result.exit_code == 0, result.output
    assert session.get(User, user_id).is_active is False
    assert session.query(RefreshToken).filter_by(user_id=user_id).count() == 0
