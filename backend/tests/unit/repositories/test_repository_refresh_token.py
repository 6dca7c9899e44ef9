"""Unit tests for RefreshTokenRepository and UserRepository lookups."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from chatbot_api.repositories import RefreshTokenRepository, UserRepository
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import GoogleUserFactory, UserFactory


class TestRefreshTokenRepository:
    @pytest.fixture()
    def repo(self, session):
        return RefreshTokenRepository(session=session)

    def test_get_by_token(self, repo):
        row = RefreshTokenFactory(token="abc")
        assert repo.get_by_token("abc").id == row.id
        assert repo.get_by_token("missing") is None

    def test_delete_by_id_reports_rowcount(self, repo):
        row_id = RefreshTokenFactory().id
        assert repo.delete_by_id(row_id) == 1
        assert repo.delete_by_id(row_id) == 0

    def test_delete_for_user_is_owner_scoped(self, repo):
        row = RefreshTokenFactory(token="owned")
        other = UserFactory()
        assert repo.delete_for_user("owned", other.id) == 0
        assert repo.delete_for_user("owned", row.user_id) == 1

    def test_delete_expired(self, repo):
        now = datetime.now(UTC)
        RefreshTokenFactory(expires_at=now - timedelta(minutes=1))
        live = RefreshTokenFactory(expires_at=now + timedelta(minutes=1))
        assert repo.delete_expired(now) == 1
        assert repo.get_by_token(live.token) is not None


class TestUserRepository:
    @pytest.fixture()
    def repo(self, session):
        return UserRepository(session=session)

    def test_get_by_email_is_case_insensitive(self, repo):
        user = UserFactory(email="kate@example.com")
        assert repo.get_by_email(" KATE@example.com ").id == user.id
        assert repo.exists_by_email("Kate@Example.com")
        assert not repo.exists_by_email("nobody@example.com")

    def test_provider_lookups(self, repo):
        user = GoogleUserFactory(google_id="g-42")
        assert repo.get_by_google_id("g-42").id == user.id
        assert repo.get_by_apple_id("g-42") is None

    def test_assign_updates_ignores_non_whitelisted_fields(self, repo):
        user = UserFactory()
        digest = user.password_hash
        repo.assign_updates(user, {"name": "Renamed", "password_hash": "x"}, strict=False)
        assert user.name == "Renamed"
        assert user.password_hash == digest

    def test_assign_updates_strict_rejects_unknown_fields(self, repo):
        user = UserFactory()
        with pytest.raises(ValueError):
            repo.assign_updates(user, {"password_hash": "x"})
