"""
Unit tests for the read-write and read-only Units of Work.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select

from chatbot_api.models import User
from chatbot_api.uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork
from tests.factories.user import UserFactory


def _count(session) -> int:
    return len(session.execute(select(User.id)).all())


class TestSQLAlchemyUnitOfWork:
    def test_commits_on_success(self, session):
        initial = _count(session)
        with SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
        assert _count(session) == initial + 1

    def test_rolls_back_on_exception(self, session):
        initial = _count(session)
        with pytest.raises(RuntimeError), SQLAlchemyUnitOfWork() as uow:
            uow.users.add(UserFactory.build())
            raise RuntimeError("boom")
        assert _count(session) == initial


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_allows_reads(self, session):
        user_id = UserFactory().id
        with SQLAlchemyReadOnlyUnitOfWork() as uow:
            assert uow.users.get(user_id) is not None

    def test_blocks_orm_flush_writes(self, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError, match="flush"):
            uow.session.add(UserFactory.build())
            uow.session.flush()
        session.rollback()

    def test_disallows_commit(self, session):
        with SQLAlchemyReadOnlyUnitOfWork() as uow, pytest.raises(RuntimeError):
            uow.commit()
