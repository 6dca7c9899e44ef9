"""
SQLAlchemy Units of Work over the Flask-scoped session.
"""

from __future__ import annotations

from contextlib import suppress

from sqlalchemy import event
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from chatbot_api.core.extensions import db
from chatbot_api.repositories import (
    PreferencesRepository,
    RefreshTokenRepository,
    UserRepository,
)
from chatbot_api.uow.base import UnitOfWork


class _SessionRepositories:
    def __init__(self, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.preferences = PreferencesRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)


class SQLAlchemyUnitOfWork(_SessionRepositories, UnitOfWork):
    """
    Read-write scope: commits when the block exits cleanly, rolls back when
    it raises.
    """

    def __init__(self) -> None:
        super().__init__(db.session())

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except SQLAlchemyError:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyReadOnlyUnitOfWork(_SessionRepositories, UnitOfWork):
    """
    Read-only scope used for lookups (login, token checks, ``/me``).

    Notes
    -----
    - Any ORM flush with pending changes raises ``RuntimeError``. The guard is
      bound to this thread's session only.
    - If the session has no open transaction the scope owns one and rolls
      it back on exit; otherwise it attaches to the outer transaction and
      leaves it untouched.
    - ``commit()`` always raises.
    """

    def __init__(self) -> None:
        super().__init__(db.session())
        self._owned: SessionTransaction | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._owned = self.session.begin()
        except InvalidRequestError:
            self._owned = None
        event.listen(self.session, "before_flush", self._block_flush)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._block_flush)
        if self._owned is not None:
            self._owned = None
            with suppress(SQLAlchemyError):
                self.session.rollback()

    def _block_flush(self, session, flush_context, instances) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only UnitOfWork: flush blocked (pending changes present).")

    def commit(self) -> None:
        """
        :raises RuntimeError: always, the scope is read-only.
        """
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
