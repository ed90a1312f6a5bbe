"""SQLAlchemy implementations of the user and session stores.

Writes are flushed, not committed: the caller decides the transaction
boundary (see DBStorage.transaction). Duplicate detection relies on the
unique index on users.email and the sessions primary key; any other integrity
error is re-raised unchanged.
"""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import FlushError

from models.session import Session
from models.user import User
from services.exceptions import DuplicateEmailError, DuplicateError, NotFoundError

logger = logging.getLogger(__name__)


def _is_unique_violation(exc: IntegrityError, *markers: str) -> bool:
    """True when `exc` is a unique/primary key violation naming one of `markers`."""
    text = str(exc.orig).lower()
    if "unique" not in text and "duplicate" not in text:
        return False
    return any(marker in text for marker in markers)


class SQLUserStore:
    def __init__(self, session):
        self._session = session

    def create(self, user: User) -> User:
        self._session.add(user)
        try:
            self._session.flush()
        except IntegrityError as exc:
            self._session.rollback()
            if not _is_unique_violation(exc, "users.email", "ix_users_email"):
                raise
            logger.debug("user insert rejected: %s", exc)
            raise DuplicateEmailError() from exc
        return user

    def find_by_email(self, email: str) -> User:
        user = self._session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()
        if user is None:
            raise NotFoundError("User not found")
        return user

    def find_by_id(self, user_id: str) -> User:
        user = self._session.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user


class SQLSessionStore:
    def __init__(self, session):
        self._session = session

    def create(self, session: Session) -> Session:
        self._session.add(session)
        try:
            self._session.flush()
        except FlushError as exc:
            # same id already held in this unit of work
            self._session.rollback()
            raise DuplicateError("Session already exists") from exc
        except IntegrityError as exc:
            self._session.rollback()
            if not _is_unique_violation(exc, "sessions.id", "sessions_pkey"):
                raise
            logger.debug("session insert rejected: %s", exc)
            raise DuplicateError("Session already exists") from exc
        return session

    def find_by_id(self, session_id: str) -> Session:
        session = self._session.get(Session, session_id)
        if session is None:
            raise NotFoundError("Session not found")
        return session

    def block(self, session_id: str) -> Session:
        session = self.find_by_id(session_id)
        session.is_blocked = True
        self._session.flush()
        return session
