"""Tests for the SQLAlchemy stores and transactional registration."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.repository import SQLSessionStore, SQLUserStore
from models.session import Session
from models.user import User
from services.auth_service import AuthService
from services.exceptions import DuplicateEmailError, DuplicateError, NotFoundError


@pytest.fixture
def storage():
    storage = DBStorage("sqlite://")
    storage.reload()
    yield storage
    storage.close()
    storage.engine.dispose()


@pytest.fixture
def sql_users(storage):
    return SQLUserStore(storage.get_session())


@pytest.fixture
def sql_sessions(storage):
    return SQLSessionStore(storage.get_session())


def _user(email="a@b.com"):
    return User(email=email, password_hash="x", fullname="A B", phone="000")


def _session(user, session_id=None):
    return Session(
        id=session_id,
        user_id=user.id,
        refresh_token="token",
        user_agent="ua",
        client_ip="127.0.0.1",
        is_blocked=False,
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
    )


def test_user_lookups(storage, sql_users):
    with storage.transaction():
        user = sql_users.create(_user())

    assert sql_users.find_by_email("a@b.com").id == user.id
    assert sql_users.find_by_id(user.id).email == "a@b.com"
    with pytest.raises(NotFoundError):
        sql_users.find_by_email("missing@b.com")
    with pytest.raises(NotFoundError):
        sql_users.find_by_id("missing")


def test_duplicate_email_is_rejected_by_the_store(storage, sql_users):
    with storage.transaction():
        sql_users.create(_user())
    with pytest.raises(DuplicateEmailError):
        with storage.transaction():
            sql_users.create(_user())


def test_other_integrity_errors_are_not_duplicates(storage, sql_users):
    incomplete = User(email="x@b.com", password_hash="x", fullname=None, phone="000")
    with pytest.raises(IntegrityError):
        with storage.transaction():
            sql_users.create(incomplete)

    with pytest.raises(NotFoundError):
        sql_users.find_by_email("x@b.com")


def test_session_without_user_is_not_a_duplicate(storage, sql_users, sql_sessions):
    with storage.transaction():
        user = sql_users.create(_user())
    orphan = _session(user)
    orphan.user_id = None
    with pytest.raises(IntegrityError):
        with storage.transaction():
            sql_sessions.create(orphan)


def test_duplicate_session_id(storage, sql_users, sql_sessions):
    with storage.transaction():
        user = sql_users.create(_user())
        session = sql_sessions.create(_session(user))
    storage.close()

    with pytest.raises(DuplicateError):
        with storage.transaction():
            sql_sessions.create(_session(user, session_id=session.id))


def test_block_session(storage, sql_users, sql_sessions):
    with storage.transaction():
        user = sql_users.create(_user())
        session = sql_sessions.create(_session(user))
    with storage.transaction():
        sql_sessions.block(session.id)
    storage.close()

    assert sql_sessions.find_by_id(session.id).is_blocked is True
    with pytest.raises(NotFoundError):
        sql_sessions.block("missing")


class FailingSessionStore(SQLSessionStore):
    def create(self, session):
        raise DuplicateError("boom")


def test_register_is_atomic(storage, sql_users, hasher, token_maker, settings):
    service = AuthService(
        users=sql_users,
        sessions=FailingSessionStore(storage.get_session()),
        hasher=hasher,
        tokens=token_maker,
        settings=settings,
        transaction=storage.transaction,
    )
    with pytest.raises(DuplicateError):
        service.register("a@b.com", "secret1", "A B", "000")
    storage.close()

    with pytest.raises(NotFoundError):
        sql_users.find_by_email("a@b.com")
