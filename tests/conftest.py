"""Shared fixtures: a controllable clock, in-memory stores and a test app."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict

import pytest

from api import create_app
from services.auth_service import AuthService, TokenSettings
from services.exceptions import DuplicateEmailError, DuplicateError, NotFoundError
from utils.security import PasswordHasher, TokenMaker

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"


class FakeClock:
    """Frozen UTC clock that tests move forward explicitly."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class InMemoryUserStore:
    def __init__(self) -> None:
        self.by_id: Dict[str, object] = {}

    def create(self, user):
        if any(u.email == user.email for u in self.by_id.values()):
            raise DuplicateEmailError()
        self.by_id[user.id] = user
        return user

    def find_by_email(self, email):
        for user in self.by_id.values():
            if user.email == email:
                return user
        raise NotFoundError("User not found")

    def find_by_id(self, user_id):
        try:
            return self.by_id[user_id]
        except KeyError:
            raise NotFoundError("User not found") from None


class InMemorySessionStore:
    def __init__(self) -> None:
        self.by_id: Dict[str, object] = {}

    def create(self, session):
        if session.id in self.by_id:
            raise DuplicateError()
        self.by_id[session.id] = session
        return session

    def find_by_id(self, session_id):
        try:
            return self.by_id[session_id]
        except KeyError:
            raise NotFoundError("Session not found") from None

    def block(self, session_id):
        session = self.find_by_id(session_id)
        session.is_blocked = True
        return session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def token_maker(clock) -> TokenMaker:
    return TokenMaker(clock=clock)


@pytest.fixture
def settings() -> TokenSettings:
    return TokenSettings(
        access_secret=ACCESS_SECRET,
        refresh_secret=REFRESH_SECRET,
        access_duration=timedelta(minutes=15),
        refresh_duration=timedelta(hours=24),
    )


@pytest.fixture
def users() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def sessions() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def auth_service(users, sessions, hasher, token_maker, settings, clock) -> AuthService:
    return AuthService(
        users=users,
        sessions=sessions,
        hasher=hasher,
        tokens=token_maker,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def app():
    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()
