"""Service layer orchestrating registration, login and token renewal.

Access tokens are stateless: they are never stored and only their signature
and expiry matter. Refresh tokens are bound to a persisted Session whose id is
the refresh token's JTI; renewing an access token re-reads that session and
refuses it when blocked, relinked to another user or expired. Renewal never
rotates the refresh token and never writes to the session.
"""
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, ContextManager, Optional

from models.session import Session
from models.user import User
from services.exceptions import (
    InvalidCredentials,
    MismatchError,
    NotFoundError,
    SessionBlocked,
    SessionExpired,
    SessionMismatch,
)
from services.stores import SessionStore, UserStore
from utils.security import PasswordHasher, TokenMaker, TokenPayload, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenSettings:
    """Secrets and validity windows for the two kinds of token."""

    access_secret: str
    refresh_secret: str
    access_duration: timedelta
    refresh_duration: timedelta


@dataclass(frozen=True)
class ClientContext:
    """Request metadata stored verbatim on new sessions."""

    user_agent: str = ""
    client_ip: str = ""


@dataclass(frozen=True)
class AuthIdentity:
    """The caller proven by a verified access token."""

    user_id: str
    token_id: str
    expires_at: datetime

    @classmethod
    def from_payload(cls, payload: TokenPayload) -> "AuthIdentity":
        return cls(user_id=payload.user_id, token_id=payload.id, expires_at=payload.expired_at)


@dataclass(frozen=True)
class AuthResponse:
    session_id: str
    access_token: str
    access_token_issued_at: datetime
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Coordinate stores, password hashing and token minting."""

    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        tokens: TokenMaker,
        settings: TokenSettings,
        transaction: Optional[Callable[[], ContextManager]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._users = users
        self._sessions = sessions
        self._hasher = hasher
        self._tokens = tokens
        self._settings = settings
        self._transaction = transaction or nullcontext
        self._now = clock or utcnow
        # unknown-email logins verify against this so both failures cost one argon2 check
        self._dummy_hash = hasher.hash("orderin-dummy-password")

    def register(self, email: str, password: str, fullname: str, phone: str,
                 client: ClientContext = ClientContext()) -> AuthResponse:
        """Create a user and its first session.

        User and session are written in one transaction, so a failed session
        insert leaves no account behind when a transaction factory is set.
        """
        password_hash = self._hasher.hash(password)
        with self._transaction():
            user = self._users.create(
                User(email=email, password_hash=password_hash, fullname=fullname, phone=phone)
            )
            response = self._start_session(user, client)
        logger.info("registered user %s with session %s", user.id, response.session_id)
        return response

    def login(self, email: str, password: str,
              client: ClientContext = ClientContext()) -> AuthResponse:
        """Authenticate by email and password and open a new session.

        Unknown email and wrong password raise the same InvalidCredentials.
        """
        try:
            user = self._users.find_by_email(email)
        except NotFoundError:
            # spend the same hashing work as a real mismatch
            self._burn_verify(password)
            raise InvalidCredentials() from None
        try:
            self._hasher.verify(password, user.password_hash)
        except MismatchError:
            raise InvalidCredentials() from None

        with self._transaction():
            response = self._start_session(user, client)
        logger.info("user %s logged in with session %s", user.id, response.session_id)
        return response

    def renew_access_token(self, refresh_token: str) -> AuthResponse:
        """Mint a new access token from a refresh token; the session is only read."""
        refresh_payload = self._tokens.verify_token(self._settings.refresh_secret, refresh_token)
        session = self._sessions.find_by_id(refresh_payload.id)

        if session.is_blocked:
            logger.warning("refresh refused for session %s: blocked", session.id)
            raise SessionBlocked()
        if session.user_id != refresh_payload.user_id:
            logger.warning("refresh refused for session %s: user mismatch", session.id)
            raise SessionMismatch()
        if self._now() > _as_utc(session.expires_at):
            logger.warning("refresh refused for session %s: expired", session.id)
            raise SessionExpired()

        access_token, access_payload = self._tokens.create_token(
            self._settings.access_secret, session.user_id, self._settings.access_duration
        )
        logger.info("renewed access token for session %s", session.id)
        return AuthResponse(
            session_id=session.id,
            access_token=access_token,
            access_token_issued_at=access_payload.issued_at,
            access_token_expires_at=access_payload.expired_at,
            refresh_token=refresh_token,
            refresh_token_expires_at=refresh_payload.expired_at,
        )

    def logout(self, refresh_token: str) -> None:
        """Block the session bound to `refresh_token`. Blocking twice is a no-op."""
        refresh_payload = self._tokens.verify_token(self._settings.refresh_secret, refresh_token)
        with self._transaction():
            session = self._sessions.find_by_id(refresh_payload.id)
            if session.user_id != refresh_payload.user_id:
                raise SessionMismatch()
            if not session.is_blocked:
                self._sessions.block(session.id)
        logger.info("session %s blocked on logout", refresh_payload.id)

    def profile(self, identity: AuthIdentity) -> User:
        return self._users.find_by_id(identity.user_id)

    def authenticate(self, access_token: str) -> AuthIdentity:
        """Verify an access token by signature and expiry only."""
        payload = self._tokens.verify_token(self._settings.access_secret, access_token)
        return AuthIdentity.from_payload(payload)

    def _start_session(self, user: User, client: ClientContext) -> AuthResponse:
        access_token, access_payload = self._tokens.create_token(
            self._settings.access_secret, user.id, self._settings.access_duration
        )
        refresh_token, refresh_payload = self._tokens.create_token(
            self._settings.refresh_secret, user.id, self._settings.refresh_duration
        )
        session = self._sessions.create(
            Session(
                id=refresh_payload.id,
                user_id=refresh_payload.user_id,
                refresh_token=refresh_token,
                user_agent=client.user_agent or "",
                client_ip=client.client_ip or "",
                is_blocked=False,
                expires_at=refresh_payload.expired_at,
            )
        )
        return AuthResponse(
            session_id=session.id,
            access_token=access_token,
            access_token_issued_at=access_payload.issued_at,
            access_token_expires_at=access_payload.expired_at,
            refresh_token=refresh_token,
            refresh_token_expires_at=refresh_payload.expired_at,
        )

    def _burn_verify(self, password: str) -> None:
        try:
            self._hasher.verify(password, self._dummy_hash)
        except MismatchError:
            pass
