"""
Storage contracts consumed by AuthService.

Stores are consistent key-value lookups: a record created through a store is
visible to the next lookup on the same store. Create must be atomic per call
and duplicate detection belongs to the store (a uniqueness constraint), not to
a check-then-insert in the service.
"""
from __future__ import annotations

from typing import Protocol

from models.session import Session
from models.user import User


class UserStore(Protocol):
    def create(self, user: User) -> User:
        """Persist `user`; raises DuplicateEmailError if the email is taken."""

    def find_by_email(self, email: str) -> User:
        """Raises NotFoundError when no user has `email`."""

    def find_by_id(self, user_id: str) -> User:
        """Raises NotFoundError when no user has `user_id`."""


class SessionStore(Protocol):
    def create(self, session: Session) -> Session:
        """Persist `session`; raises DuplicateError if its id exists."""

    def find_by_id(self, session_id: str) -> Session:
        """Raises NotFoundError when no session has `session_id`."""

    def block(self, session_id: str) -> Session:
        """Mark the session blocked; raises NotFoundError when missing."""
