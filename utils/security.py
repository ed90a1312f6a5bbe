"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Signed, time-bounded tokens via PyJWT
- Token identifiers (JTI) as UUID4 strings

Both helpers are plain objects built once by the application factory and
handed to the services that need them.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Tuple

import jwt
from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError

from services.exceptions import (
    HashingError,
    InvalidSignature,
    InvalidToken,
    MismatchError,
    TokenExpired,
)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


class PasswordHasher:
    """One-way hashing of user credentials with argon2id.

    Every call to hash() draws a fresh random salt, which argon2 embeds in the
    encoded output, so verify() only needs the plaintext and the stored hash.
    """

    def __init__(self, time_cost: int | None = None, memory_cost: int | None = None,
                 parallelism: int | None = None):
        options = {
            "time_cost": time_cost,
            "memory_cost": memory_cost,
            "parallelism": parallelism,
        }
        self._ph = Argon2Hasher(**{k: v for k, v in options.items() if v is not None})

    def hash(self, password: str) -> str:
        """Hash a plaintext password using Argon2
        """
        if not isinstance(password, str) or not password:
            raise HashingError("Password must be a non-empty string")
        try:
            return self._ph.hash(password)
        except Argon2HashingError as exc:
            raise HashingError(str(exc)) from exc

    def verify(self, password: str, password_hash: str) -> None:
        """Verify a plaintext password against a stored hash.

        A malformed hash and a wrong password raise the same MismatchError.
        """
        try:
            self._ph.verify(password_hash, password)
        except (VerificationError, InvalidHashError, TypeError) as exc:
            raise MismatchError() from exc


@dataclass(frozen=True)
class TokenPayload:
    id: str
    user_id: str
    issued_at: datetime
    expired_at: datetime

    def claims(self) -> Dict[str, Any]:
        return {
            "jti": self.id,
            "sub": self.user_id,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expired_at.timestamp()),
        }

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "TokenPayload":
        try:
            return cls(
                id=str(uuid.UUID(str(claims["jti"]))),
                user_id=str(uuid.UUID(str(claims["sub"]))),
                issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=timezone.utc),
                expired_at=datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc


class TokenMaker:
    """Creates and verifies signed tokens carrying a TokenPayload.

    The maker is stateless apart from the signing algorithm and its clock;
    secrets and durations are supplied per call so one instance serves both
    access and refresh tokens. Verification never touches storage.
    """

    def __init__(self, algorithm: str = "HS256", clock: Clock | None = None):
        self.algorithm = algorithm
        self._now = clock or utcnow

    def create_token(self, secret: str, user_id: str, duration: timedelta) -> Tuple[str, TokenPayload]:
        # NumericDate claims carry whole seconds only
        now = self._now().replace(microsecond=0)
        payload = TokenPayload(
            id=generate_jti(),
            user_id=str(user_id),
            issued_at=now,
            expired_at=(now + duration).replace(microsecond=0),
        )
        token = jwt.encode(payload.claims(), secret, algorithm=self.algorithm)
        return token, payload

    def verify_token(self, secret: str, token: str) -> TokenPayload:
        """
        Decode and validate a token. Raises InvalidSignature when the token was
        not signed with `secret`, TokenExpired once its expiry has passed and
        InvalidToken for anything else that does not decode to a payload.
        """
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["jti", "sub", "iat", "exp"],
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature() from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(f"Invalid token: {exc}") from exc

        payload = TokenPayload.from_claims(claims)
        # expiry is checked against our clock rather than PyJWT's
        if self._now() > payload.expired_at:
            raise TokenExpired()
        return payload
