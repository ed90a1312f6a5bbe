"""
Error taxonomy shared by the service layer and the HTTP error envelope.

Every error carries a machine readable `code` and the HTTP `status` the API
answers with. Handlers in api.errors rely on these two attributes only.
"""
from __future__ import annotations


class ServiceError(Exception):
    code = "SERVICE_ERROR"
    status = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# password hashing
class HashingError(ServiceError):
    code = "HASHING_ERROR"
    status = 422
    default_message = "Password could not be hashed"


class MismatchError(ServiceError):
    code = "PASSWORD_MISMATCH"
    status = 401
    default_message = "Password does not match"


# persistence
class DuplicateError(ServiceError):
    code = "CONFLICT"
    status = 409
    default_message = "Record already exists"


class DuplicateEmailError(DuplicateError):
    default_message = "Email already registered"


class NotFoundError(ServiceError):
    code = "NOT_FOUND"
    status = 404
    default_message = "Resource not found"


# credentials
class InvalidCredentials(ServiceError):
    code = "INVALID_CREDENTIALS"
    status = 401
    default_message = "Invalid email or password"


# tokens
class InvalidToken(ServiceError):
    code = "INVALID_TOKEN"
    status = 401
    default_message = "Token is invalid"


class InvalidSignature(InvalidToken):
    code = "INVALID_SIGNATURE"
    default_message = "Token signature is invalid"


class TokenExpired(InvalidToken):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


# session policy on refresh
class SessionError(ServiceError):
    code = "SESSION_ERROR"
    status = 401


class SessionBlocked(SessionError):
    code = "SESSION_BLOCKED"
    default_message = "Refresh token is blocked"


class SessionMismatch(SessionError):
    code = "SESSION_MISMATCH"
    default_message = "Refresh token is not valid for this session"


class SessionExpired(SessionError):
    code = "SESSION_EXPIRED"
    default_message = "Session has expired"


# payments
class UnsupportedProvider(ServiceError):
    code = "UNSUPPORTED_PROVIDER"
    status = 422
    default_message = "Payment provider is not supported"


class PaymentError(ServiceError):
    code = "PAYMENT_ERROR"
    status = 502
    default_message = "Payment could not be completed"
