"""Service-level errors.

The user service raises these to report why an operation failed. Each error
carries an ``ErrorKind``; the HTTP layer maps the kind to a status code in a
single place (see ``users_api.main``).
"""

from enum import Enum


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid. The app must not start."""


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE_UNAVAILABLE = "store_unavailable"
    STORE_ERROR = "store_error"
    HASHING_FAILED = "hashing_failed"


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    kind: ErrorKind = ErrorKind.STORE_ERROR
    message = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UserNotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    message = "User not found"

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class DuplicateEmailError(ServiceError):
    kind = ErrorKind.CONFLICT
    message = "A user with that email already exists"


class StoreUnavailableError(ServiceError):
    kind = ErrorKind.STORE_UNAVAILABLE
    message = "Database unavailable"


class StoreError(ServiceError):
    kind = ErrorKind.STORE_ERROR
    message = "Database error"


class PasswordHashingError(ServiceError):
    kind = ErrorKind.HASHING_FAILED
    message = "Failed to hash password"
