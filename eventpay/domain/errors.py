"""Domain error kinds surfaced to API callers."""

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    STORE_ERROR = "STORE_ERROR"


class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(DomainError, ValueError):
    """Missing or malformed input. Never retried, never defaulted."""

    code = ErrorCode.VALIDATION_ERROR


class NotFoundError(DomainError, LookupError):
    """A referenced user / event does not exist."""

    code = ErrorCode.NOT_FOUND


class StoreError(DomainError):
    """The underlying store is unavailable or rejected a write."""

    code = ErrorCode.STORE_ERROR
