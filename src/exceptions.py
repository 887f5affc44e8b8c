"""Domain exception hierarchy for structured error responses."""

from __future__ import annotations


class AppException(Exception):
    """Base exception for all domain errors.

    Subclasses set ``code`` and ``status_code`` at the class level; callers
    provide ``message`` and an optional ``details`` list.
    """

    code: str = "APP_ERROR"
    status_code: int = 500

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or []


class NotFoundException(AppException):
    code = "NOT_FOUND"
    status_code = 404


class UnauthorizedException(AppException):
    code = "UNAUTHORIZED"
    status_code = 401


class ValidationException(AppException):
    code = "VALIDATION_ERROR"
    status_code = 422


class PersistenceException(AppException):
    code = "PERSISTENCE_ERROR"
    status_code = 503


class SideEffectFailure(AppException):
    """A best-effort follow-up action failed.

    Raised by collaborators and absorbed by the caller; never rendered to a
    client directly.
    """

    code = "SIDE_EFFECT_FAILED"
    status_code = 500
