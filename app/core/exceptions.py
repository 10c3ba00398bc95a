"""
Application exception hierarchy.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Malformed input
    ├── NotFoundError - Referenced record does not exist
    ├── PermissionDeniedError - Authenticated but not allowed
    └── ConflictError - State conflicts (duplicates, concurrent modifications)

Services return ServiceResult for expected failures. These exceptions are
raised where a result wrapper does not fit, e.g. inside the WebSocket
gateway where a handler aborts and reports a scoped error event.

Usage:
    from core.exceptions import PermissionDeniedError

    raise PermissionDeniedError(
        "You are not a participant in this conversation",
        error_code="NOT_PARTICIPANT",
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to a response/event body.

        Example:
            {"error": "Conversation not found", "error_code": "CONVERSATION_NOT_FOUND"}
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """Raised when input is malformed or a required field is missing."""

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """Raised when a referenced conversation, message or user does not exist."""

    default_error_code: str = "NOT_FOUND"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user may not perform an operation.

    Use for:
    - Acting on a conversation the user does not participate in
    - Role restrictions (a player starting a conversation)
    - Players sending into a locked conversation

    Note:
        Missing or invalid credentials are authentication failures and are
        handled by SimpleJWT (REST) or the WebSocket middleware (close 4001).
    """

    default_error_code: str = "PERMISSION_DENIED"


class ConflictError(BaseApplicationError):
    """Raised when an operation conflicts with current record state."""

    default_error_code: str = "CONFLICT"


# Error codes produced by services, mapped to the exception class that
# represents them when a failed ServiceResult has to be raised.
ERROR_CODE_EXCEPTIONS: dict[str, type[BaseApplicationError]] = {
    "VALIDATION_ERROR": ValidationError,
    "EMPTY_MESSAGE": ValidationError,
    "SAME_USER": ValidationError,
    "FILE_TOO_LARGE": ValidationError,
    "UNSUPPORTED_FILE_TYPE": ValidationError,
    "NO_CONVERSATIONS": ValidationError,
    "NOT_FOUND": NotFoundError,
    "MESSAGE_NOT_FOUND": NotFoundError,
    "CONVERSATION_NOT_FOUND": NotFoundError,
    "USER_NOT_FOUND": NotFoundError,
    "PERMISSION_DENIED": PermissionDeniedError,
    "NOT_PARTICIPANT": PermissionDeniedError,
    "CONVERSATION_LOCKED": PermissionDeniedError,
    "INVALID_ROLE": PermissionDeniedError,
    "CONFLICT": ConflictError,
}


def exception_for(error: str, error_code: str | None) -> BaseApplicationError:
    """Build the exception matching a service error code."""
    exc_class = ERROR_CODE_EXCEPTIONS.get(error_code or "", BaseApplicationError)
    return exc_class(error, error_code=error_code)
