"""
Service layer primitives shared by every domain app.

- ServiceResult: success/failure wrapper returned by service classmethods
- BaseService: logger and transaction helpers for service classes

Expected failures (not a participant, conversation locked, empty message)
travel back to the caller as ServiceResult.failure() with a machine-readable
error_code. Unexpected failures (database errors, bugs) are raised.

Usage:
    from core.services import BaseService, ServiceResult

    class ConversationService(BaseService):
        @classmethod
        def soft_delete(cls, ids, user) -> ServiceResult[list]:
            if not ids:
                return ServiceResult.failure(
                    "conversationIds must be a non-empty list",
                    error_code="NO_CONVERSATIONS",
                )
            with cls.atomic():
                ...
            cls.get_logger().info(f"User {user.id} deleted {len(ids)} conversations")
            return ServiceResult.success(deleted)

    # In a view
    result = ConversationService.soft_delete(ids, request.user)
    if not result.success:
        return Response(result.to_response(), status=400)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Human-readable error message if failed
        error_code: Machine-readable error code for client handling
        errors: Field-level errors for validation failures
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """Create a successful result carrying ``data``."""
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)

        Example:
            return ServiceResult.failure(
                "Only coaches and scouts can start a conversation",
                error_code="INVALID_ROLE",
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            errors=errors,
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert a failed result to the API error body.

        Returns:
            Dict with error, error_code and (optionally) field errors
        """
        response: dict[str, Any] = {"error": self.error}
        if self.error_code:
            response["error_code"] = self.error_code
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for stateless service classes.

    Services expose classmethods only. Multi-row writes go through
    ``cls.atomic()`` so they commit or roll back as a unit.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Return a logger named after the concrete service class."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute the enclosed block in a database transaction.

        Example:
            with cls.atomic():
                message = Message.objects.create(...)
                conversation.save(update_fields=[...])
                # If the conversation update fails, the message is rolled back
        """
        with transaction.atomic():
            yield
