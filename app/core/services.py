"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from transport and models.
    Models hold data and constraints, services hold the rules.

Pattern Comparison:
    - ServiceResult: Returned by caller-facing services for expected
      failures (validation, permissions, missing resources)
    - Exceptions: Raised by inner components and for unexpected failures
      (database errors, bugs); caller-facing services convert the
      core.exceptions ones with ServiceResult.from_exception()

Usage:
    from core.services import BaseService, ServiceResult

    class RoomService(BaseService):
        @classmethod
        def create(cls, name: str) -> ServiceResult[Room]:
            if not name.strip():
                return ServiceResult.failure(
                    "name must not be blank",
                    error_code="EMPTY_NAME",
                    error_type="VALIDATION_ERROR",
                    errors={"name": ["must not be blank"]},
                )

            with cls.atomic():
                room = Room.objects.create(name=name)

            cls.get_logger().info(f"Created room {room.id}")
            return ServiceResult.success(room)

    # In transport code
    result = RoomService.create(name)
    if result.success:
        room = result.data
    else:
        payload = result.to_response()

Related:
    - core.exceptions: Typed errors raised by inner components
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

from core.exceptions import BaseApplicationError

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        error_type: Failure category, the default_error_code of the matching
            core.exceptions class (NOT_FOUND, PERMISSION_DENIED, ...)
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(dto)

        # Failure case
        return ServiceResult.failure(
            "Cannot open a direct chat with yourself",
            error_code="SELF_CHAT",
            error_type="INVALID_ARGUMENT",
        )

        # Check result
        result = ChatService.send_message(user, room_id, payload)
        if result:
            message = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    error_type: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T = None) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data (None for operations with nothing to return)

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        error_type: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            error_type: Failure category (defaults to error_code)
            errors: Field-level errors (for validation failures)

        Returns:
            ServiceResult with success=False and error details
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            error_type=error_type or error_code,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their code, their category and the offending
        field (details["field"]) as a field-level error. Other exceptions
        are reported under their class name.

        Example:
            try:
                room = RoomRegistry.get_or_create_room(a, b)
            except BaseApplicationError as e:
                return ServiceResult.from_exception(e)
        """
        if isinstance(exc, BaseApplicationError):
            field_name = exc.details.get("field")
            return cls.failure(
                exc.message,
                error_code=error_code or exc.error_code,
                error_type=exc.default_error_code,
                errors={field_name: [exc.message]} if field_name else None,
            )
        return cls.failure(
            str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.error_type:
            response["error_type"] = self.error_type
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        """
        Allow using result in boolean context.

        Example:
            result = GroupChatService.mark_message_read(user, message_id)
            if result:  # Same as: if result.success
                ...
        """
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides:
    - Logging named after the concrete service
    - Database transaction management

    Design Notes:
        - Use @classmethod (no instance state)
        - Services are stateless; the caller is passed into every operation
        - Caller-facing services return ServiceResult for expected failures
        - Inner components raise core.exceptions
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        If any operation in the block fails, all changes are rolled back.
        Thin wrapper around Django's transaction.atomic() that makes
        transaction boundaries explicit in service code.
        """
        with transaction.atomic():
            yield
