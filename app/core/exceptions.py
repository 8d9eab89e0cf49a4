"""
Base exception classes for application-wide error handling.

Every failure the chat core reports to its caller is one of these typed
errors. Each carries a human-readable message, a machine-readable code and
optional details, so the transport layer can map them to responses without
inspecting message text.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Payload or argument validation failures
    │   └── InvalidArgumentError - Malformed call arguments (self-chat, paging)
    ├── NotFoundError - Resource missing or not visible to the caller
    ├── UnauthorizedError - No authenticated identity
    └── PermissionDeniedError - Authenticated but lacking a capability

Usage:
    from core.exceptions import NotFoundError, ValidationError

    raise ValidationError(
        "IMAGE messages require file_url",
        error_code="MISSING_FIELD",
        details={"field": "file_url"},
    )

    try:
        ...
    except BaseApplicationError as e:
        payload = e.to_dict()
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
        details: Additional error context (field names, ids, etc.)
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
        Convert exception to dictionary for an API response.

        Returns:
            Dict with error, error_code, and (when present) details keys
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
    """
    Raised when input validation fails.

    Use for:
    - Message payloads missing a field their kind requires
    - Content that breaks a length limit
    - A reply target that lives in another room

    Put the offending field name in details["field"] when there is one.
    """

    default_error_code: str = "VALIDATION_ERROR"


class InvalidArgumentError(ValidationError):
    """
    Raised when an operation is called with arguments that can never succeed.

    Examples: opening a direct room with yourself, negative page index,
    non-positive page size, a user id that does not resolve.

    Subclasses ValidationError so callers that only distinguish
    "bad input" from other failures can catch the parent.
    """

    default_error_code: str = "INVALID_ARGUMENT"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Also used when the resource exists but the caller may not know that,
    e.g. a direct room the caller does not participate in.
    """

    default_error_code: str = "NOT_FOUND"


class UnauthorizedError(BaseApplicationError):
    """Raised when no authenticated identity is present."""

    default_error_code: str = "UNAUTHORIZED"


class PermissionDeniedError(BaseApplicationError):
    """
    Raised when an authenticated user lacks permission for an operation.

    Use for:
    - Sending to a group the user is not a member of
    - Sending to an admin-only room without admin capability
    """

    default_error_code: str = "PERMISSION_DENIED"
