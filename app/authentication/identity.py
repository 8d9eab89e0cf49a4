"""
Caller identity resolution.

Transport code (views, consumers) authenticates the request and hands the
resulting user object to the chat services. Services never read ambient
per-thread state to find out who is calling; they receive the caller
explicitly and pass it through resolve_caller() first.

Usage:
    from authentication.identity import resolve_caller

    caller = resolve_caller(request.user)  # raises UnauthorizedError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import UnauthorizedError

if TYPE_CHECKING:
    from authentication.models import User


def resolve_caller(user) -> User:
    """
    Return the authenticated, active user behind a request.

    Args:
        user: A User, django AnonymousUser, or None

    Returns:
        The authenticated User

    Raises:
        UnauthorizedError: No authenticated identity is present, or the
            account has been deactivated
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise UnauthorizedError(
            "Authentication required",
            error_code="AUTHENTICATION_REQUIRED",
        )
    if not user.is_active:
        raise UnauthorizedError(
            "This account is inactive",
            error_code="ACCOUNT_INACTIVE",
            details={"user_id": user.pk},
        )
    return user
