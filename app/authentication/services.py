"""
Public profile lookup.

Chat rendering needs a handful of public fields for any user id: the
username, nickname and avatar. This module resolves them without exposing
the full User row to callers.

Related files:
    - models.py: User
    - identity.py: Caller resolution
"""

from __future__ import annotations

from dataclasses import dataclass

from core.exceptions import NotFoundError
from core.services import BaseService

from authentication.models import User


@dataclass(frozen=True)
class PublicProfile:
    """Public fields shown next to a user's chat messages."""

    user_id: int
    username: str
    nickname: str
    profile_image_url: str | None

    @classmethod
    def from_user(cls, user: User) -> PublicProfile:
        return cls(
            user_id=user.id,
            username=user.username,
            nickname=user.nickname,
            profile_image_url=user.profile_image_url,
        )


class ProfileService(BaseService):
    """
    Service for resolving user ids to public profiles.

    Methods:
        get_public_profile: Profile for a single user id
        user_exists: Whether an id resolves to a user
    """

    @classmethod
    def get_public_profile(cls, user_id: int) -> PublicProfile:
        """
        Resolve a user id to its public profile.

        Args:
            user_id: Id of the user to look up

        Returns:
            PublicProfile for the user

        Raises:
            NotFoundError: No user with this id exists
        """
        user = User.objects.filter(pk=user_id).only(
            "id", "username", "nickname", "profile_image_url"
        ).first()
        if user is None:
            raise NotFoundError(
                f"User {user_id} not found",
                error_code="USER_NOT_FOUND",
                details={"user_id": user_id},
            )
        return PublicProfile.from_user(user)

    @classmethod
    def user_exists(cls, user_id: int | None) -> bool:
        if user_id is None:
            return False
        return User.objects.filter(pk=user_id).exists()
