"""
Authentication models.

This module defines the user model the chat core identifies callers by:
- User: Custom user model with email-based login and public forum profile

The public profile fields (username, nickname, profile image) are what other
users see next to chat messages and in room lists.

Related files:
    - managers.py: Custom user manager for email-based creation
    - identity.py: Resolves the calling user from request context
    - services.py: ProfileService public profile lookup
"""

import re

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.core.exceptions import ValidationError
from django.db import models

from authentication.managers import UserManager


def validate_username_format(value):
    """Validate username format: 3-30 chars, alphanumeric + _ + -."""
    if not re.match(r"^[a-zA-Z0-9_-]{3,30}$", value):
        raise ValidationError(
            "Username must be 3-30 characters and contain only "
            "letters, numbers, underscores, and hyphens."
        )


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the login identifier.

    Fields:
        email: Login identifier, unique
        username: Public handle shown in chat, unique
        nickname: Free-form display name shown in chat
        profile_image_url: URL of the avatar (upload handling lives elsewhere)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created
        updated_at: When the user record was last modified
    """

    email = models.EmailField(
        unique=True,
        max_length=254,
        help_text="User's email address (login identifier)",
    )

    username = models.CharField(
        max_length=30,
        unique=True,
        validators=[validate_username_format],
        help_text="Public handle (3-30 chars, alphanumeric, _ and -)",
    )

    nickname = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Display name shown next to messages",
    )

    profile_image_url = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Avatar URL",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        """Return the user's username as string representation."""
        return self.username

    def get_full_name(self):
        return self.nickname or self.username

    def get_short_name(self):
        return self.username
