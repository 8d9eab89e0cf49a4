"""
Group models.

Models:
    Group: A forum group owned by one user
    GroupMember: A user's membership in a group, with admin flag and alias

Design Decisions:
    - The owner is implicitly a member and an admin, whether or not a
      GroupMember row exists for them
    - display_name is a per-group alias, distinct from the global nickname
    - Groups are soft deleted; deleted groups are invisible to chat
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.model_mixins import SoftDeleteMixin
from core.models import BaseModel


class Group(SoftDeleteMixin, BaseModel):
    """
    A forum group.

    Fields:
        name: Group name
        description: Free-form description
        owner: User who owns the group (always admin)
        profile_image_url: Group avatar URL
    """

    name = models.CharField(
        max_length=200,
        help_text="Group name",
    )

    description = models.TextField(
        blank=True,
        default="",
        help_text="Group description",
    )

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="owned_groups",
        help_text="User who owns this group",
    )

    profile_image_url = models.URLField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Group avatar URL",
    )

    class Meta:
        db_table = "groups_group"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Group: {self.name}"


class GroupMember(BaseModel):
    """
    Membership of a user in a group.

    Fields:
        group: Group the user belongs to
        user: Member
        is_admin: Whether the member holds admin capability
        display_name: Per-group alias shown in group chat (optional)

    Constraints:
        - UniqueConstraint(group, user): one membership row per pair
    """

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="members",
        help_text="Group this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_memberships",
        help_text="Member user",
    )

    is_admin = models.BooleanField(
        default=False,
        help_text="Whether this member is a group admin",
    )

    display_name = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Per-group alias shown in group chat",
    )

    class Meta:
        db_table = "groups_group_member"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["group", "user"],
                name="unique_group_member",
            ),
        ]

    def __str__(self) -> str:
        role = "admin" if self.is_admin else "member"
        return f"GroupMember: {self.user_id} in {self.group_id} ({role})"
