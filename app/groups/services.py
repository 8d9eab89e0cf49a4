"""
Group membership service.

Answers the capability questions group chat asks before it accepts or
renders a message:
- Is this user a member of the group?
- Does this user hold admin capability in the group?
- Which alias does this user go by in the group?
- Who are the group's admins?

Membership management itself (join, leave, promote) is not part of this
service.
"""

from __future__ import annotations

from core.exceptions import NotFoundError
from core.services import BaseService

from groups.models import Group, GroupMember


class GroupMembershipService(BaseService):
    """
    Read-only membership queries.

    The owner counts as member and admin even without a GroupMember row.
    """

    @classmethod
    def get_group(cls, group_id: int) -> Group:
        """
        Fetch an active (not soft deleted) group.

        Raises:
            NotFoundError: Group missing or deleted
        """
        group = Group.objects.filter(pk=group_id, is_deleted=False).first()
        if group is None:
            raise NotFoundError(
                f"Group {group_id} not found",
                error_code="GROUP_NOT_FOUND",
                details={"group_id": group_id},
            )
        return group

    @classmethod
    def is_member(cls, group: Group, user_id: int) -> bool:
        if group.owner_id == user_id:
            return True
        return GroupMember.objects.filter(group=group, user_id=user_id).exists()

    @classmethod
    def is_admin(cls, group: Group, user_id: int) -> bool:
        if group.owner_id == user_id:
            return True
        return GroupMember.objects.filter(
            group=group, user_id=user_id, is_admin=True
        ).exists()

    @classmethod
    def get_display_name(cls, group: Group, user_id: int) -> str | None:
        """Return the member's per-group alias, or None when unset."""
        display_name = (
            GroupMember.objects.filter(group=group, user_id=user_id)
            .values_list("display_name", flat=True)
            .first()
        )
        return display_name or None

    @classmethod
    def get_admin_ids(cls, group: Group) -> set[int]:
        """Return ids of the owner and every admin member."""
        admin_ids = set(
            GroupMember.objects.filter(group=group, is_admin=True).values_list(
                "user_id", flat=True
            )
        )
        admin_ids.add(group.owner_id)
        return admin_ids
