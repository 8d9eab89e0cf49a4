"""
Groups app.

Forum groups ("모임" in the original product) and their membership records.
Only the capability checks the chat core needs are implemented here:
membership, admin capability, per-group display names.

Usage:
    from groups.services import GroupMembershipService

    if GroupMembershipService.is_admin(group, user.id):
        ...
"""
