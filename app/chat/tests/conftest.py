"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures for direct chat (alice, bob, outsider)
- A direct room between alice and bob
- Group fixtures: owner, admin member, plain member, non-member
- Group rooms (regular and admin-only)

Usage:
    def test_example(direct_room, alice):
        summary = ChatService.get_or_create_room(alice, direct_room.user_high_id).data
        assert summary.room_id == direct_room.id
"""

import pytest

from authentication.tests.factories import UserFactory
from chat.services import RoomRegistry
from chat.tests.factories import GroupChatRoomFactory
from groups.tests.factories import GroupFactory, GroupMemberFactory


# =============================================================================
# Direct Chat Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    """First direct chat participant."""
    return UserFactory(username="alice", nickname="Alice")


@pytest.fixture
def bob(db):
    """Second direct chat participant."""
    return UserFactory(username="bob", nickname="Bob")


@pytest.fixture
def outsider(db):
    """A user who is not in any test room."""
    return UserFactory(username="outsider")


@pytest.fixture
def direct_room(alice, bob):
    """The canonical direct room between alice and bob."""
    return RoomRegistry.get_or_create_room(alice.id, bob.id)


# =============================================================================
# Group Chat Fixtures
# =============================================================================


@pytest.fixture
def group_owner(db):
    """Owner of the test group (implicitly admin)."""
    return UserFactory(username="owner")


@pytest.fixture
def group(group_owner):
    return GroupFactory(owner=group_owner, name="Hiking Club")


@pytest.fixture
def group_admin(group):
    """A member with admin capability."""
    return GroupMemberFactory(group=group, is_admin=True).user


@pytest.fixture
def group_member(group):
    """A plain member with a per-group alias."""
    return GroupMemberFactory(group=group, display_name="Trailblazer").user


@pytest.fixture
def non_member(db):
    """A user who does not belong to the test group."""
    return UserFactory(username="stranger")


@pytest.fixture
def general_room(group):
    """A regular room every member can use."""
    return GroupChatRoomFactory(group=group, name="general")


@pytest.fixture
def admin_room(group):
    """An admin-only room."""
    return GroupChatRoomFactory(group=group, name="moderators", is_admin_room=True)
