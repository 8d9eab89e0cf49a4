"""
Tests for direct (1:1) chat.

This module tests:
- RoomRegistry: canonical room identity, listing, other participant
- MessageStore: payload validation, sequencing, paging, unread counting
- ReadTracker: monotonic read pointers and unread counts
- ChatService: caller-facing operations and their error contracts

Test Organization:
    - Each component has its own test class
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>
"""

from datetime import datetime, timezone as dt_timezone
from unittest import mock

import pytest
from django.contrib.auth.models import AnonymousUser
from freezegun import freeze_time

from authentication.tests.factories import UserFactory
from chat.constants import MESSAGE_CONFIG, PAGINATION_CONFIG
from chat.dto import MessagePayload
from chat.models import DirectChatRoom, DirectMessage, DirectReadStatus, MessageType
from chat.services import (
    ChatService,
    MessageStore,
    ReadTracker,
    RoomRegistry,
    paginate,
)
from core.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    ValidationError,
)


def text(body):
    return MessagePayload.text(body)


def image(file_url="https://cdn.example.com/cat.png", body=None):
    return MessagePayload(
        message_type=MessageType.IMAGE, body=body, file_url=file_url
    )


def file_payload(**overrides):
    fields = {
        "message_type": MessageType.FILE,
        "file_url": "https://cdn.example.com/notes.pdf",
        "file_name": "notes.pdf",
        "file_size": 1024,
    }
    fields.update(overrides)
    return MessagePayload(**fields)


# =============================================================================
# TestRoomRegistry
# =============================================================================


class TestRoomRegistry:
    """
    Tests for RoomRegistry.

    Verifies:
    - Symmetric get-or-create for an unordered pair
    - Rejection of self-chat and unknown users
    - Listing and other-participant resolution
    """

    def test_both_orders_return_same_room(self, alice, bob):
        """
        get_or_create_room(A, B) and (B, A) resolve to one room.

        Why it matters: users must always land in the same conversation.
        """
        room_ab = RoomRegistry.get_or_create_room(alice.id, bob.id)
        room_ba = RoomRegistry.get_or_create_room(bob.id, alice.id)

        assert room_ab.id == room_ba.id
        assert DirectChatRoom.objects.count() == 1

    def test_participants_stored_in_canonical_order(self, db):
        user_5 = UserFactory(id=5)
        user_9 = UserFactory(id=9)

        room = RoomRegistry.get_or_create_room(user_9.id, user_5.id)

        assert (room.user_low_id, room.user_high_id) == (5, 9)

    def test_self_chat_rejected(self, alice):
        with pytest.raises(InvalidArgumentError) as exc_info:
            RoomRegistry.get_or_create_room(alice.id, alice.id)

        assert exc_info.value.error_code == "SELF_CHAT"

    def test_missing_id_rejected(self, alice):
        with pytest.raises(InvalidArgumentError):
            RoomRegistry.get_or_create_room(alice.id, None)

    def test_unknown_user_rejected(self, alice):
        with pytest.raises(InvalidArgumentError) as exc_info:
            RoomRegistry.get_or_create_room(alice.id, alice.id + 1000)

        assert exc_info.value.error_code == "UNKNOWN_USER"
        assert exc_info.value.details["user_id"] == alice.id + 1000
        assert not DirectChatRoom.objects.exists()

    def test_timestamps_set_on_first_insert_only(self, alice, bob):
        with freeze_time("2026-01-01 10:00:00"):
            room = RoomRegistry.get_or_create_room(alice.id, bob.id)
        with freeze_time("2026-01-02 10:00:00"):
            again = RoomRegistry.get_or_create_room(bob.id, alice.id)

        created = datetime(2026, 1, 1, 10, 0, tzinfo=dt_timezone.utc)
        assert room.created_at == created
        assert again.created_at == created
        assert again.updated_at == created

    def test_list_rooms_most_recent_first(self, alice, bob):
        carol = UserFactory()
        with freeze_time("2026-01-01 10:00:00"):
            with_bob = RoomRegistry.get_or_create_room(alice.id, bob.id)
        with freeze_time("2026-01-01 11:00:00"):
            with_carol = RoomRegistry.get_or_create_room(alice.id, carol.id)
        with freeze_time("2026-01-01 12:00:00"):
            MessageStore.append(with_bob, bob.id, text("ping"))

        rooms = RoomRegistry.list_rooms_for(alice.id)

        assert [r.id for r in rooms] == [with_bob.id, with_carol.id]
        assert RoomRegistry.list_rooms_for(carol.id) == [with_carol]

    def test_other_participant_from_either_side(self, direct_room, alice, bob):
        assert RoomRegistry.other_participant(direct_room, alice.id) == bob.id
        assert RoomRegistry.other_participant(direct_room, bob.id) == alice.id

    def test_other_participant_rejects_outsider(self, direct_room, outsider):
        with pytest.raises(InvalidArgumentError):
            RoomRegistry.other_participant(direct_room, outsider.id)

    def test_is_participant(self, direct_room, alice, outsider):
        assert RoomRegistry.is_participant(direct_room, alice.id) is True
        assert RoomRegistry.is_participant(direct_room, outsider.id) is False


# =============================================================================
# TestMessageStoreValidation
# =============================================================================


class TestMessageStoreValidation:
    """Tests for MessageStore.validate_payload() per message type."""

    def test_text_requires_body(self):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(MessagePayload(message_type=MessageType.TEXT))

        assert exc_info.value.details["field"] == "body"
        assert "body" in exc_info.value.message

    def test_text_rejects_whitespace_body(self):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(text("   \n"))

        assert exc_info.value.details["field"] == "body"

    def test_image_without_file_url_names_file_url(self):
        """IMAGE payload without file_url fails naming file_url."""
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(image(file_url=None))

        assert exc_info.value.details["field"] == "file_url"
        assert "file_url" in exc_info.value.message

    def test_image_body_is_optional(self):
        MessageStore.validate_payload(image())

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"file_url": None}, "file_url"),
            ({"file_name": ""}, "file_name"),
            ({"file_size": None}, "file_size"),
            ({"file_size": 0}, "file_size"),
            ({"file_size": -10}, "file_size"),
        ],
    )
    def test_file_requires_url_name_and_positive_size(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(file_payload(**overrides))

        assert exc_info.value.details["field"] == field

    def test_valid_file_passes(self):
        MessageStore.validate_payload(file_payload())

    @pytest.mark.parametrize(
        "overrides,field",
        [
            ({"file_url": "   "}, "file_url"),
            ({"file_url": "\t\n"}, "file_url"),
            ({"file_name": "  "}, "file_name"),
        ],
    )
    def test_file_rejects_blank_file_reference(self, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(file_payload(**overrides))

        assert exc_info.value.details["field"] == field

    def test_image_rejects_blank_file_url(self):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(image(file_url="   "))

        assert exc_info.value.details["field"] == "file_url"

    @pytest.mark.parametrize(
        "overrides,field",
        [
            (
                {"file_name": "a" * (MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH + 1)},
                "file_name",
            ),
            (
                {"file_url": "https://" + "a" * MESSAGE_CONFIG.MAX_FILE_URL_LENGTH},
                "file_url",
            ),
        ],
    )
    def test_file_reference_length_limits(self, overrides, field):
        """
        Oversized file references fail validation instead of at insert time.

        Why it matters: PostgreSQL raises DataError for values longer than
        the column.
        """
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(file_payload(**overrides))

        assert exc_info.value.error_code == "FIELD_TOO_LONG"
        assert exc_info.value.details["field"] == field

    def test_file_reference_at_limits_passes(self):
        MessageStore.validate_payload(
            file_payload(
                file_name="a" * MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH,
                file_url="h" * MESSAGE_CONFIG.MAX_FILE_URL_LENGTH,
            )
        )

    def test_text_with_oversized_file_url_rejected(self):
        payload = MessagePayload(
            message_type=MessageType.TEXT,
            body="see link",
            file_url="h" * (MESSAGE_CONFIG.MAX_FILE_URL_LENGTH + 1),
        )

        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(payload)

        assert exc_info.value.details["field"] == "file_url"

    def test_body_length_limit(self):
        too_long = "a" * (MESSAGE_CONFIG.MAX_BODY_LENGTH + 1)

        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(text(too_long))

        assert exc_info.value.error_code == "BODY_TOO_LONG"

    def test_unknown_message_type(self):
        with pytest.raises(ValidationError) as exc_info:
            MessageStore.validate_payload(MessagePayload(message_type="VIDEO", body="x"))

        assert exc_info.value.details["field"] == "message_type"


# =============================================================================
# TestMessageStore
# =============================================================================


class TestMessageStore:
    """
    Tests for MessageStore append/latest/page/unread_since.

    Verifies:
    - Strictly increasing per-room sequence values
    - Newest-first zero-based paging
    - Unread counting against a pointer
    """

    def test_append_assigns_increasing_sequence(self, direct_room, alice, bob):
        first = MessageStore.append(direct_room, alice.id, text("one"))
        second = MessageStore.append(direct_room, bob.id, text("two"))
        third = MessageStore.append(direct_room, alice.id, image())

        assert [first.sequence, second.sequence, third.sequence] == [1, 2, 3]
        direct_room.refresh_from_db()
        assert direct_room.last_sequence == 3

    def test_sequences_are_independent_per_room(self, direct_room, alice, outsider):
        other_room = RoomRegistry.get_or_create_room(alice.id, outsider.id)
        MessageStore.append(direct_room, alice.id, text("a"))
        MessageStore.append(direct_room, alice.id, text("b"))

        message = MessageStore.append(other_room, alice.id, text("c"))

        assert message.sequence == 1

    def test_append_stamps_room_activity(self, direct_room, alice):
        with freeze_time("2026-03-01 08:30:00"):
            message = MessageStore.append(direct_room, alice.id, text("hi"))

        direct_room.refresh_from_db()
        assert direct_room.updated_at == message.created_at
        assert message.created_at == datetime(
            2026, 3, 1, 8, 30, tzinfo=dt_timezone.utc
        )

    def test_invalid_payload_persists_nothing(self, direct_room, alice):
        with pytest.raises(ValidationError):
            MessageStore.append(direct_room, alice.id, image(file_url=None))

        direct_room.refresh_from_db()
        assert direct_room.last_sequence == 0
        assert not DirectMessage.objects.exists()

    def test_file_fields_are_stored(self, direct_room, alice):
        message = MessageStore.append(direct_room, alice.id, file_payload())
        message.refresh_from_db()

        assert message.message_type == MessageType.FILE
        assert message.file_name == "notes.pdf"
        assert message.file_size == 1024

    def test_latest_is_highest_sequence(self, direct_room, alice, bob):
        assert MessageStore.latest(direct_room) is None

        MessageStore.append(direct_room, alice.id, text("old"))
        newest = MessageStore.append(direct_room, bob.id, text("new"))

        assert MessageStore.latest(direct_room).id == newest.id

    def test_latest_ignores_timestamps(self, direct_room, alice, bob):
        """Messages with identical timestamps still order by sequence."""
        with freeze_time("2026-01-01 00:00:00"):
            MessageStore.append(direct_room, alice.id, text("first"))
            second = MessageStore.append(direct_room, bob.id, text("second"))

        assert MessageStore.latest(direct_room).id == second.id

    def test_page_is_newest_first_with_totals(self, direct_room, alice):
        for i in range(5):
            MessageStore.append(direct_room, alice.id, text(f"m{i}"))

        first_page = MessageStore.page(direct_room, 0, 2)
        last_page = MessageStore.page(direct_room, 2, 2)

        assert [m.sequence for m in first_page.items] == [5, 4]
        assert [m.sequence for m in last_page.items] == [1]
        assert first_page.total_count == 5
        assert first_page.total_pages == 3
        assert first_page.has_next is True
        assert last_page.has_next is False

    def test_page_beyond_end_is_empty(self, direct_room, alice):
        MessageStore.append(direct_room, alice.id, text("only"))

        page = MessageStore.page(direct_room, 4, 10)

        assert page.items == []
        assert page.total_count == 1
        assert page.total_pages == 1

    def test_empty_room_has_zero_pages(self, direct_room):
        page = MessageStore.page(direct_room, 0, 10)

        assert page.items == []
        assert page.total_pages == 0

    def test_paginate_exact_multiple(self, direct_room, alice):
        for i in range(4):
            MessageStore.append(direct_room, alice.id, text(f"m{i}"))
        queryset = DirectMessage.objects.filter(room=direct_room).order_by("-sequence")

        last = paginate(queryset, 1, 2)
        past_end = paginate(queryset, 2, 2)

        assert [m.sequence for m in last.items] == [2, 1]
        assert last.total_pages == 2
        assert last.has_next is False
        assert past_end.items == []
        assert past_end.page == 2
        assert past_end.total_count == 4

    @pytest.mark.parametrize(
        "page_index,page_size",
        [(-1, 10), (0, 0), (0, -5), (0, PAGINATION_CONFIG.MAX_PAGE_SIZE + 1)],
    )
    def test_malformed_paging_rejected(self, direct_room, page_index, page_size):
        with pytest.raises(InvalidArgumentError):
            MessageStore.page(direct_room, page_index, page_size)

    def test_unread_since_counts_other_senders_past_pointer(
        self, direct_room, alice, bob
    ):
        MessageStore.append(direct_room, bob.id, text("1"))
        MessageStore.append(direct_room, alice.id, text("2"))
        MessageStore.append(direct_room, bob.id, text("3"))
        MessageStore.append(direct_room, bob.id, text("4"))

        assert MessageStore.unread_since(direct_room, alice.id, None) == 3
        assert MessageStore.unread_since(direct_room, alice.id, 1) == 2
        assert MessageStore.unread_since(direct_room, alice.id, 4) == 0
        assert MessageStore.unread_since(direct_room, bob.id, None) == 1


# =============================================================================
# TestReadTracker
# =============================================================================


class TestReadTracker:
    """
    Tests for ReadTracker.

    Verifies:
    - Lazy creation of read status
    - Forward-only pointer movement
    - Own-message read rule
    """

    def test_pointer_unset_before_any_read(self, direct_room, alice):
        assert ReadTracker.current_pointer(direct_room, alice.id) is None

    def test_get_or_create_status_is_idempotent(self, direct_room, alice):
        first = ReadTracker.get_or_create_status(direct_room, alice.id)
        second = ReadTracker.get_or_create_status(direct_room, alice.id)

        assert first.id == second.id
        assert DirectReadStatus.objects.filter(user=alice).count() == 1

    def test_advance_moves_pointer_forward(self, direct_room, alice, bob):
        MessageStore.append(direct_room, bob.id, text("1"))
        second = MessageStore.append(direct_room, bob.id, text("2"))

        pointer = ReadTracker.advance_read(direct_room, alice.id, second)

        assert pointer == 2
        status = DirectReadStatus.objects.get(room=direct_room, user=alice)
        assert status.last_read_message_id == second.id

    def test_advance_to_older_message_is_noop(self, direct_room, alice, bob):
        """
        The pointer never regresses.

        Why it matters: overlapping page fetches must converge on the
        highest sequence seen.
        """
        first = MessageStore.append(direct_room, bob.id, text("1"))
        second = MessageStore.append(direct_room, bob.id, text("2"))
        ReadTracker.advance_read(direct_room, alice.id, second)

        pointer = ReadTracker.advance_read(direct_room, alice.id, first)

        assert pointer == 2
        assert ReadTracker.current_pointer(direct_room, alice.id) == 2

    def test_advance_to_same_message_keeps_timestamp(self, direct_room, alice, bob):
        message = MessageStore.append(direct_room, bob.id, text("1"))
        with freeze_time("2026-01-01 09:00:00"):
            ReadTracker.advance_read(direct_room, alice.id, message)
        with freeze_time("2026-01-01 10:00:00"):
            ReadTracker.advance_read(direct_room, alice.id, message)

        status = DirectReadStatus.objects.get(room=direct_room, user=alice)
        assert status.last_read_at == datetime(2026, 1, 1, 9, 0, tzinfo=dt_timezone.utc)

    def test_advance_rejects_message_from_other_room(
        self, direct_room, alice, bob, outsider
    ):
        other_room = RoomRegistry.get_or_create_room(alice.id, outsider.id)
        foreign = MessageStore.append(other_room, outsider.id, text("x"))

        with pytest.raises(InvalidArgumentError):
            ReadTracker.advance_read(direct_room, alice.id, foreign)

        assert ReadTracker.current_pointer(direct_room, alice.id) is None

    def test_own_messages_always_read(self, direct_room, alice):
        message = MessageStore.append(direct_room, alice.id, text("mine"))

        assert ReadTracker.is_read(message, alice.id, None) is True

    def test_others_messages_read_up_to_pointer(self, direct_room, alice, bob):
        first = MessageStore.append(direct_room, bob.id, text("1"))
        second = MessageStore.append(direct_room, bob.id, text("2"))

        assert ReadTracker.is_read(first, alice.id, None) is False
        assert ReadTracker.is_read(first, alice.id, 1) is True
        assert ReadTracker.is_read(second, alice.id, 1) is False

    def test_unread_count_follows_pointer(self, direct_room, alice, bob):
        first = MessageStore.append(direct_room, bob.id, text("1"))
        MessageStore.append(direct_room, bob.id, text("2"))

        assert ReadTracker.unread_count(direct_room, alice.id) == 2
        ReadTracker.advance_read(direct_room, alice.id, first)
        assert ReadTracker.unread_count(direct_room, alice.id) == 1



# =============================================================================
# TestChatServiceRooms
# =============================================================================


class TestChatServiceRooms:
    """Tests for ChatService.get_or_create_room() and list_my_rooms()."""

    @pytest.mark.parametrize("caller", [None, AnonymousUser()])
    def test_requires_authenticated_caller(self, bob, caller):
        result = ChatService.get_or_create_room(caller, bob.id)

        assert result.success is False
        assert result.error_code == "AUTHENTICATION_REQUIRED"
        assert result.error_type == "UNAUTHORIZED"

    def test_inactive_caller_rejected(self, bob):
        inactive = UserFactory(is_active=False)

        result = ChatService.get_or_create_room(inactive, bob.id)

        assert result.error_code == "ACCOUNT_INACTIVE"
        assert result.error_type == "UNAUTHORIZED"

    def test_self_chat_rejected(self, alice):
        result = ChatService.get_or_create_room(alice, alice.id)

        assert not result
        assert result.error_code == "SELF_CHAT"
        assert result.error_type == "INVALID_ARGUMENT"
        assert "other_user_id" in result.errors
        assert not DirectChatRoom.objects.exists()

    def test_unknown_other_user_not_found(self, alice):
        result = ChatService.get_or_create_room(alice, alice.id + 1000)

        assert result.error_code == "USER_NOT_FOUND"
        assert result.error_type == "NOT_FOUND"

    def test_summary_shows_other_participant(self, alice, bob):
        bob.profile_image_url = "https://cdn.example.com/bob.png"
        bob.save(update_fields=["profile_image_url"])

        result = ChatService.get_or_create_room(alice, bob.id)

        assert result.success is True
        summary = result.data
        assert summary.other_user_id == bob.id
        assert summary.other_username == "bob"
        assert summary.other_nickname == "Bob"
        assert summary.other_profile_image_url == "https://cdn.example.com/bob.png"
        assert summary.last_message is None
        assert summary.last_message_time is None
        assert summary.unread_count == 0

    def test_summary_shows_latest_message_and_unread(self, alice, bob, direct_room):
        MessageStore.append(direct_room, bob.id, text("hey"))
        latest = MessageStore.append(direct_room, bob.id, text("you there?"))

        summary = ChatService.get_or_create_room(alice, bob.id).data

        assert summary.room_id == direct_room.id
        assert summary.last_message == "you there?"
        assert summary.last_message_type == MessageType.TEXT
        assert summary.last_message_time == latest.created_at
        assert summary.unread_count == 2

    def test_summary_previews_image_without_body(self, alice, bob, direct_room):
        MessageStore.append(direct_room, bob.id, image())

        summary = ChatService.get_or_create_room(alice, bob.id).data

        assert summary.last_message == MESSAGE_CONFIG.IMAGE_PREVIEW
        assert summary.last_message_type == MessageType.IMAGE

    def test_list_my_rooms(self, alice, bob, outsider, direct_room):
        RoomRegistry.get_or_create_room(alice.id, outsider.id)

        result = ChatService.list_my_rooms(alice)

        assert result.success is True
        assert {s.other_user_id for s in result.data} == {bob.id, outsider.id}
        assert ChatService.list_my_rooms(bob).data[0].other_user_id == alice.id

    def test_list_my_rooms_requires_caller(self):
        result = ChatService.list_my_rooms(None)

        assert result.error_type == "UNAUTHORIZED"

    def test_list_skips_rooms_that_cannot_be_rendered(
        self, alice, bob, outsider, direct_room
    ):
        """
        One broken room must not hide the others.

        Why it matters: a vanished participant would otherwise break the
        whole room list.
        """
        RoomRegistry.get_or_create_room(alice.id, outsider.id)
        original = ChatService._render_room

        def flaky_render(room, viewer_id):
            if room.has_participant(outsider.id):
                raise NotFoundError("User vanished", error_code="USER_NOT_FOUND")
            return original(room, viewer_id)

        with mock.patch.object(ChatService, "_render_room", side_effect=flaky_render):
            result = ChatService.list_my_rooms(alice)

        assert [s.other_user_id for s in result.data] == [bob.id]


# =============================================================================
# TestChatServiceMessages
# =============================================================================


class TestChatServiceMessages:
    """Tests for ChatService.get_messages() and send_message()."""

    def test_send_returns_rendered_read_message(self, alice, direct_room):
        result = ChatService.send_message(alice, direct_room.id, text("hello"))

        assert result.success is True
        dto = result.data
        assert dto.body == "hello"
        assert dto.sender_id == alice.id
        assert dto.username == "alice"
        assert dto.sequence == 1
        assert dto.is_read is True

    def test_send_advances_sender_pointer_only(self, alice, bob, direct_room):
        ChatService.send_message(alice, direct_room.id, text("hello"))

        assert ReadTracker.current_pointer(direct_room, alice.id) == 1
        assert ReadTracker.current_pointer(direct_room, bob.id) is None

    def test_send_does_not_change_own_unread_or_reduce_recipients(
        self, alice, bob, direct_room
    ):
        ChatService.send_message(bob, direct_room.id, text("1"))
        alice_before = ReadTracker.unread_count(direct_room, alice.id)
        bob_before = ReadTracker.unread_count(direct_room, bob.id)

        ChatService.send_message(bob, direct_room.id, text("2"))

        assert ReadTracker.unread_count(direct_room, bob.id) == bob_before == 0
        assert ReadTracker.unread_count(direct_room, alice.id) == alice_before + 1

    def test_send_validates_payload(self, alice, direct_room):
        result = ChatService.send_message(alice, direct_room.id, image(file_url=None))

        assert result.success is False
        assert result.error_code == "MISSING_FIELD"
        assert result.error_type == "VALIDATION_ERROR"
        assert list(result.errors) == ["file_url"]

    def test_send_rejects_oversized_file_name_without_storing(
        self, alice, direct_room
    ):
        payload = file_payload(file_name="a" * (MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH + 45))

        result = ChatService.send_message(alice, direct_room.id, payload)

        assert result.error_code == "FIELD_TOO_LONG"
        assert list(result.errors) == ["file_name"]
        assert not DirectMessage.objects.exists()

    def test_non_participant_cannot_send(self, outsider, direct_room):
        result = ChatService.send_message(outsider, direct_room.id, text("let me in"))

        assert result.error_type == "NOT_FOUND"
        assert not DirectMessage.objects.exists()

    def test_unknown_room_not_found(self, alice):
        result = ChatService.get_messages(alice, 999999, 0, 10)

        assert result.error_type == "NOT_FOUND"

    def test_non_participant_cannot_read(self, outsider, direct_room):
        result = ChatService.get_messages(outsider, direct_room.id, 0, 10)

        assert result.error_code == "ROOM_NOT_FOUND"
        assert result.to_response() == {
            "success": False,
            "error": "Chat room not found",
            "error_code": "ROOM_NOT_FOUND",
            "error_type": "NOT_FOUND",
        }

    def test_fetch_advances_pointer_to_newest_on_page(self, alice, bob, direct_room):
        for i in range(3):
            ChatService.send_message(bob, direct_room.id, text(f"m{i}"))

        page = ChatService.get_messages(alice, direct_room.id, 0, 10).data

        assert [m.sequence for m in page.items] == [3, 2, 1]
        assert all(m.is_read for m in page.items)
        assert ReadTracker.current_pointer(direct_room, alice.id) == 3
        assert ReadTracker.unread_count(direct_room, alice.id) == 0

    def test_fetching_older_page_does_not_regress_pointer(
        self, alice, bob, direct_room
    ):
        for i in range(4):
            ChatService.send_message(bob, direct_room.id, text(f"m{i}"))
        ChatService.get_messages(alice, direct_room.id, 0, 2)

        older = ChatService.get_messages(alice, direct_room.id, 1, 2).data

        assert [m.sequence for m in older.items] == [2, 1]
        assert ReadTracker.current_pointer(direct_room, alice.id) == 4

    def test_read_flags_reflect_pointer_for_partial_page(
        self, alice, bob, direct_room
    ):
        """Only the fetched page advances the pointer; newer ones stay unread."""
        for i in range(3):
            ChatService.send_message(bob, direct_room.id, text(f"m{i}"))
        ChatService.get_messages(alice, direct_room.id, 1, 2)

        assert ReadTracker.current_pointer(direct_room, alice.id) == 1
        assert ReadTracker.unread_count(direct_room, alice.id) == 2

    def test_empty_page_leaves_pointer_alone(self, alice, direct_room):
        page = ChatService.get_messages(alice, direct_room.id, 0, 10).data

        assert page.items == []
        assert ReadTracker.current_pointer(direct_room, alice.id) is None

    def test_default_page_size(self, alice, direct_room):
        page = ChatService.get_messages(alice, direct_room.id).data

        assert page.size == PAGINATION_CONFIG.DEFAULT_PAGE_SIZE

    def test_malformed_paging_rejected(self, alice, direct_room):
        result = ChatService.get_messages(alice, direct_room.id, 0, 0)

        assert result.error_code == "INVALID_PAGE_SIZE"
        assert result.error_type == "INVALID_ARGUMENT"
        assert list(result.errors) == ["size"]


# =============================================================================
# Scenario
# =============================================================================


class TestDirectChatScenario:
    def test_users_5_and_9(self, db):
        """
        Room between users 5 and 9; 9 sends "hi"; 5 fetches the page.

        After the fetch 5's pointer is at 1 and the message reads as read.
        """
        user_5 = UserFactory(id=5)
        user_9 = UserFactory(id=9)

        summary = ChatService.get_or_create_room(user_9, user_5.id).data
        room = DirectChatRoom.objects.get(pk=summary.room_id)
        assert (room.user_low_id, room.user_high_id) == (5, 9)

        sent = ChatService.send_message(user_9, room.id, text("hi")).data
        assert sent.sequence == 1
        assert ReadTracker.unread_count(room, 5) == 1

        page = ChatService.get_messages(user_5, room.id, 0, 10).data

        assert len(page.items) == 1
        assert page.items[0].body == "hi"
        assert page.items[0].is_read is True
        assert ReadTracker.current_pointer(room, 5) == 1
        assert ReadTracker.unread_count(room, 5) == 0
