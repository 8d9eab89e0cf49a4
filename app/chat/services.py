"""
Chat system service layer.

This module provides the business logic for the chat system, encapsulating
all operations on direct rooms, group rooms, messages and read state.

Services:
    RoomRegistry: Canonical direct room identity (get-or-create, lookup)
    MessageStore: Append-only, per-room ordered direct message log
    ReadTracker: Per-(room, user) read pointers and unread counts
    GroupChatGateway: Group room access, reply resolution, read receipts
    ChatService: Direct chat operations for an authenticated caller
    GroupChatService: Group chat operations for an authenticated caller

Design Principles:
    - Services are stateless (use class methods)
    - The caller is passed explicitly and resolved with resolve_caller()
    - ChatService and GroupChatService return ServiceResult; expected
      failures come back as ServiceResult.failure()
    - The inner components raise core.exceptions subclasses
    - Direct messages are ordered and compared by sequence, never timestamp
    - Auxiliary rendering lookups degrade instead of failing the operation
    - Notification signals fire only after the storing transaction commits

Usage:
    from chat.dto import MessagePayload
    from chat.services import ChatService, GroupChatService

    # Open (or reopen) a direct room
    result = ChatService.get_or_create_room(request.user, other_user_id=9)
    if result.success:
        summary = result.data

    # Send a message
    result = ChatService.send_message(
        request.user, summary.room_id, MessagePayload.text("hi")
    )

    # Reply in a group room
    result = GroupChatService.send_message(
        request.user, group_id=1, room_id=3, body="agreed", reply_to_id=42
    )
    if not result:
        return result.to_response()
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.core.paginator import EmptyPage, Paginator
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Q
from django.utils import timezone

from core.exceptions import (
    BaseApplicationError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService, ServiceResult

from authentication.identity import resolve_caller
from authentication.models import User
from authentication.services import ProfileService
from chat.constants import MESSAGE_CONFIG, PAGINATION_CONFIG
from chat.dto import (
    DirectMessageDTO,
    DirectRoomSummary,
    GroupMessageDTO,
    GroupRoomSummary,
    MessagePayload,
    Page,
    ReplyToMessageInfo,
)
from chat.models import (
    DirectChatRoom,
    DirectMessage,
    DirectReadStatus,
    GroupChatRoom,
    GroupMessage,
    GroupMessageRead,
    MessageType,
)
from chat.signals import direct_message_sent, group_message_sent
from groups.services import GroupMembershipService

if TYPE_CHECKING:
    from authentication.services import PublicProfile
    from groups.models import Group


def validate_paging(page_index: int, page_size: int) -> None:
    """
    Check zero-based page parameters.

    Raises:
        InvalidArgumentError: page_index < 0, page_size < 1, or page_size
            above PAGINATION_CONFIG.MAX_PAGE_SIZE
    """
    if page_index < 0:
        raise InvalidArgumentError(
            "page must be zero or greater",
            error_code="INVALID_PAGE",
            details={"field": "page", "value": page_index},
        )
    if page_size < 1 or page_size > PAGINATION_CONFIG.MAX_PAGE_SIZE:
        raise InvalidArgumentError(
            f"size must be between 1 and {PAGINATION_CONFIG.MAX_PAGE_SIZE}",
            error_code="INVALID_PAGE_SIZE",
            details={"field": "size", "value": page_size},
        )


def paginate(queryset, page_index: int, page_size: int) -> Page:
    """
    Slice an ordered queryset into one zero-based page.

    Out-of-range pages are empty rather than an error, and an empty
    queryset has zero pages.
    """
    validate_paging(page_index, page_size)
    paginator = Paginator(queryset, page_size)
    try:
        items = list(paginator.page(page_index + 1).object_list)
    except EmptyPage:
        items = []
    return Page(
        items=items,
        page=page_index,
        size=page_size,
        total_count=paginator.count,
        total_pages=paginator.num_pages if paginator.count else 0,
    )


# =============================================================================
# RoomRegistry
# =============================================================================


class RoomRegistry(BaseService):
    """
    Canonical direct room identity.

    Every unordered pair of distinct users maps to exactly one
    DirectChatRoom, stored as (lower id, higher id).

    Methods:
        get_or_create_room: Race-safe lookup or creation for a pair
        list_rooms_for: Rooms containing a user, most recent first
        other_participant: The participant that is not the given user
        is_participant: Whether a user belongs to a room
    """

    @classmethod
    def get_or_create_room(cls, user_a_id: int, user_b_id: int) -> DirectChatRoom:
        """
        Return the room for a pair of users, creating it on first contact.

        Implementation:
            1. Validate ids are present and different
            2. Canonicalize order (lower id first)
            3. Return the existing room if there is one
            4. Check both users exist
            5. Insert inside a savepoint; if a concurrent first contact won
               the unique constraint, read back the winning row

        Args:
            user_a_id: One participant
            user_b_id: The other participant (order does not matter)

        Returns:
            The existing or newly created DirectChatRoom

        Raises:
            InvalidArgumentError: Ids missing, equal, or not resolving to users
        """
        if user_a_id is None or user_b_id is None:
            raise InvalidArgumentError(
                "Both participants are required",
                error_code="MISSING_PARTICIPANT",
            )
        if user_a_id == user_b_id:
            raise InvalidArgumentError(
                "Cannot open a direct chat with yourself",
                error_code="SELF_CHAT",
                details={"user_id": user_a_id},
            )

        user_low_id, user_high_id = sorted((user_a_id, user_b_id))

        room = DirectChatRoom.objects.filter(
            user_low_id=user_low_id, user_high_id=user_high_id
        ).first()
        if room is not None:
            return room

        existing_ids = set(
            User.objects.filter(pk__in=(user_low_id, user_high_id)).values_list(
                "pk", flat=True
            )
        )
        for user_id in (user_low_id, user_high_id):
            if user_id not in existing_ids:
                raise InvalidArgumentError(
                    f"User {user_id} does not exist",
                    error_code="UNKNOWN_USER",
                    details={"user_id": user_id},
                )

        now = timezone.now()
        try:
            with transaction.atomic():
                room = DirectChatRoom.objects.create(
                    user_low_id=user_low_id,
                    user_high_id=user_high_id,
                    created_at=now,
                    updated_at=now,
                )
        except IntegrityError:
            # Lost the first-contact race; the other request's room stands
            room = DirectChatRoom.objects.get(
                user_low_id=user_low_id, user_high_id=user_high_id
            )
            cls.get_logger().debug(
                f"Concurrent creation of direct room for users "
                f"{user_low_id} and {user_high_id}, using room {room.id}"
            )
            return room

        cls.get_logger().info(
            f"Created direct room {room.id} "
            f"between users {user_low_id} and {user_high_id}"
        )
        return room

    @classmethod
    def list_rooms_for(cls, user_id: int) -> list[DirectChatRoom]:
        return list(
            DirectChatRoom.objects.filter(
                Q(user_low_id=user_id) | Q(user_high_id=user_id)
            ).order_by("-updated_at", "-id")
        )

    @classmethod
    def other_participant(cls, room: DirectChatRoom, user_id: int) -> int:
        """
        Return the id of the participant that is not user_id.

        Raises:
            InvalidArgumentError: user_id is not in the room
        """
        if user_id == room.user_low_id:
            return room.user_high_id
        if user_id == room.user_high_id:
            return room.user_low_id
        raise InvalidArgumentError(
            f"User {user_id} is not a participant of room {room.id}",
            error_code="NOT_PARTICIPANT",
            details={"room_id": room.id, "user_id": user_id},
        )

    @classmethod
    def is_participant(cls, room: DirectChatRoom, user_id: int) -> bool:
        return room.has_participant(user_id)


# =============================================================================
# MessageStore
# =============================================================================


class MessageStore(BaseService):
    """
    Append-only message log for direct rooms.

    Each room carries a last_sequence counter. Appending increments it with
    a single UPDATE inside the append transaction, so concurrent sends to
    the same room get distinct, strictly increasing sequence values. The
    unique (room, sequence) constraint backs this up.
    """

    @classmethod
    def _field_error(
        cls, field: str, message: str, error_code: str = "MISSING_FIELD"
    ) -> ValidationError:
        return ValidationError(
            message,
            error_code=error_code,
            details={"field": field},
        )

    @classmethod
    def validate_payload(cls, payload: MessagePayload) -> None:
        """
        Validate a payload against the rules for its message type.

        Rules:
            TEXT: body must be non-blank
            IMAGE: file_url required and non-blank
            FILE: file_url, file_name required and non-blank; file_size
                must be positive
            All: body, file_url and file_name within the MESSAGE_CONFIG
                length limits

        Raises:
            ValidationError: details["field"] names the offending field
        """
        message_type = payload.message_type
        if message_type not in MessageType.values:
            raise cls._field_error(
                "message_type",
                f"Unsupported message_type: {message_type!r}",
                error_code="INVALID_MESSAGE_TYPE",
            )

        if payload.body and len(payload.body) > MESSAGE_CONFIG.MAX_BODY_LENGTH:
            raise cls._field_error(
                "body",
                f"body cannot exceed {MESSAGE_CONFIG.MAX_BODY_LENGTH} characters",
                error_code="BODY_TOO_LONG",
            )
        for field, limit in (
            ("file_url", MESSAGE_CONFIG.MAX_FILE_URL_LENGTH),
            ("file_name", MESSAGE_CONFIG.MAX_FILE_NAME_LENGTH),
        ):
            value = getattr(payload, field)
            if value and len(value) > limit:
                raise cls._field_error(
                    field,
                    f"{field} cannot exceed {limit} characters",
                    error_code="FIELD_TOO_LONG",
                )

        if message_type == MessageType.TEXT:
            if not payload.body or not payload.body.strip():
                raise cls._field_error("body", "TEXT messages require body")
            return

        if not payload.file_url or not payload.file_url.strip():
            raise cls._field_error(
                "file_url", f"{message_type} messages require file_url"
            )

        if message_type == MessageType.FILE:
            if not payload.file_name or not payload.file_name.strip():
                raise cls._field_error("file_name", "FILE messages require file_name")
            if payload.file_size is None:
                raise cls._field_error("file_size", "FILE messages require file_size")
            if payload.file_size <= 0:
                raise cls._field_error(
                    "file_size",
                    "file_size must be positive",
                    error_code="INVALID_FIELD",
                )

    @classmethod
    def append(
        cls,
        room: DirectChatRoom,
        sender_id: int,
        payload: MessagePayload,
    ) -> DirectMessage:
        """
        Validate and persist a message with the room's next sequence value.

        Also stamps the room's updated_at with the message time.

        Raises:
            ValidationError: Payload invalid for its type
            NotFoundError: Room no longer exists
        """
        cls.validate_payload(payload)

        now = timezone.now()
        with cls.atomic():
            # Row lock on the room serializes concurrent appends until commit
            updated = DirectChatRoom.objects.filter(pk=room.pk).update(
                last_sequence=F("last_sequence") + 1,
                updated_at=now,
            )
            if not updated:
                raise NotFoundError(
                    "Chat room not found",
                    error_code="ROOM_NOT_FOUND",
                    details={"room_id": room.pk},
                )
            sequence = (
                DirectChatRoom.objects.filter(pk=room.pk)
                .values_list("last_sequence", flat=True)
                .get()
            )
            message = DirectMessage.objects.create(
                room_id=room.pk,
                sender_id=sender_id,
                sequence=sequence,
                message_type=payload.message_type,
                body=payload.body,
                file_url=payload.file_url,
                file_name=payload.file_name,
                file_size=payload.file_size,
                created_at=now,
            )

        room.last_sequence = sequence
        room.updated_at = now

        cls.get_logger().debug(
            f"User {sender_id} appended message {message.id} "
            f"(seq {sequence}) to direct room {room.pk}"
        )
        return message

    @classmethod
    def latest(cls, room: DirectChatRoom) -> DirectMessage | None:
        return DirectMessage.objects.filter(room=room).order_by("-sequence").first()

    @classmethod
    def page(
        cls,
        room: DirectChatRoom,
        page_index: int,
        page_size: int,
    ) -> Page[DirectMessage]:
        """
        Return one page of a room's messages, newest (highest sequence) first.

        Raises:
            InvalidArgumentError: Malformed page parameters
        """
        queryset = DirectMessage.objects.filter(room=room).order_by("-sequence")
        return paginate(queryset, page_index, page_size)

    @classmethod
    def unread_since(
        cls,
        room: DirectChatRoom,
        user_id: int,
        last_read_sequence: int | None,
    ) -> int:
        """
        Count messages from other senders past a read pointer.

        A None pointer means nothing has been read, so every message from
        the other participant counts.
        """
        queryset = DirectMessage.objects.filter(room=room).exclude(sender_id=user_id)
        if last_read_sequence is not None:
            queryset = queryset.filter(sequence__gt=last_read_sequence)
        return queryset.count()


# =============================================================================
# ReadTracker
# =============================================================================


class ReadTracker(BaseService):
    """
    Per-(room, user) last-read pointers for direct rooms.

    The pointer only moves forward. Advancing is a single conditional
    UPDATE, so overlapping advances from the same user converge on the
    highest sequence seen.
    """

    @classmethod
    def get_or_create_status(
        cls, room: DirectChatRoom, user_id: int
    ) -> DirectReadStatus:
        status, created = DirectReadStatus.objects.get_or_create(
            room=room,
            user_id=user_id,
            defaults={"last_read_at": timezone.now()},
        )
        if created:
            cls.get_logger().debug(
                f"Created read status for user {user_id} in direct room {room.pk}"
            )
        return status

    @classmethod
    def advance_read(
        cls,
        room: DirectChatRoom,
        user_id: int,
        message: DirectMessage,
    ) -> int | None:
        """
        Move the user's pointer up to message if that is forward.

        Idempotent: advancing to the current or an older message leaves the
        pointer unchanged.

        Args:
            room: Room being read
            user_id: Reader
            message: Newest message the reader has seen

        Returns:
            The pointer after the call

        Raises:
            InvalidArgumentError: message belongs to another room
        """
        if message.room_id != room.pk:
            raise InvalidArgumentError(
                "Message does not belong to this room",
                error_code="MESSAGE_NOT_IN_ROOM",
                details={"room_id": room.pk, "message_id": message.pk},
            )

        cls.get_or_create_status(room, user_id)

        advanced = (
            DirectReadStatus.objects.filter(room=room, user_id=user_id)
            .filter(
                Q(last_read_sequence__isnull=True)
                | Q(last_read_sequence__lt=message.sequence)
            )
            .update(
                last_read_message=message,
                last_read_sequence=message.sequence,
                last_read_at=timezone.now(),
            )
        )
        if advanced:
            cls.get_logger().debug(
                f"User {user_id} read direct room {room.pk} up to seq {message.sequence}"
            )

        return cls.current_pointer(room, user_id)

    @classmethod
    def current_pointer(cls, room: DirectChatRoom, user_id: int) -> int | None:
        return (
            DirectReadStatus.objects.filter(room=room, user_id=user_id)
            .values_list("last_read_sequence", flat=True)
            .first()
        )

    @classmethod
    def is_read(
        cls, message: DirectMessage, user_id: int, pointer: int | None
    ) -> bool:
        """Own messages are always read; others iff sequence <= pointer."""
        if message.sender_id == user_id:
            return True
        return pointer is not None and message.sequence <= pointer

    @classmethod
    def unread_count(cls, room: DirectChatRoom, user_id: int) -> int:
        return MessageStore.unread_since(
            room, user_id, cls.current_pointer(room, user_id)
        )


# =============================================================================
# ChatService
# =============================================================================


class ChatService(BaseService):
    """
    Direct chat operations for an authenticated caller.

    Every method takes the caller (a User, AnonymousUser or None) as its
    first argument and returns a ServiceResult. Failures carry an
    error_code plus an error_type naming the category (UNAUTHORIZED,
    NOT_FOUND, VALIDATION_ERROR, INVALID_ARGUMENT).

    Methods:
        get_or_create_room: Open a room with another user
        list_my_rooms: Summaries of the caller's rooms
        get_messages: One page of history, advancing the read pointer
        send_message: Persist a message and notify the recipient
    """

    @classmethod
    def get_or_create_room(
        cls, caller, other_user_id: int
    ) -> ServiceResult[DirectRoomSummary]:
        """
        Open (or reopen) the direct room between the caller and another user.

        Returns:
            ServiceResult with the caller's DirectRoomSummary

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            SELF_CHAT: other_user_id is the caller
            USER_NOT_FOUND: Other user does not exist
        """
        try:
            user = resolve_caller(caller)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        if other_user_id == user.pk:
            return ServiceResult.failure(
                "Cannot open a direct chat with yourself",
                error_code="SELF_CHAT",
                error_type=InvalidArgumentError.default_error_code,
                errors={"other_user_id": ["Cannot open a direct chat with yourself"]},
            )
        if not ProfileService.user_exists(other_user_id):
            return ServiceResult.failure(
                f"User {other_user_id} not found",
                error_code="USER_NOT_FOUND",
                error_type=NotFoundError.default_error_code,
            )

        try:
            room = RoomRegistry.get_or_create_room(user.pk, other_user_id)
            summary = cls._render_room(room, user.pk)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(summary)

    @classmethod
    def list_my_rooms(cls, caller) -> ServiceResult[list[DirectRoomSummary]]:
        """
        Summaries of every room the caller is in, most recent first.

        A room that cannot be summarized (e.g. the other participant no
        longer exists) is logged and skipped.
        """
        try:
            user = resolve_caller(caller)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        summaries = []
        for room in RoomRegistry.list_rooms_for(user.pk):
            try:
                summaries.append(cls._render_room(room, user.pk))
            except (NotFoundError, DatabaseError) as e:
                cls.get_logger().error(
                    f"Skipping direct room {room.pk} for user {user.pk}: {e}"
                )
        return ServiceResult.success(summaries)

    @classmethod
    def get_messages(
        cls,
        caller,
        room_id: int,
        page: int = 0,
        size: int = PAGINATION_CONFIG.DEFAULT_PAGE_SIZE,
    ) -> ServiceResult[Page[DirectMessageDTO]]:
        """
        Fetch one page of history for a room the caller participates in.

        Fetching advances the caller's read pointer to the newest message on
        the page; read flags are computed against the advanced pointer.

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            ROOM_NOT_FOUND: Room missing or caller not a participant
            INVALID_PAGE, INVALID_PAGE_SIZE: Malformed page parameters
        """
        try:
            user = resolve_caller(caller)
            room = cls._get_room_for(user.pk, room_id)
            result = MessageStore.page(room, page, size)

            if result.items:
                newest = max(result.items, key=lambda m: m.sequence)
                pointer = ReadTracker.advance_read(room, user.pk, newest)
            else:
                pointer = ReadTracker.current_pointer(room, user.pk)

            profiles: dict[int, PublicProfile] = {}
            items = []
            for message in result.items:
                if message.sender_id not in profiles:
                    profiles[message.sender_id] = ProfileService.get_public_profile(
                        message.sender_id
                    )
                items.append(
                    cls._render_message(
                        message,
                        profiles[message.sender_id],
                        is_read=ReadTracker.is_read(message, user.pk, pointer),
                    )
                )
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(
            Page(
                items=items,
                page=result.page,
                size=result.size,
                total_count=result.total_count,
                total_pages=result.total_pages,
            )
        )

    @classmethod
    def send_message(
        cls,
        caller,
        room_id: int,
        payload: MessagePayload,
    ) -> ServiceResult[DirectMessageDTO]:
        """
        Send a message to a room the caller participates in.

        The sender's own pointer advances to the new message; the
        recipient's pointer is untouched. direct_message_sent fires after
        the transaction commits.

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            ROOM_NOT_FOUND: Room missing or caller not a participant
            MISSING_FIELD, INVALID_FIELD, BODY_TOO_LONG, FIELD_TOO_LONG,
            INVALID_MESSAGE_TYPE: Payload invalid for its type
        """
        try:
            user = resolve_caller(caller)
            room = cls._get_room_for(user.pk, room_id)
            recipient_id = RoomRegistry.other_participant(room, user.pk)

            with cls.atomic():
                message = MessageStore.append(room, user.pk, payload)
                ReadTracker.advance_read(room, user.pk, message)
                transaction.on_commit(
                    lambda: direct_message_sent.send(
                        sender=DirectMessage,
                        message=message,
                        recipient_id=recipient_id,
                    )
                )

            cls.get_logger().info(
                f"User {user.pk} sent {message.message_type} message {message.id} "
                f"to direct room {room.pk}"
            )

            profile = ProfileService.get_public_profile(user.pk)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(
            cls._render_message(message, profile, is_read=True)
        )

    @classmethod
    def _get_room_for(cls, user_id: int, room_id: int) -> DirectChatRoom:
        """Rooms the user is not in are reported as missing."""
        room = DirectChatRoom.objects.filter(pk=room_id).first()
        if room is None or not RoomRegistry.is_participant(room, user_id):
            raise NotFoundError(
                "Chat room not found",
                error_code="ROOM_NOT_FOUND",
                details={"room_id": room_id},
            )
        return room

    @classmethod
    def _preview(cls, message: DirectMessage | None) -> str | None:
        if message is None:
            return None
        if message.body:
            return message.body
        if message.message_type == MessageType.IMAGE:
            return MESSAGE_CONFIG.IMAGE_PREVIEW
        if message.message_type == MessageType.FILE:
            return message.file_name or MESSAGE_CONFIG.FILE_PREVIEW
        return None

    @classmethod
    def _render_room(cls, room: DirectChatRoom, viewer_id: int) -> DirectRoomSummary:
        other_id = RoomRegistry.other_participant(room, viewer_id)
        profile = ProfileService.get_public_profile(other_id)
        latest = MessageStore.latest(room)

        summary = DirectRoomSummary(
            room_id=room.pk,
            other_user_id=other_id,
            other_username=profile.username,
            other_nickname=profile.nickname,
            other_profile_image_url=profile.profile_image_url,
            last_message=None,
            last_message_type=None,
            last_message_time=None,
            unread_count=ReadTracker.unread_count(room, viewer_id),
            updated_time=room.updated_at,
        )
        if latest is not None:
            summary.last_message = cls._preview(latest)
            summary.last_message_type = latest.message_type
            summary.last_message_time = latest.created_at
        return summary

    @classmethod
    def _render_message(
        cls,
        message: DirectMessage,
        profile: PublicProfile,
        is_read: bool,
    ) -> DirectMessageDTO:
        return DirectMessageDTO(
            id=message.pk,
            room_id=message.room_id,
            sender_id=message.sender_id,
            sequence=message.sequence,
            username=profile.username,
            nickname=profile.nickname,
            profile_image_url=profile.profile_image_url,
            message_type=message.message_type,
            body=message.body,
            file_url=message.file_url,
            file_name=message.file_name,
            file_size=message.file_size,
            created_at=message.created_at,
            is_read=is_read,
        )


# =============================================================================
# GroupChatGateway
# =============================================================================


class GroupChatGateway(BaseService):
    """
    Group room rules shared by the group chat operations.

    Methods:
        check_room_access: Membership and admin-room checks
        resolve_reply: Reply target lookup, same-room only
        mark_read: Idempotent read marker + counter increment
        admin_ids: Owner plus admin members, degrading to owner only
        render: GroupMessageDTO with alias, admin flag and reply summary
    """

    @classmethod
    def check_room_access(cls, group: Group, room: GroupChatRoom, user_id: int) -> None:
        """
        Raises:
            PermissionDeniedError: Not a group member, or admin room and
                not an admin
        """
        if not GroupMembershipService.is_member(group, user_id):
            raise PermissionDeniedError(
                "You are not a member of this group",
                error_code="NOT_GROUP_MEMBER",
                details={"group_id": group.pk},
            )
        if room.is_admin_room and not GroupMembershipService.is_admin(group, user_id):
            raise PermissionDeniedError(
                "Only group admins can use this room",
                error_code="ADMIN_ROOM_ONLY",
                details={"group_id": group.pk, "room_id": room.pk},
            )

    @classmethod
    def resolve_reply(
        cls, room: GroupChatRoom, reply_to_id: int | None
    ) -> GroupMessage | None:
        """
        Look up the message being replied to.

        Raises:
            NotFoundError: No message with reply_to_id
            InvalidArgumentError: The message is in a different room
        """
        if reply_to_id is None:
            return None

        target = GroupMessage.objects.filter(pk=reply_to_id).first()
        if target is None:
            raise NotFoundError(
                "Message being replied to was not found",
                error_code="REPLY_NOT_FOUND",
                details={"field": "reply_to_id", "message_id": reply_to_id},
            )
        if target.room_id != room.pk:
            raise InvalidArgumentError(
                "reply_to_id must reference a message in the same room",
                error_code="REPLY_NOT_IN_ROOM",
                details={"field": "reply_to_id", "message_id": reply_to_id},
            )
        return target

    @classmethod
    def mark_read(cls, message: GroupMessage, user_id: int) -> bool:
        """
        Record that user_id has read message.

        Inserting the marker and incrementing read_count happen in one
        transaction. A duplicate marker, including one lost to a concurrent
        insert, leaves the counter alone.

        Returns:
            True if this call created the marker
        """
        with cls.atomic():
            _, created = GroupMessageRead.objects.get_or_create(
                message=message,
                user_id=user_id,
                defaults={"read_at": timezone.now()},
            )
            if created:
                GroupMessage.objects.filter(pk=message.pk).update(
                    read_count=F("read_count") + 1
                )

        if created:
            cls.get_logger().debug(f"User {user_id} read group message {message.pk}")
        return created

    @classmethod
    def admin_ids(cls, group: Group) -> set[int]:
        try:
            return GroupMembershipService.get_admin_ids(group)
        except Exception as e:
            cls.get_logger().warning(
                f"Could not resolve admins of group {group.pk}, "
                f"falling back to owner only: {e}"
            )
            return {group.owner_id}

    @classmethod
    def _display_name(cls, group: Group, user_id: int) -> str | None:
        try:
            return GroupMembershipService.get_display_name(group, user_id)
        except Exception as e:
            cls.get_logger().warning(
                f"Could not resolve display name of user {user_id} "
                f"in group {group.pk}: {e}"
            )
            return None

    @classmethod
    def _render_reply(cls, reply_to_id: int, group: Group) -> ReplyToMessageInfo | None:
        try:
            target = GroupMessage.objects.get(pk=reply_to_id)
            profile = ProfileService.get_public_profile(target.sender_id)
        except Exception as e:
            cls.get_logger().warning(
                f"Could not render reply target {reply_to_id}: {e}"
            )
            return None

        return ReplyToMessageInfo(
            id=target.pk,
            body=target.body,
            sender_id=target.sender_id,
            username=profile.username,
            nickname=profile.nickname,
            display_name=cls._display_name(group, target.sender_id),
            profile_image_url=profile.profile_image_url,
        )

    @classmethod
    def render(
        cls,
        message: GroupMessage,
        group: Group,
        admin_ids: set[int] | None = None,
    ) -> GroupMessageDTO:
        """
        Render a group message for display.

        Args:
            message: Message to render
            group: Group owning the message's room
            admin_ids: Precomputed admin set (resolved when omitted)

        Raises:
            NotFoundError: Sender no longer exists
        """
        if admin_ids is None:
            admin_ids = cls.admin_ids(group)

        profile = ProfileService.get_public_profile(message.sender_id)

        dto = GroupMessageDTO(
            id=message.pk,
            room_id=message.room_id,
            sender_id=message.sender_id,
            body=message.body,
            username=profile.username,
            nickname=profile.nickname,
            profile_image_url=profile.profile_image_url,
            display_name=cls._display_name(group, message.sender_id),
            is_admin=message.sender_id in admin_ids,
            read_count=message.read_count,
            created_at=message.created_at,
        )
        if message.reply_to_id is not None:
            dto.reply_to_message_id = message.reply_to_id
            dto.reply_to = cls._render_reply(message.reply_to_id, group)
        return dto


# =============================================================================
# GroupChatService
# =============================================================================


class GroupChatService(BaseService):
    """
    Group chat operations for an authenticated caller.

    Every method returns a ServiceResult. Failure categories (error_type)
    are UNAUTHORIZED, NOT_FOUND, PERMISSION_DENIED, VALIDATION_ERROR and
    INVALID_ARGUMENT.

    Methods:
        send_message: Post to a group room, optionally as a reply
        mark_message_read: Record a read receipt
        read_count: Current read receipt count of a message
        list_rooms: Rooms of a group visible to the caller
        get_messages: One page of a room's history
    """

    @classmethod
    def send_message(
        cls,
        caller,
        group_id: int,
        room_id: int,
        body: str,
        reply_to_id: int | None = None,
    ) -> ServiceResult[GroupMessageDTO]:
        """
        Send a message to a group room.

        Room access is checked before the body.

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            GROUP_NOT_FOUND, ROOM_NOT_FOUND: Group or room missing, or room
                outside the group
            NOT_GROUP_MEMBER, ADMIN_ROOM_ONLY: Caller may not use the room
            EMPTY_BODY, BODY_TOO_LONG: Blank or oversized body
            REPLY_NOT_FOUND: Reply target missing
            REPLY_NOT_IN_ROOM: Reply target in another room
        """
        try:
            user = resolve_caller(caller)
            group = GroupMembershipService.get_group(group_id)
            room = cls._get_room(group, room_id)
            GroupChatGateway.check_room_access(group, room, user.pk)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        if body is None or not body.strip():
            return ServiceResult.failure(
                "body must not be blank",
                error_code="EMPTY_BODY",
                error_type=ValidationError.default_error_code,
                errors={"body": ["body must not be blank"]},
            )
        if len(body) > MESSAGE_CONFIG.MAX_BODY_LENGTH:
            error = f"body cannot exceed {MESSAGE_CONFIG.MAX_BODY_LENGTH} characters"
            return ServiceResult.failure(
                error,
                error_code="BODY_TOO_LONG",
                error_type=ValidationError.default_error_code,
                errors={"body": [error]},
            )

        try:
            reply_to = GroupChatGateway.resolve_reply(room, reply_to_id)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        with cls.atomic():
            message = GroupMessage.objects.create(
                room=room,
                sender_id=user.pk,
                body=body,
                reply_to=reply_to,
                read_count=0,
                created_at=timezone.now(),
            )
            transaction.on_commit(
                lambda: group_message_sent.send(
                    sender=GroupMessage,
                    message=message,
                    group_id=group.pk,
                )
            )

        cls.get_logger().info(
            f"User {user.pk} sent message {message.id} "
            f"to group {group.pk} room {room.pk}"
        )

        try:
            dto = GroupChatGateway.render(message, group)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)
        return ServiceResult.success(dto)

    @classmethod
    def mark_message_read(cls, caller, message_id: int) -> ServiceResult[bool]:
        """
        Mark a group message read for the caller. Repeat calls are no-ops.

        Returns:
            ServiceResult whose data says whether this call created the
            read marker

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            MESSAGE_NOT_FOUND: Message (or its room or group) missing
            NOT_GROUP_MEMBER, ADMIN_ROOM_ONLY: Caller may not use the room
        """
        try:
            user = resolve_caller(caller)
            message = cls._get_accessible_message(user.pk, message_id)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(GroupChatGateway.mark_read(message, user.pk))

    @classmethod
    def read_count(cls, caller, message_id: int) -> ServiceResult[int]:
        try:
            user = resolve_caller(caller)
            message = cls._get_accessible_message(user.pk, message_id)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)
        return ServiceResult.success(message.read_count)

    @classmethod
    def list_rooms(cls, caller, group_id: int) -> ServiceResult[list[GroupRoomSummary]]:
        """
        List the group's rooms the caller can use.

        Admin rooms are only listed for admins.

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            GROUP_NOT_FOUND: Group missing
            NOT_GROUP_MEMBER: Caller not a member
        """
        try:
            user = resolve_caller(caller)
            group = GroupMembershipService.get_group(group_id)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        if not GroupMembershipService.is_member(group, user.pk):
            return ServiceResult.failure(
                "You are not a member of this group",
                error_code="NOT_GROUP_MEMBER",
                error_type=PermissionDeniedError.default_error_code,
            )

        rooms = GroupChatRoom.objects.filter(group=group, is_deleted=False).order_by(
            "created_at", "id"
        )
        if not GroupMembershipService.is_admin(group, user.pk):
            rooms = rooms.filter(is_admin_room=False)

        summaries = []
        for room in rooms:
            latest = GroupMessage.objects.filter(room=room).order_by("-id").first()
            summaries.append(
                GroupRoomSummary(
                    room_id=room.pk,
                    group_id=group.pk,
                    name=room.name,
                    is_admin_room=room.is_admin_room,
                    last_message=latest.body if latest else None,
                    last_message_time=latest.created_at if latest else None,
                )
            )
        return ServiceResult.success(summaries)

    @classmethod
    def get_messages(
        cls,
        caller,
        group_id: int,
        room_id: int,
        page: int = 0,
        size: int = PAGINATION_CONFIG.DEFAULT_PAGE_SIZE,
    ) -> ServiceResult[Page[GroupMessageDTO]]:
        """
        Fetch one page of a group room's history, newest first.

        Error codes:
            AUTHENTICATION_REQUIRED, ACCOUNT_INACTIVE: Caller not authenticated
            INVALID_PAGE, INVALID_PAGE_SIZE: Malformed page parameters
            GROUP_NOT_FOUND, ROOM_NOT_FOUND: Group or room missing, or room
                outside the group
            NOT_GROUP_MEMBER, ADMIN_ROOM_ONLY: Caller may not use the room
        """
        try:
            user = resolve_caller(caller)
            validate_paging(page, size)

            group = GroupMembershipService.get_group(group_id)
            room = cls._get_room(group, room_id)
            GroupChatGateway.check_room_access(group, room, user.pk)

            queryset = GroupMessage.objects.filter(room=room).order_by("-id")
            result = paginate(queryset, page, size)

            admin_ids = GroupChatGateway.admin_ids(group)
            result.items = [
                GroupChatGateway.render(message, group, admin_ids=admin_ids)
                for message in result.items
            ]
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(result)

    @classmethod
    def _get_room(cls, group: Group, room_id: int) -> GroupChatRoom:
        room = GroupChatRoom.objects.filter(pk=room_id, is_deleted=False).first()
        if room is None or room.group_id != group.pk:
            raise NotFoundError(
                "Chat room not found in this group",
                error_code="ROOM_NOT_FOUND",
                details={"group_id": group.pk, "room_id": room_id},
            )
        return room

    @classmethod
    def _get_accessible_message(cls, user_id: int, message_id: int) -> GroupMessage:
        message = (
            GroupMessage.objects.select_related("room", "room__group")
            .filter(pk=message_id)
            .first()
        )
        if message is None or message.room.is_deleted or message.room.group.is_deleted:
            raise NotFoundError(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
                details={"message_id": message_id},
            )
        GroupChatGateway.check_room_access(message.room.group, message.room, user_id)
        return message
