"""
Chat system models.

This module defines the data models for the chat system supporting:
- Direct (1:1) rooms between exactly two users, with per-user read pointers
- Group rooms inside a forum group, with reply threading and read receipts

Models:
    DirectChatRoom: Canonical room for an unordered pair of users
    DirectMessage: Message in a direct room, ordered by a per-room sequence
    DirectReadStatus: Per-(room, user) last-read pointer
    GroupChatRoom: Room inside a group, optionally admin-only
    GroupMessage: Message in a group room, optionally replying to another
    GroupMessageRead: Per-(message, user) read marker

Design Decisions:
    - Direct and group messages are separate models; a message belongs to
      exactly one kind of room
    - Direct rooms store participants in canonical order (lower id first);
      save() normalizes the pair on every write
    - Direct messages are ordered and compared by sequence only, never by
      created_at (timestamps may collide)
    - Messages are immutable once created
    - A group message's read_count equals the number of distinct
      GroupMessageRead rows for it
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.model_mixins import SoftDeleteMixin
from core.models import BaseModel


class MessageType(models.TextChoices):
    """
    Kind of direct message payload.

    TEXT: Requires a non-blank body
    IMAGE: Requires file_url
    FILE: Requires file_url, file_name and a positive file_size
    """

    TEXT = "TEXT", "Text"
    IMAGE = "IMAGE", "Image"
    FILE = "FILE", "File"


class DirectChatRoom(models.Model):
    """
    The single direct room for an unordered pair of users.

    Fields:
        user_low: Participant with the lower user id
        user_high: Participant with the higher user id
        last_sequence: Sequence value of the newest message (0 = empty room)
        created_at: When the room was first created
        updated_at: Last activity (creation or last message)

    Constraints:
        - UniqueConstraint(user_low, user_high): one room per pair
        - CheckConstraint(user_low < user_high): canonical order, distinct users

    Timestamps are assigned explicitly by the service layer; created_at is
    set on first insert only.
    """

    user_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant with the lower user id",
    )

    user_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="Participant with the higher user id",
    )

    last_sequence = models.PositiveBigIntegerField(
        default=0,
        help_text="Sequence value of the newest message in this room",
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When the room was created",
    )

    updated_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text="Last activity in the room",
    )

    class Meta:
        db_table = "chat_direct_room"
        ordering = ["-updated_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["user_low", "user_high"],
                name="unique_direct_room_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_low_id__lt=F("user_high_id")),
                name="direct_room_user_low_lt_high",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectRoom({self.user_low_id}, {self.user_high_id})"

    def save(self, *args, **kwargs):
        self.normalize_participants()
        super().save(*args, **kwargs)

    def normalize_participants(self) -> None:
        """Swap the participants into canonical (lower, higher) order."""
        if (
            self.user_low_id is not None
            and self.user_high_id is not None
            and self.user_low_id > self.user_high_id
        ):
            self.user_low_id, self.user_high_id = self.user_high_id, self.user_low_id

    @property
    def participant_ids(self) -> tuple[int, int]:
        return (self.user_low_id, self.user_high_id)

    def has_participant(self, user_id: int) -> bool:
        return user_id in self.participant_ids


class DirectMessage(models.Model):
    """
    An immutable message in a direct room.

    Fields:
        room: Owning room
        sender: User who sent the message
        sequence: Per-room ordering key, assigned at append time
        message_type: TEXT, IMAGE or FILE
        body: Text content (required for TEXT)
        file_url: Uploaded file location (IMAGE, FILE)
        file_name: Original file name (FILE)
        file_size: File size in bytes (FILE)
        created_at: When the message was stored

    Constraints:
        - UniqueConstraint(room, sequence): no two messages share a position
    """

    room = models.ForeignKey(
        DirectChatRoom,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Room this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_direct_messages",
        help_text="User who sent this message",
    )

    sequence = models.PositiveBigIntegerField(
        help_text="Per-room ordering key (strictly increasing)",
    )

    message_type = models.CharField(
        max_length=10,
        choices=MessageType.choices,
        default=MessageType.TEXT,
        help_text="Kind of payload",
    )

    body = models.TextField(
        blank=True,
        null=True,
        help_text="Text content",
    )

    file_url = models.CharField(
        max_length=500,
        blank=True,
        null=True,
        help_text="Location of the attached file or image",
    )

    file_name = models.CharField(
        max_length=255,
        blank=True,
        null=True,
        help_text="Original name of the attached file",
    )

    file_size = models.PositiveBigIntegerField(
        blank=True,
        null=True,
        help_text="Size of the attached file in bytes",
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When the message was stored",
    )

    class Meta:
        db_table = "chat_direct_message"
        ordering = ["-sequence"]
        constraints = [
            models.UniqueConstraint(
                fields=["room", "sequence"],
                name="unique_direct_message_sequence",
            ),
        ]
        indexes = [
            # Unread counts: messages in a room from other senders past a pointer
            models.Index(
                fields=["room", "sender", "sequence"],
                name="chat_dm_room_sender_seq_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.body or self.file_name or self.message_type
        if len(preview) > 50:
            preview = preview[:50] + "..."
        return f"User {self.sender_id} #{self.sequence}: {preview}"


class DirectReadStatus(models.Model):
    """
    How far one user has read in one direct room.

    Fields:
        room: Room being tracked
        user: Reader
        last_read_message: Newest message acknowledged (null = nothing read)
        last_read_sequence: Sequence of last_read_message, denormalized for
            compare-and-set updates
        last_read_at: When the pointer last moved (or the row was created)

    Invariant:
        last_read_sequence only ever increases.
    """

    room = models.ForeignKey(
        DirectChatRoom,
        on_delete=models.CASCADE,
        related_name="read_statuses",
        help_text="Room being tracked",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="direct_read_statuses",
        help_text="Reader",
    )

    last_read_message = models.ForeignKey(
        DirectMessage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Newest message the user has acknowledged",
    )

    last_read_sequence = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Sequence of the newest acknowledged message",
    )

    last_read_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the pointer last moved",
    )

    class Meta:
        db_table = "chat_direct_read_status"
        constraints = [
            models.UniqueConstraint(
                fields=["room", "user"],
                name="unique_direct_read_status",
            ),
        ]

    def __str__(self) -> str:
        return (
            f"ReadStatus: user {self.user_id} in room {self.room_id} "
            f"@ {self.last_read_sequence}"
        )


class GroupChatRoom(SoftDeleteMixin, BaseModel):
    """
    A chat room inside a forum group.

    Fields:
        group: Owning group
        name: Display name
        is_admin_room: Only group admins may use this room
    """

    group = models.ForeignKey(
        "groups.Group",
        on_delete=models.CASCADE,
        related_name="chat_rooms",
        help_text="Group this room belongs to",
    )

    name = models.CharField(
        max_length=100,
        help_text="Room display name",
    )

    is_admin_room = models.BooleanField(
        default=False,
        help_text="Whether only admins may use this room",
    )

    class Meta:
        db_table = "chat_group_room"
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        suffix = " [admin]" if self.is_admin_room else ""
        return f"GroupRoom: {self.name}{suffix}"


class GroupMessage(models.Model):
    """
    An immutable message in a group room.

    Fields:
        room: Owning room
        sender: User who sent the message
        body: Text content
        reply_to: Earlier message in the same room this one answers
        read_count: Number of distinct users who marked it read
        created_at: When the message was stored

    Threading:
        reply_to always points at a message already persisted in the same
        room; the service layer rejects anything else.
    """

    room = models.ForeignKey(
        GroupChatRoom,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Room this message belongs to",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_group_messages",
        help_text="User who sent this message",
    )

    body = models.TextField(
        help_text="Message text",
    )

    reply_to = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
        help_text="Message this one replies to (same room)",
    )

    read_count = models.PositiveIntegerField(
        default=0,
        help_text="Distinct users who have read this message",
    )

    created_at = models.DateTimeField(
        default=timezone.now,
        editable=False,
        help_text="When the message was stored",
    )

    class Meta:
        db_table = "chat_group_message"
        ordering = ["-id"]
        indexes = [
            models.Index(
                fields=["room", "-id"],
                name="chat_gm_room_id_idx",
            ),
        ]

    def __str__(self) -> str:
        preview = self.body[:50] + "..." if len(self.body) > 50 else self.body
        return f"User {self.sender_id}: {preview}"

    @property
    def is_reply(self) -> bool:
        return self.reply_to_id is not None


class GroupMessageRead(models.Model):
    """
    Marker that a user has seen a group message.

    Constraints:
        - UniqueConstraint(message, user): at most one marker per pair
    """

    message = models.ForeignKey(
        GroupMessage,
        on_delete=models.CASCADE,
        related_name="reads",
        help_text="Message that was read",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_message_reads",
        help_text="Reader",
    )

    read_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user first read the message",
    )

    class Meta:
        db_table = "chat_group_message_read"
        constraints = [
            models.UniqueConstraint(
                fields=["message", "user"],
                name="unique_group_message_read",
            ),
        ]

    def __str__(self) -> str:
        return f"Read: message {self.message_id} by user {self.user_id}"
