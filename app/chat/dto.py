"""
Data transfer objects returned by the chat services.

Services hand these plain dataclasses to the transport layer instead of
model instances, so rendering decisions (which profile fields, preview
text, read flags) are made once, inside the service.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Generic, TypeVar

from chat.models import MessageType

T = TypeVar("T")


@dataclass
class MessagePayload:
    """
    Content of a direct message as submitted by the sender.

    Which fields are required depends on message_type; see
    MessageStore.validate_payload().
    """

    message_type: str = MessageType.TEXT
    body: str | None = None
    file_url: str | None = None
    file_name: str | None = None
    file_size: int | None = None

    @classmethod
    def text(cls, body: str) -> MessagePayload:
        return cls(message_type=MessageType.TEXT, body=body)


@dataclass
class Page(Generic[T]):
    """
    One zero-based page of results, newest first.

    Attributes:
        items: Entries on this page (empty when page is out of range)
        page: Requested page index
        size: Requested page size
        total_count: Number of entries across all pages
        total_pages: ceil(total_count / size)
    """

    items: list[T]
    page: int
    size: int
    total_count: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page + 1 < self.total_pages


@dataclass
class DirectRoomSummary:
    """A direct room as seen by one of its participants."""

    room_id: int
    other_user_id: int
    other_username: str
    other_nickname: str
    other_profile_image_url: str | None
    last_message: str | None
    last_message_type: str | None
    last_message_time: datetime | None
    unread_count: int
    updated_time: datetime

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DirectMessageDTO:
    """A direct message with sender profile and read flag for the viewer."""

    id: int
    room_id: int
    sender_id: int
    sequence: int
    username: str
    nickname: str
    profile_image_url: str | None
    message_type: str
    body: str | None
    file_url: str | None
    file_name: str | None
    file_size: int | None
    created_at: datetime
    is_read: bool

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ReplyToMessageInfo:
    """Compact view of the message a group message replies to."""

    id: int
    body: str
    sender_id: int
    username: str
    nickname: str
    display_name: str | None
    profile_image_url: str | None


@dataclass
class GroupMessageDTO:
    """
    A group message with sender profile, group alias and reply summary.

    display_name and reply_to are optional: if they cannot be resolved the
    message is still rendered without them.
    """

    id: int
    room_id: int
    sender_id: int
    body: str
    username: str
    nickname: str
    profile_image_url: str | None
    display_name: str | None
    is_admin: bool
    read_count: int
    created_at: datetime
    reply_to_message_id: int | None = None
    reply_to: ReplyToMessageInfo | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class GroupRoomSummary:
    """A group chat room listed for a member."""

    room_id: int
    group_id: int
    name: str
    is_admin_room: bool
    last_message: str | None = None
    last_message_time: datetime | None = None


DirectMessagePage = Page[DirectMessageDTO]
GroupMessagePage = Page[GroupMessageDTO]
