"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Direct room inspection (participants, sequence counter)
- Message moderation (direct and group)
- Read state debugging
"""

from django.contrib import admin

from chat.models import (
    DirectChatRoom,
    DirectMessage,
    DirectReadStatus,
    GroupChatRoom,
    GroupMessage,
    GroupMessageRead,
)


class DirectReadStatusInline(admin.TabularInline):
    """Inline display of read pointers in direct room admin."""

    model = DirectReadStatus
    extra = 0
    readonly_fields = ["last_read_sequence", "last_read_at"]
    raw_id_fields = ["user", "last_read_message"]


@admin.register(DirectChatRoom)
class DirectChatRoomAdmin(admin.ModelAdmin):
    """Admin interface for DirectChatRoom model."""

    list_display = ["id", "user_low", "user_high", "last_sequence", "updated_at"]
    readonly_fields = ["created_at", "updated_at", "last_sequence"]
    raw_id_fields = ["user_low", "user_high"]
    inlines = [DirectReadStatusInline]
    ordering = ["-updated_at"]


@admin.register(DirectMessage)
class DirectMessageAdmin(admin.ModelAdmin):
    """Admin interface for DirectMessage model."""

    list_display = ["id", "room", "sender", "sequence", "message_type", "created_at"]
    list_filter = ["message_type", "created_at"]
    search_fields = ["body", "file_name", "sender__email"]
    readonly_fields = ["created_at", "sequence"]
    raw_id_fields = ["room", "sender"]


@admin.register(GroupChatRoom)
class GroupChatRoomAdmin(admin.ModelAdmin):
    """Admin interface for GroupChatRoom model."""

    list_display = ["id", "group", "name", "is_admin_room", "is_deleted"]
    list_filter = ["is_admin_room", "is_deleted"]
    search_fields = ["name", "group__name"]
    raw_id_fields = ["group"]


class GroupMessageReadInline(admin.TabularInline):
    model = GroupMessageRead
    extra = 0
    readonly_fields = ["read_at"]
    raw_id_fields = ["user"]


@admin.register(GroupMessage)
class GroupMessageAdmin(admin.ModelAdmin):
    """Admin interface for GroupMessage model."""

    list_display = ["id", "room", "sender", "reply_to", "read_count", "created_at"]
    list_filter = ["created_at"]
    search_fields = ["body", "sender__email"]
    readonly_fields = ["created_at", "read_count"]
    raw_id_fields = ["room", "sender", "reply_to"]
    inlines = [GroupMessageReadInline]
