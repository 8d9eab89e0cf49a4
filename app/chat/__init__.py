"""
Chat app for direct and group messaging.

This app handles:
- Direct rooms between two users (one room per pair)
- Message history with zero-based pagination
- Read pointers and unread counts
- Group room messages, replies and read receipts

Related apps:
    - authentication: User model, caller resolution, public profiles
    - groups: Group membership and admin checks

Notifications:
    chat.signals fires direct_message_sent / group_message_sent after
    commit. Transport (REST, WebSocket) lives outside this app.

Usage:
    from chat.dto import MessagePayload
    from chat.services import ChatService

    result = ChatService.get_or_create_room(request.user, other_user_id)
    if result.success:
        ChatService.send_message(
            request.user, result.data.room_id, MessagePayload.text("Hello!")
        )
"""
