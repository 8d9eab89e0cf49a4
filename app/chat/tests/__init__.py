"""
Tests for chat app.

This package contains test modules for:
- test_models.py: Model constraints and canonical ordering
- test_direct_chat.py: RoomRegistry, MessageStore, ReadTracker, ChatService
- test_group_chat.py: GroupChatGateway, GroupChatService
- test_concurrency.py: Race handling for rooms, sequences and read markers
- test_signals.py: Notification signals fired on commit
- test_dto.py: DTO helpers and serialization

Usage:
    pytest chat/tests/
    pytest chat/tests/test_direct_chat.py
"""
