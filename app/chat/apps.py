"""
Chat application configuration.

This app provides the chat core with:
- Direct (1:1) rooms with canonical pair identity
- Per-room message ordering and per-user read pointers
- Group rooms with admin-only access, reply threading and read receipts
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
