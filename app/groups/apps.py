"""
Groups application configuration.
"""

from django.apps import AppConfig


class GroupsConfig(AppConfig):
    """Configuration for the groups application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "groups"
    verbose_name = "Groups"
