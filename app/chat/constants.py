"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message content (length limits, attachment fields)
- Pagination of message history

Import example:
    from chat.constants import MESSAGE_CONFIG, PAGINATION_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message content."""

    # Content limits
    MAX_BODY_LENGTH: Final[int] = 10000  # Characters
    MAX_FILE_NAME_LENGTH: Final[int] = 255
    MAX_FILE_URL_LENGTH: Final[int] = 500

    # Preview shown in room summaries for non-text messages with no body
    IMAGE_PREVIEW: Final[str] = "[image]"
    FILE_PREVIEW: Final[str] = "[file]"


# =============================================================================
# Pagination Configuration
# =============================================================================


class PAGINATION_CONFIG:
    """Zero-based page/size paging of message history."""

    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100
