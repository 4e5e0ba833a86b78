"""
Constants and configuration for messaging features.

This module centralizes configuration values for:
- Message bodies (direct and group)
- Group metadata
- Page windows for thread and group message reads

Import example:
    from messaging.constants import GROUP_CONFIG, MESSAGE_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for direct and group message bodies."""

    # Characters, measured after trimming surrounding whitespace
    MAX_BODY_LENGTH: Final[int] = 1000
    MIN_BODY_LENGTH: Final[int] = 1


# =============================================================================
# Group Configuration
# =============================================================================


class GROUP_CONFIG:
    """Configuration for group metadata."""

    MAX_NAME_LENGTH: Final[int] = 100
    MAX_DESCRIPTION_LENGTH: Final[int] = 500


# =============================================================================
# Pagination Configuration
# =============================================================================


class PAGINATION_CONFIG:
    """Page windows for thread, group message and staff group listings."""

    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 100
