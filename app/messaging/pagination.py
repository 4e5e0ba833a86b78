"""
Page windows for messaging reads.

Thread and group message reads are page-numbered (1-based) rather than
cursor-based: clients ask for "page 1" to get the newest messages and walk
backwards from there.

Classes:
    PageWindow: Validated (page, page_size) pair with slice bounds
"""

from __future__ import annotations

from dataclasses import dataclass

from core.exceptions import ValidationError
from core.models import MAX_ID
from messaging.constants import PAGINATION_CONFIG


@dataclass(frozen=True)
class PageWindow:
    """
    A 1-based page of page_size rows.

    Usage:
        window = PageWindow.build(page=2, page_size=50)
        rows = queryset[window.offset:window.limit]
    """

    page: int
    page_size: int

    @classmethod
    def build(
        cls,
        page: int | None = None,
        page_size: int | None = None,
    ) -> PageWindow:
        """
        Validate and build a page window.

        Args:
            page: 1-based page number (default 1)
            page_size: Rows per page (default 50, max 100)

        Raises:
            ValidationError: INVALID_PAGE when either value is out of range
        """
        page = 1 if page is None else page
        page_size = PAGINATION_CONFIG.DEFAULT_PAGE_SIZE if page_size is None else page_size

        if page < 1:
            raise ValidationError(
                "Page must be 1 or greater",
                error_code="INVALID_PAGE",
            )
        if not 1 <= page_size <= PAGINATION_CONFIG.MAX_PAGE_SIZE:
            raise ValidationError(
                f"Page size must be between 1 and {PAGINATION_CONFIG.MAX_PAGE_SIZE}",
                error_code="INVALID_PAGE",
            )
        if page * page_size > MAX_ID:
            raise ValidationError(
                "Page is out of range",
                error_code="INVALID_PAGE",
            )
        return cls(page=page, page_size=page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.offset + self.page_size

