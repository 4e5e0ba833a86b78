"""
QuerySet helpers for models using VisibilityMixin.

Usage:
    from core.managers import VisibilityQuerySet

    class DirectMessage(VisibilityMixin, BaseModel):
        objects = VisibilityQuerySet.as_manager()

    DirectMessage.objects.visible().filter(receiver_id=user_id)
    DirectMessage.objects.filter(sender_id=user_id).hide()

Related:
    - core.model_mixins.VisibilityMixin: Model fields and per-instance hide()
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.model_mixins import Visibility


class VisibilityQuerySet(models.QuerySet):
    """
    QuerySet with visibility filters and a bulk hide operation.

    Unlike a default-filtering manager, nothing is excluded implicitly:
    every service query states whether it wants visible rows, so history
    lookups and visibility-aware lookups read the same way.
    """

    def visible(self) -> VisibilityQuerySet:
        """Filter to active rows."""
        return self.filter(visibility=Visibility.ACTIVE)

    def hidden(self) -> VisibilityQuerySet:
        """Filter to hidden rows."""
        return self.filter(visibility=Visibility.HIDDEN)

    def hide(self) -> int:
        """
        Hide every active row in the queryset.

        Returns:
            Number of rows that changed state
        """
        now = timezone.now()
        return self.visible().update(
            visibility=Visibility.HIDDEN,
            hidden_at=now,
            updated_at=now,
        )
