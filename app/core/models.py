"""
Core base model shared by every domain model.

Base Classes:
    BaseModel: Abstract model with timestamps (created_at, updated_at)

Helpers:
    MAX_ID, is_storable_id: Bounds of BigAutoField primary keys, used to
        reject ids the database cannot represent before they reach a query

For the visibility state shared by groups, memberships and messages,
see core.model_mixins.

Usage:
    from core.models import BaseModel
    from core.model_mixins import VisibilityMixin

    class GroupMessage(VisibilityMixin, BaseModel):
        body = models.TextField()

Note:
    - Always list mixins before BaseModel in inheritance
"""

from __future__ import annotations

from django.db import models

# Largest value a BigAutoField primary key can hold
MAX_ID = 2**63 - 1


def is_storable_id(value: int) -> bool:
    """True if value can be a primary key (1..MAX_ID)."""
    return 1 <= value <= MAX_ID


class BaseModel(models.Model):
    """
    Abstract base model providing creation and modification timestamps.

    Fields:
        created_at: Set once when the row is inserted
        updated_at: Refreshed on every save()

    Note:
        Bulk ``QuerySet.update()`` calls bypass auto_now, so services that
        update in bulk must set ``updated_at`` explicitly.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when this record was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when this record was last modified",
    )

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self) -> str:
        """Default string representation using primary key."""
        return f"{self.__class__.__name__}(id={self.pk})"
