"""
Model mixins providing reusable state for domain models.

Available Mixins:
    VisibilityMixin: Single active/hidden state replacing ad hoc
        is_deleted / is_active booleans

Every "deletion" in the messaging core is a visibility flip: a soft-deleted
direct message, a deactivated group and a moderated group message are all
rows whose visibility is HIDDEN. Keeping one field for all of them lets
querysets and services apply the "hidden looks like not found" policy the
same way everywhere.

Usage:
    from core.models import BaseModel
    from core.model_mixins import Visibility, VisibilityMixin
    from core.managers import VisibilityQuerySet

    class Group(VisibilityMixin, BaseModel):
        objects = VisibilityQuerySet.as_manager()
        name = models.CharField(max_length=100)

    Group.objects.visible()      # active groups only
    group.hide()                 # deactivate
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone


class Visibility(models.TextChoices):
    """
    Visibility state of a row.

    ACTIVE: Row participates in reads, listings and writes
    HIDDEN: Row is retained for history but behaves as if absent
    """

    ACTIVE = "active", "Active"
    HIDDEN = "hidden", "Hidden"


class VisibilityMixin(models.Model):
    """
    Active/hidden state with the timestamp of the last hide.

    Fields:
        visibility: Current state (see Visibility)
        hidden_at: When the row was hidden (null while active)

    Properties:
        is_active: True while visibility is ACTIVE
        is_deleted: True once visibility is HIDDEN
    """

    visibility = models.CharField(
        max_length=10,
        choices=Visibility.choices,
        default=Visibility.ACTIVE,
        db_index=True,
        help_text="Whether this record is visible (active) or hidden",
    )
    hidden_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp when this record was hidden",
    )

    class Meta:
        abstract = True

    @property
    def is_active(self) -> bool:
        """Check if this record is visible."""
        return self.visibility == Visibility.ACTIVE

    @property
    def is_deleted(self) -> bool:
        """Check if this record has been hidden."""
        return self.visibility == Visibility.HIDDEN

    def hide(self) -> None:
        """
        Hide this record and persist the change.

        Does nothing if the record is already hidden.
        """
        if self.is_deleted:
            return
        self.visibility = Visibility.HIDDEN
        self.hidden_at = timezone.now()
        self.save(update_fields=["visibility", "hidden_at", "updated_at"])
