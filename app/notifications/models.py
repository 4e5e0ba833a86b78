"""
Notification inbox models.

This module defines the per-user notification inbox fed by messaging events:
- NotificationKind: The messaging events that produce notifications
- Notification: One rendered notification for one recipient

Design Decisions:
    - Notifications are written by a Celery task after the triggering
      transaction commits; a lost notification never undoes a message or a
      membership change
    - Title and body are rendered once at creation and never change
    - payload keeps the raw event data (group id, message id, ...) for
      clients that deep link

Usage:
    from notifications.models import Notification, NotificationKind

    Notification.objects.filter(recipient=user, is_read=False)
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from core.models import BaseModel


class NotificationKind(models.TextChoices):
    """
    Messaging events that notify a user.

    DIRECT_MESSAGE: Someone sent the user a direct message
    GROUP_MESSAGE: A member posted in one of the user's groups
    GROUP_MEMBER_ADDED: The user was added to a group
    GROUP_MEMBER_REMOVED: The user was removed from a group
    """

    DIRECT_MESSAGE = "direct_message", "Direct Message"
    GROUP_MESSAGE = "group_message", "Group Message"
    GROUP_MEMBER_ADDED = "group_member_added", "Added to Group"
    GROUP_MEMBER_REMOVED = "group_member_removed", "Removed from Group"


class Notification(BaseModel):
    """
    Individual notification record for a user.

    Fields:
        recipient: User receiving the notification (scopes all queries)
        kind: Event that produced it (see NotificationKind)
        title: Fully rendered title string
        body: Fully rendered body string
        payload: Raw event data (ids, names)
        is_read: Whether recipient has read this notification

    Inherits from BaseModel:
        created_at: Timestamp (auto, indexed)
        updated_at: Timestamp (auto)
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User receiving this notification",
    )

    kind = models.CharField(
        max_length=32,
        choices=NotificationKind.choices,
        help_text="Messaging event that produced this notification",
    )

    title = models.CharField(
        max_length=200,
        help_text="Fully rendered notification title",
    )

    body = models.TextField(
        blank=True,
        default="",
        help_text="Fully rendered notification body",
    )

    payload = models.JSONField(
        default=dict,
        blank=True,
        help_text="Raw event data (group id, message id, ...)",
    )

    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether recipient has read this notification",
    )

    class Meta:
        db_table = "notifications_notification"
        ordering = ["-created_at", "-id"]
        indexes = [
            # Primary query: user's unread notifications
            models.Index(
                fields=["recipient", "is_read", "-created_at"],
                name="notif_recipient_unread_idx",
            ),
        ]

    def __str__(self) -> str:
        read_status = "read" if self.is_read else "unread"
        return f"Notification({self.kind}) -> User {self.recipient_id} [{read_status}]"
