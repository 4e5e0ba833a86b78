"""
Notification inbox services.

NotificationService renders and stores inbox entries and manages read state.
It is called from the deliver_notification Celery task and from the inbox
views, never directly from messaging code (which goes through
NotificationSink).

Usage:
    from notifications.services import NotificationService

    result = NotificationService.create_notification(
        recipient_id=user.id,
        kind=NotificationKind.GROUP_MEMBER_ADDED,
        payload={"group_id": 4, "group_name": "Hiking"},
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from django.contrib.auth import get_user_model
from django.utils import timezone

from core.exceptions import NotFoundError
from core.services import BaseService, ServiceResult
from notifications.models import Notification, NotificationKind

if TYPE_CHECKING:
    from authentication.models import User


# Title and body templates per kind, formatted with the event payload
TEMPLATES: dict[str, tuple[str, str]] = {
    NotificationKind.DIRECT_MESSAGE: (
        "New message",
        "{sender_name}: {preview}",
    ),
    NotificationKind.GROUP_MESSAGE: (
        "New message in {group_name}",
        "{sender_name}: {preview}",
    ),
    NotificationKind.GROUP_MEMBER_ADDED: (
        "Group invitation",
        "You have been added to the group '{group_name}'.",
    ),
    NotificationKind.GROUP_MEMBER_REMOVED: (
        "Removed from group",
        "You are no longer a member of the group '{group_name}'.",
    ),
}

PREVIEW_LENGTH = 100


class _Blank(dict):
    """Format mapping that renders missing keys as empty strings."""

    def __missing__(self, key: str) -> str:
        return ""


def render(kind: str, payload: dict[str, Any]) -> tuple[str, str]:
    """
    Render title and body for a notification kind.

    Missing payload keys render as empty strings.
    """
    title_template, body_template = TEMPLATES[kind]
    values = _Blank(payload)
    preview = str(payload.get("preview", ""))
    if len(preview) > PREVIEW_LENGTH:
        values["preview"] = preview[:PREVIEW_LENGTH] + "..."
    return (
        title_template.format_map(values)[:200],
        body_template.format_map(values),
    )


class NotificationService(BaseService):
    """
    Service for notification inbox operations.

    Methods:
        create_notification: Render and store a notification
        mark_as_read: Mark one notification read
        mark_all_as_read: Mark every unread notification read
    """

    @classmethod
    def create_notification(
        cls,
        recipient_id: int,
        kind: str,
        payload: dict[str, Any] | None = None,
    ) -> ServiceResult[Notification]:
        """
        Render and store a notification for a recipient.

        Args:
            recipient_id: User receiving the notification
            kind: NotificationKind value
            payload: Event data used for rendering and stored as-is

        Returns:
            ServiceResult with the new Notification

        Error codes:
            UNKNOWN_KIND: kind is not a NotificationKind value
            RECIPIENT_NOT_FOUND: No active user with recipient_id
        """
        payload = payload or {}

        if kind not in NotificationKind.values:
            cls.get_logger().warning(f"Dropping notification with unknown kind '{kind}'")
            return ServiceResult.failure(
                f"Unknown notification kind '{kind}'",
                error_code="UNKNOWN_KIND",
            )

        recipient_exists = (
            get_user_model().objects.filter(pk=recipient_id, is_active=True).exists()
        )
        if not recipient_exists:
            cls.get_logger().info(
                f"Skipping {kind} notification for missing or inactive user {recipient_id}"
            )
            return ServiceResult.failure(
                "Recipient not found",
                error_code="RECIPIENT_NOT_FOUND",
                error_class=NotFoundError,
            )

        title, body = render(kind, payload)
        notification = Notification.objects.create(
            recipient_id=recipient_id,
            kind=kind,
            title=title,
            body=body,
            payload=payload,
        )

        cls.get_logger().debug(
            f"Created {kind} notification {notification.id} for user {recipient_id}"
        )
        return ServiceResult.success(notification)

    @classmethod
    def mark_as_read(
        cls,
        notification: Notification,
        user: User,
    ) -> ServiceResult[Notification]:
        """
        Mark a single notification as read.

        Operation is idempotent - marking an already-read notification succeeds.

        Error codes:
            NOT_OWNER: User doesn't own the notification
        """
        if notification.recipient_id != user.id:
            cls.get_logger().warning(
                f"User {user.id} attempted to mark notification {notification.id} "
                f"owned by user {notification.recipient_id}"
            )
            return ServiceResult.failure(
                "Cannot mark notification you don't own",
                error_code="NOT_OWNER",
            )

        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])

        return ServiceResult.success(notification)

    @classmethod
    def mark_all_as_read(cls, user: User) -> ServiceResult[int]:
        """
        Mark all user's unread notifications as read.

        Returns:
            ServiceResult with count of notifications marked as read
        """
        count = Notification.objects.filter(
            recipient=user,
            is_read=False,
        ).update(is_read=True, updated_at=timezone.now())

        cls.get_logger().info(
            f"Marked {count} notifications as read for user {user.id}"
        )

        return ServiceResult.success(count)
