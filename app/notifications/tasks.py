"""
Celery tasks for notification delivery.

Tasks:
    deliver_notification: Store an inbox notification for one recipient

Design:
    - Enqueued by NotificationSink after the triggering transaction commits
    - Database errors are retried with exponential backoff
    - Expected failures (unknown kind, inactive recipient) are logged by the
      service and not retried

Usage:
    from notifications.tasks import deliver_notification

    deliver_notification.delay(user_id, "group_member_added", {"group_id": 4})
"""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task
from django.db import DatabaseError

from notifications.services import NotificationService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def deliver_notification(
    self, user_id: int, kind: str, payload: dict[str, Any] | None = None
) -> int | None:
    """
    Render and store a notification.

    Args:
        user_id: Recipient user id
        kind: NotificationKind value
        payload: Event data (JSON-serializable)

    Returns:
        Id of the created notification, or None if it was skipped

    Raises:
        DatabaseError: On store failure (triggers retry)
    """
    result = NotificationService.create_notification(user_id, kind, payload)
    if not result.success:
        logger.info(
            f"Notification {kind} for user {user_id} not delivered: {result.error_code}"
        )
        return None
    return result.data.id
