"""
Fire-and-forget notification dispatch for messaging events.

NotificationSink is the only entry point messaging services use. Dispatch is
registered with transaction.on_commit, so nothing is enqueued for a write
that rolls back, and any failure while enqueueing is logged at WARNING and
discarded. A notification problem never changes the outcome of the call
that triggered it.

Usage:
    from notifications.sink import NotificationSink
    from notifications.models import NotificationKind

    NotificationSink.notify(
        receiver_id,
        NotificationKind.DIRECT_MESSAGE,
        {"message_id": message.id, "sender_id": sender_id},
    )
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import partial
from typing import Any

from django.db import transaction

from notifications.tasks import deliver_notification

logger = logging.getLogger(__name__)


class NotificationSink:
    """
    Best-effort notification dispatcher.

    Methods:
        notify: Queue one notification after commit
        notify_many: Queue the same notification for several users
    """

    @classmethod
    def notify(cls, user_id: int, kind: str, payload: dict[str, Any]) -> None:
        """
        Queue a notification for user_id once the current transaction commits.

        Outside a transaction the dispatch runs immediately.
        """
        transaction.on_commit(partial(cls._dispatch, user_id, str(kind), dict(payload)))

    @classmethod
    def notify_many(
        cls, user_ids: Iterable[int], kind: str, payload: dict[str, Any]
    ) -> None:
        for user_id in sorted(set(user_ids)):
            cls.notify(user_id, kind, payload)

    @staticmethod
    def _dispatch(user_id: int, kind: str, payload: dict[str, Any]) -> None:
        try:
            deliver_notification.delay(user_id, kind, payload)
        except Exception:
            logger.warning(
                f"Failed to dispatch {kind} notification to user {user_id}",
                exc_info=True,
            )
