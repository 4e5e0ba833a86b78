"""
Tests for the deliver_notification Celery task.

Celery runs eagerly under the test settings, so .delay() executes inline.
"""

from notifications.models import Notification, NotificationKind
from notifications.tasks import deliver_notification


class TestDeliverNotification:
    """Tests for deliver_notification."""

    def test_stores_notification(self, user):
        notification_id = deliver_notification(
            user.id, NotificationKind.DIRECT_MESSAGE, {"sender_name": "bo", "preview": "hi"}
        )

        notification = Notification.objects.get(pk=notification_id)
        assert notification.recipient_id == user.id
        assert notification.body == "bo: hi"

    def test_returns_none_for_missing_recipient(self, db):
        assert deliver_notification(999_999, NotificationKind.DIRECT_MESSAGE, {}) is None
        assert not Notification.objects.exists()

    def test_delay_runs_eagerly(self, user):
        deliver_notification.delay(
            user.id, NotificationKind.GROUP_MEMBER_ADDED, {"group_name": "Chess"}
        )

        assert Notification.objects.filter(
            recipient=user, kind=NotificationKind.GROUP_MEMBER_ADDED
        ).exists()

    def test_task_app_runs_eagerly(self):
        """
        Why it matters: without eager mode .delay() goes to the broker and
        no notification row is written during tests.
        """
        assert deliver_notification.app.conf.task_always_eager is True
        assert deliver_notification.app.conf.task_eager_propagates is True
