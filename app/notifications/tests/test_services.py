"""
Tests for NotificationService and notification rendering.
"""

from notifications.models import Notification, NotificationKind
from notifications.services import NotificationService, render


class TestRender:
    """Tests for title/body rendering."""

    def test_group_member_added(self):
        title, body = render(
            NotificationKind.GROUP_MEMBER_ADDED, {"group_name": "Hikers"}
        )

        assert title == "Group invitation"
        assert body == "You have been added to the group 'Hikers'."

    def test_missing_keys_render_blank(self):
        title, body = render(NotificationKind.GROUP_MESSAGE, {})

        assert title == "New message in "
        assert body == ": "

    def test_long_preview_is_truncated(self):
        _, body = render(
            NotificationKind.DIRECT_MESSAGE,
            {"sender_name": "ann", "preview": "x" * 300},
        )

        assert body == "ann: " + "x" * 100 + "..."


class TestCreateNotification:
    """Tests for NotificationService.create_notification()."""

    def test_creates_rendered_notification(self, user):
        result = NotificationService.create_notification(
            user.id,
            NotificationKind.GROUP_MEMBER_REMOVED,
            {"group_id": 3, "group_name": "Book club"},
        )

        assert result.success
        notification = result.data
        assert notification.recipient_id == user.id
        assert notification.kind == NotificationKind.GROUP_MEMBER_REMOVED
        assert notification.title == "Removed from group"
        assert "Book club" in notification.body
        assert notification.payload == {"group_id": 3, "group_name": "Book club"}
        assert notification.is_read is False

    def test_unknown_kind_is_rejected(self, user):
        result = NotificationService.create_notification(user.id, "party", {})

        assert not result.success
        assert result.error_code == "UNKNOWN_KIND"
        assert not Notification.objects.exists()

    def test_inactive_recipient_is_skipped(self, db):
        from authentication.tests.factories import UserFactory

        gone = UserFactory(is_active=False)

        result = NotificationService.create_notification(
            gone.id, NotificationKind.DIRECT_MESSAGE, {}
        )

        assert not result.success
        assert result.error_code == "RECIPIENT_NOT_FOUND"
        assert result.status_code == 404


class TestMarkAsRead:
    """Tests for mark_as_read / mark_all_as_read."""

    def test_marks_owned_notification(self, user, notification):
        result = NotificationService.mark_as_read(notification, user)

        assert result.success
        notification.refresh_from_db()
        assert notification.is_read is True

    def test_rejects_other_users_notification(self, other_user, notification):
        result = NotificationService.mark_as_read(notification, other_user)

        assert not result.success
        assert result.error_code == "NOT_OWNER"
        notification.refresh_from_db()
        assert notification.is_read is False

    def test_mark_all_only_touches_own_unread(
        self, user, notification, read_notification, other_user_notifications
    ):
        result = NotificationService.mark_all_as_read(user)

        assert result.data == 1
        assert Notification.objects.filter(
            recipient=other_user_notifications[0].recipient, is_read=False
        ).count() == 3

    def test_mark_all_stamps_updated_at(self, user, notification):
        before = notification.updated_at

        NotificationService.mark_all_as_read(user)

        notification.refresh_from_db()
        assert notification.is_read is True
        assert notification.updated_at > before
