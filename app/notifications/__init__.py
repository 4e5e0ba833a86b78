"""
Notifications app: per-user inbox fed by messaging events.

This app provides:
- Notification model for storing rendered notifications
- NotificationSink for fire-and-forget dispatch after commit
- deliver_notification Celery task
- REST API for listing notifications and marking them read

Usage:
    from notifications.sink import NotificationSink

    NotificationSink.notify(user.id, NotificationKind.GROUP_MEMBER_ADDED, {...})
"""
