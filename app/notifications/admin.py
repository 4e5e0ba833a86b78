"""
Django admin configuration for notification models.
"""

from django.contrib import admin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    Admin configuration for Notification.

    Notifications are rendered once; the admin is read-mostly.
    """

    list_display = ["id", "recipient", "kind", "title", "is_read", "created_at"]
    list_filter = ["kind", "is_read", "created_at"]
    search_fields = ["recipient__email", "title"]
    raw_id_fields = ["recipient"]
    readonly_fields = ["kind", "title", "body", "payload", "created_at", "updated_at"]
    ordering = ["-created_at"]
