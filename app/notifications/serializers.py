"""
Serializers for notification API.

Serializers:
    NotificationSerializer: Read-only serializer for notification details
    UnreadCountSerializer: Response for unread count endpoint
    MarkAllReadResponseSerializer: Response for mark all read endpoint
"""

from __future__ import annotations

from rest_framework import serializers

from notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """
    Serializer for Notification model.

    Usage:
        serializer = NotificationSerializer(notifications, many=True)
    """

    class Meta:
        model = Notification
        fields = [
            "id",
            "kind",
            "title",
            "body",
            "payload",
            "is_read",
            "created_at",
        ]
        read_only_fields = fields


class UnreadCountSerializer(serializers.Serializer):
    """Response serializer for unread count endpoint."""

    unread_count = serializers.IntegerField(help_text="Number of unread notifications")


class MarkAllReadResponseSerializer(serializers.Serializer):
    """Response serializer for mark all read endpoint."""

    marked_count = serializers.IntegerField(
        help_text="Number of notifications marked as read"
    )
