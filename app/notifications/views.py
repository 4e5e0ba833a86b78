"""
Views for notification API.

ViewSets:
    NotificationViewSet: ReadOnlyModelViewSet with custom actions for read status

Endpoints:
    GET /api/v1/notifications/ - List user's notifications (paginated, filtered)
    GET /api/v1/notifications/{id}/ - Get notification detail
    GET /api/v1/notifications/unread-count/ - Get unread count
    POST /api/v1/notifications/{id}/read/ - Mark single notification as read
    POST /api/v1/notifications/read-all/ - Mark all notifications as read
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from notifications.models import Notification
from notifications.serializers import (
    MarkAllReadResponseSerializer,
    NotificationSerializer,
    UnreadCountSerializer,
)
from notifications.services import NotificationService


class NotificationPagination(PageNumberPagination):
    """Page-number pagination for the inbox (20 per page, max 100)."""

    page_size = 20
    max_page_size = 100
    page_size_query_param = "page_size"


@extend_schema_view(
    list=extend_schema(
        operation_id="list_notifications",
        summary="List notifications",
        description=(
            "Get paginated list of notifications for the authenticated user. "
            "Supports filtering by read status and kind."
        ),
        parameters=[
            OpenApiParameter(
                name="is_read",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Filter by read status (true/false)",
                required=False,
            ),
            OpenApiParameter(
                name="kind",
                type=str,
                location=OpenApiParameter.QUERY,
                description="Filter by notification kind",
                required=False,
            ),
        ],
        tags=["Notifications"],
    ),
    retrieve=extend_schema(
        operation_id="get_notification",
        summary="Get notification",
        description="Get details of a specific notification.",
        tags=["Notifications"],
    ),
)
class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for notification operations.

    Provides:
    - list: GET / - List user's notifications with filtering
    - retrieve: GET /{id}/ - Get notification detail
    - unread_count: GET /unread-count/ - Get badge count
    - read: POST /{id}/read/ - Mark single as read
    - read_all: POST /read-all/ - Mark all as read

    Permissions:
    - All endpoints require authentication
    - Users can only access their own notifications
    """

    permission_classes = [IsAuthenticated]
    serializer_class = NotificationSerializer
    pagination_class = NotificationPagination

    def get_queryset(self):
        """
        Get queryset filtered to user's notifications.

        Supports query parameters:
        - is_read: "true" or "false" to filter by read status
        - kind: notification kind to filter by
        """
        queryset = Notification.objects.filter(recipient=self.request.user)

        is_read = self.request.query_params.get("is_read")
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read.lower() == "true")

        kind = self.request.query_params.get("kind")
        if kind:
            queryset = queryset.filter(kind=kind)

        return queryset

    @extend_schema(
        operation_id="get_unread_notification_count",
        summary="Get unread notification count",
        responses={200: UnreadCountSerializer},
        tags=["Notifications"],
    )
    @action(detail=False, methods=["get"], url_path="unread-count")
    def unread_count(self, request):
        """Return {"unread_count": <int>} for the badge."""
        count = Notification.objects.filter(
            recipient=request.user,
            is_read=False,
        ).count()

        serializer = UnreadCountSerializer({"unread_count": count})
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_notification_read",
        summary="Mark notification as read",
        description=(
            "Mark a single notification as read. "
            "This operation is idempotent - already-read notifications return success."
        ),
        request=None,
        responses={
            200: NotificationSerializer,
            404: OpenApiResponse(description="Notification not found"),
        },
        tags=["Notifications"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        """
        Mark single notification as read.

        Returns 404 if notification doesn't exist or belongs to another user.
        """
        try:
            notification = Notification.objects.get(
                pk=pk,
                recipient=request.user,
            )
        except Notification.DoesNotExist:
            return Response(
                {"detail": "Not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        result = NotificationService.mark_as_read(notification, request.user)

        if not result.success:
            return Response(result.to_response(), status=result.status_code)

        serializer = self.get_serializer(result.data)
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_all_notifications_read",
        summary="Mark all notifications as read",
        request=None,
        responses={200: MarkAllReadResponseSerializer},
        tags=["Notifications"],
    )
    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        """Mark every unread notification read; returns {"marked_count": <int>}."""
        result = NotificationService.mark_all_as_read(request.user)

        serializer = MarkAllReadResponseSerializer({"marked_count": result.data})
        return Response(serializer.data)
