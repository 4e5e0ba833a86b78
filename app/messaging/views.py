"""
ViewSets for messaging API.

URL Structure:
    /api/v1/messaging/groups/                        GET, POST      (staff)
    /api/v1/messaging/groups/{id}/                   GET, PUT, DELETE (staff)
    /api/v1/messaging/groups/{id}/messages/          GET, POST      (members)
    /api/v1/messaging/my-groups/                     GET
    /api/v1/messaging/my-groups/{id}/                GET
    /api/v1/messaging/conversations/                 GET
    /api/v1/messaging/conversations/{user_id}/       GET (marks thread read)
    /api/v1/messaging/messages/                      POST
    /api/v1/messaging/messages/{id}/                 GET, DELETE

Design Decisions:
    - Views only parse input and render output; every rule lives in services
    - Service failures are rendered with ServiceResult.to_response() and the
      HTTP status of the failure's error class
    - Group management is staff only; group reads and posts are gated on
      membership by the services
"""

from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.services import ServiceResult
from messaging.permissions import IsGroupAdministrator
from messaging.serializers import (
    ConversationSummarySerializer,
    DirectMessageCreateSerializer,
    DirectMessageSerializer,
    GroupMessageCreateSerializer,
    GroupMessageSerializer,
    GroupSerializer,
    GroupWriteSerializer,
    PageQuerySerializer,
)
from messaging.services import (
    ConversationService,
    DirectMessageService,
    GroupLifecycleService,
    GroupMessageService,
    GroupQueryService,
)

PAGE_PARAMETERS = [
    OpenApiParameter(
        name="page",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description="1-based page number (page 1 holds the newest rows)",
        required=False,
    ),
    OpenApiParameter(
        name="page_size",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        description="Rows per page (1-100, default 50)",
        required=False,
    ),
]

ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation failed (error, error_code)"),
    503: OpenApiResponse(description="Store failure (error_code, correlation_id)"),
}


def error_response(result: ServiceResult) -> Response:
    """Render a failed ServiceResult with the status of its error class."""
    return Response(result.to_response(), status=result.status_code)


def page_params(request) -> dict:
    serializer = PageQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)


# =============================================================================
# Group administration
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_groups",
        summary="List groups",
        description="Staff listing of active groups, newest first.",
        parameters=PAGE_PARAMETERS,
        responses={200: GroupSerializer(many=True)},
        tags=["Messaging - Groups"],
    ),
    create=extend_schema(
        operation_id="create_group",
        summary="Create group",
        description=(
            "Create a group with an initial member list. Every member id must "
            "name an active user; otherwise nothing is created and the "
            "offending ids are returned in invalid_ids."
        ),
        request=GroupWriteSerializer,
        responses={201: GroupSerializer, **ERROR_RESPONSES},
        tags=["Messaging - Groups"],
    ),
    retrieve=extend_schema(
        operation_id="get_group",
        summary="Get group",
        responses={200: GroupSerializer, 404: OpenApiResponse(description="Not found")},
        tags=["Messaging - Groups"],
    ),
    update=extend_schema(
        operation_id="replace_group",
        summary="Replace group",
        description=(
            "Update name and description and replace the whole member list. "
            "Members missing from member_ids are removed."
        ),
        request=GroupWriteSerializer,
        responses={
            200: GroupSerializer,
            404: OpenApiResponse(description="Group not found or deactivated"),
            409: OpenApiResponse(description="Concurrent membership conflict"),
            **ERROR_RESPONSES,
        },
        tags=["Messaging - Groups"],
    ),
    destroy=extend_schema(
        operation_id="deactivate_group",
        summary="Deactivate group",
        responses={204: None, 404: OpenApiResponse(description="Not found")},
        tags=["Messaging - Groups"],
    ),
)
class GroupViewSet(viewsets.ViewSet):
    """
    ViewSet for group administration (staff only).

    list:
        Page through active groups.

    create:
        Create a group; the caller's member list is used as-is.

    retrieve:
        Get an active group with its members.

    update:
        Replace name, description and member list.

    destroy:
        Deactivate the group. History is kept.
    """

    permission_classes = [IsAuthenticated, IsGroupAdministrator]
    lookup_value_regex = r"\d{1,18}"

    def list(self, request):
        result = GroupQueryService.list_groups(**page_params(request))
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data, many=True).data)

    def create(self, request):
        serializer = GroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = GroupLifecycleService.create_group(
            name=data["name"],
            description=data.get("description"),
            requester_id=request.user.id,
            member_ids=data["member_ids"],
        )
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        result = GroupQueryService.get_group(int(pk))
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)

    def update(self, request, pk=None):
        serializer = GroupWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = GroupLifecycleService.update_group(
            group_id=int(pk),
            name=data["name"],
            description=data.get("description"),
            member_ids=data["member_ids"],
            requester_id=request.user.id,
        )
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)

    def destroy(self, request, pk=None):
        result = GroupLifecycleService.deactivate_group(int(pk), request.user.id)
        if not result.success:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Member views
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_my_groups",
        summary="List my groups",
        description="Active groups the current user is a member of.",
        responses={200: GroupSerializer(many=True)},
        tags=["Messaging - Groups"],
    ),
    retrieve=extend_schema(
        operation_id="get_my_group",
        summary="Get my group",
        responses={
            200: GroupSerializer,
            403: OpenApiResponse(description="Not a member"),
            404: OpenApiResponse(description="Not found"),
        },
        tags=["Messaging - Groups"],
    ),
)
class MyGroupViewSet(viewsets.ViewSet):
    """Groups seen from a member's side."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d{1,18}"

    def list(self, request):
        result = GroupQueryService.list_user_groups(request.user.id)
        return Response(GroupSerializer(result.data, many=True).data)

    def retrieve(self, request, pk=None):
        result = GroupQueryService.get_group_for_member(int(pk), request.user.id)
        if not result.success:
            return error_response(result)
        return Response(GroupSerializer(result.data).data)


@extend_schema_view(
    list=extend_schema(
        operation_id="list_group_messages",
        summary="List group messages",
        description="Page of the group's messages, newest first.",
        parameters=PAGE_PARAMETERS,
        responses={
            200: GroupMessageSerializer(many=True),
            403: OpenApiResponse(description="Not a member"),
            404: OpenApiResponse(description="Group not found or deactivated"),
        },
        tags=["Messaging - Group Messages"],
    ),
    create=extend_schema(
        operation_id="send_group_message",
        summary="Send group message",
        request=GroupMessageCreateSerializer,
        responses={
            201: GroupMessageSerializer,
            403: OpenApiResponse(description="Not a member"),
            404: OpenApiResponse(description="Group not found or deactivated"),
            **ERROR_RESPONSES,
        },
        tags=["Messaging - Group Messages"],
    ),
)
class GroupMessageViewSet(viewsets.ViewSet):
    """Messages of one group (nested under groups/{group_pk}/)."""

    permission_classes = [IsAuthenticated]

    def list(self, request, group_pk=None):
        result = GroupMessageService.list_group_messages(
            int(group_pk), request.user.id, **page_params(request)
        )
        if not result.success:
            return error_response(result)
        return Response(GroupMessageSerializer(result.data, many=True).data)

    def create(self, request, group_pk=None):
        serializer = GroupMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = GroupMessageService.send_group_message(
            int(group_pk), request.user.id, serializer.validated_data["body"]
        )
        if not result.success:
            return error_response(result)
        return Response(
            GroupMessageSerializer(result.data).data, status=status.HTTP_201_CREATED
        )


# =============================================================================
# Direct messages
# =============================================================================


@extend_schema_view(
    list=extend_schema(
        operation_id="list_direct_conversations",
        summary="List conversations",
        description=(
            "One entry per counterpart with the last message and the number "
            "of unread messages, most recent first."
        ),
        responses={200: ConversationSummarySerializer(many=True)},
        tags=["Messaging - Direct Messages"],
    ),
    retrieve=extend_schema(
        operation_id="get_direct_conversation",
        summary="Get conversation thread",
        description=(
            "Page of the thread with another user, oldest first within the "
            "page. Unread messages from that user are marked read."
        ),
        parameters=PAGE_PARAMETERS,
        responses={200: DirectMessageSerializer(many=True), **ERROR_RESPONSES},
        tags=["Messaging - Direct Messages"],
    ),
)
class ConversationViewSet(viewsets.ViewSet):
    """Direct message inbox and threads; the detail key is the other user's id."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d{1,18}"

    def list(self, request):
        result = ConversationService.list_conversations(request.user.id)
        return Response(ConversationSummarySerializer(result.data, many=True).data)

    def retrieve(self, request, pk=None):
        result = ConversationService.get_thread(
            request.user.id, int(pk), **page_params(request)
        )
        if not result.success:
            return error_response(result)
        return Response(DirectMessageSerializer(result.data, many=True).data)


@extend_schema_view(
    create=extend_schema(
        operation_id="send_direct_message",
        summary="Send direct message",
        request=DirectMessageCreateSerializer,
        responses={201: DirectMessageSerializer, **ERROR_RESPONSES},
        tags=["Messaging - Direct Messages"],
    ),
    retrieve=extend_schema(
        operation_id="get_direct_message",
        summary="Get direct message",
        responses={
            200: DirectMessageSerializer,
            404: OpenApiResponse(description="Not found"),
        },
        tags=["Messaging - Direct Messages"],
    ),
    destroy=extend_schema(
        operation_id="delete_direct_message",
        summary="Delete direct message",
        description="Sender only. The message is hidden for both parties.",
        responses={204: None, 404: OpenApiResponse(description="Not found")},
        tags=["Messaging - Direct Messages"],
    ),
)
class DirectMessageViewSet(viewsets.ViewSet):
    """Individual direct messages."""

    permission_classes = [IsAuthenticated]
    lookup_value_regex = r"\d{1,18}"

    def create(self, request):
        serializer = DirectMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = DirectMessageService.send(request.user.id, data["receiver_id"], data["body"])
        if not result.success:
            return error_response(result)
        return Response(
            DirectMessageSerializer(result.data).data, status=status.HTTP_201_CREATED
        )

    def retrieve(self, request, pk=None):
        result = DirectMessageService.get_message(int(pk), request.user.id)
        if not result.success:
            return error_response(result)
        return Response(DirectMessageSerializer(result.data).data)

    def destroy(self, request, pk=None):
        result = DirectMessageService.soft_delete(int(pk), request.user.id)
        if not result.success:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
