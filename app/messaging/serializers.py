"""
Serializers for messaging API.

Request serializers only check shapes and types; length limits, trimming
and membership rules are enforced by the services so every rejection
carries a machine-readable error code.

Serializers:
    GroupWriteSerializer: Create / replace a group (name, description, member_ids)
    GroupSerializer: Group detail with member_count and member summaries
    GroupMessageSerializer: Message in a group stream
    GroupMessageCreateSerializer: Body for posting to a group
    DirectMessageSerializer: Direct message as seen by either party
    DirectMessageCreateSerializer: Receiver and body for a direct message
    ConversationSummarySerializer: Inbox entry per counterpart
    PageQuerySerializer: page / page_size query parameters
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import UserSummarySerializer
from core.models import MAX_ID
from messaging.models import DirectMessage, Group, GroupMessage


# =============================================================================
# Groups
# =============================================================================


class GroupWriteSerializer(serializers.Serializer):
    """
    Input for creating or replacing a group.

    member_ids is the complete member list; an empty list is allowed and
    leaves the group without members.
    """

    name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    description = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        default="",
        trim_whitespace=False,
    )
    member_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=MAX_ID),
        allow_empty=True,
        help_text="Complete list of member user ids",
    )


class GroupSerializer(serializers.ModelSerializer):
    """
    Group detail.

    Expects a group from MembershipStore.hydrated_groups(), which carries
    the member_count annotation and the active_memberships prefetch.
    """

    member_count = serializers.IntegerField(read_only=True)
    members = serializers.SerializerMethodField()
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = Group
        fields = [
            "id",
            "name",
            "description",
            "created_by",
            "created_at",
            "updated_at",
            "is_active",
            "member_count",
            "members",
        ]
        read_only_fields = fields

    def get_members(self, obj: Group) -> list[dict]:
        users = [membership.user for membership in obj.active_memberships]
        return UserSummarySerializer(users, many=True).data


# =============================================================================
# Group messages
# =============================================================================


class GroupMessageSerializer(serializers.ModelSerializer):
    """Message in a group stream, with the poster's summary."""

    sender = UserSummarySerializer(source="user", read_only=True)

    class Meta:
        model = GroupMessage
        fields = ["id", "group", "sender", "body", "sent_at"]
        read_only_fields = fields


class GroupMessageCreateSerializer(serializers.Serializer):
    """Input for posting to a group."""

    body = serializers.CharField(allow_blank=True, trim_whitespace=False)


# =============================================================================
# Direct messages
# =============================================================================


class DirectMessageSerializer(serializers.ModelSerializer):
    """Direct message as seen by either party."""

    class Meta:
        model = DirectMessage
        fields = [
            "id",
            "sender",
            "receiver",
            "body",
            "sent_at",
            "is_read",
            "read_at",
        ]
        read_only_fields = fields


class DirectMessageCreateSerializer(serializers.Serializer):
    """Input for sending a direct message."""

    receiver_id = serializers.IntegerField(min_value=1, max_value=MAX_ID)
    body = serializers.CharField(allow_blank=True, trim_whitespace=False)


class ConversationSummarySerializer(serializers.Serializer):
    """Inbox entry: the counterpart, the thread's last message and unread count."""

    counterpart_id = serializers.IntegerField()
    counterpart = UserSummarySerializer(allow_null=True)
    last_message = DirectMessageSerializer()
    unread_count = serializers.IntegerField()


# =============================================================================
# Query parameters
# =============================================================================


class PageQuerySerializer(serializers.Serializer):
    """page / page_size query parameters (ranges checked by the services)."""

    page = serializers.IntegerField(required=False, max_value=MAX_ID)
    page_size = serializers.IntegerField(required=False, max_value=MAX_ID)
