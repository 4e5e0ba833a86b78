"""
Serializers for user data embedded in messaging responses.

Serializers:
    UserSummarySerializer: Public view of a user (member lists, counterparts)
"""

from rest_framework import serializers

from authentication.models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """
    Public summary of a user.

    Used for group members and conversation counterparts. Never exposes
    staff flags or timestamps.
    """

    full_name = serializers.CharField(source="get_full_name", read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "username",
            "first_name",
            "last_name",
            "full_name",
        ]
        read_only_fields = fields
