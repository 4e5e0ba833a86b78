"""
Django admin configuration for messaging models.

Membership changes made here bypass GroupLifecycleService validation and
notifications; use the API for routine administration.
"""

from django.contrib import admin

from messaging.models import DirectMessage, Group, GroupMessage, Membership


class MembershipInline(admin.TabularInline):
    model = Membership
    extra = 0
    raw_id_fields = ["user"]
    readonly_fields = ["joined_at", "left_at", "is_active"]
    ordering = ["-is_active", "joined_at"]


@admin.register(Group)
class GroupAdmin(admin.ModelAdmin):
    """Admin configuration for Group."""

    list_display = ["id", "name", "visibility", "created_by", "created_at"]
    list_filter = ["visibility", "created_at"]
    search_fields = ["name", "description"]
    raw_id_fields = ["created_by"]
    readonly_fields = ["hidden_at", "created_at", "updated_at"]
    inlines = [MembershipInline]


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    """Admin configuration for Membership history."""

    list_display = ["id", "group", "user", "is_active", "joined_at", "left_at"]
    list_filter = ["is_active"]
    search_fields = ["group__name", "user__email"]
    raw_id_fields = ["group", "user"]


@admin.register(GroupMessage)
class GroupMessageAdmin(admin.ModelAdmin):
    """Admin configuration for GroupMessage."""

    list_display = ["id", "group", "user", "visibility", "sent_at"]
    list_filter = ["visibility"]
    search_fields = ["body", "user__email"]
    raw_id_fields = ["group", "user"]


@admin.register(DirectMessage)
class DirectMessageAdmin(admin.ModelAdmin):
    """Admin configuration for DirectMessage."""

    list_display = ["id", "sender", "receiver", "is_read", "visibility", "sent_at"]
    list_filter = ["is_read", "visibility"]
    search_fields = ["body", "sender__email", "receiver__email"]
    raw_id_fields = ["sender", "receiver"]
