"""
Messaging models.

This module defines the data models for the messaging core:
- Direct (1:1) messages between two users
- Groups with a replace-all membership list managed by staff
- Messages posted to a group by its members

Models:
    Group: Named container for members and group messages
    Membership: One user's participation in a group
    GroupMessage: Message posted to a group
    DirectMessage: Message from one user to another

Design Decisions:
    - Nothing here is hard deleted; groups and messages are hidden through
      VisibilityMixin, memberships are deactivated with left_at stamped
    - Membership rows are history: replacing a member list deactivates the
      old rows and inserts fresh ones, so every stint is preserved
    - At most one active membership per (group, user), enforced by a partial
      unique constraint rather than application checks
    - Direct messages carry their own read state; group messages do not
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from core.managers import VisibilityQuerySet
from core.model_mixins import VisibilityMixin
from core.models import BaseModel


class Group(VisibilityMixin, BaseModel):
    """
    A named group of users who can post messages to each other.

    Groups are created and maintained by staff. Deactivation hides the group
    (visibility=HIDDEN): it disappears from listings and rejects reads and
    sends, while its memberships and messages are retained.

    Fields:
        name: Display name (1-100 characters, trimmed)
        description: Optional free text (up to 500 characters)
        created_by: Staff user who created the group
    """

    name = models.CharField(
        max_length=100,
        help_text="Group display name",
    )

    description = models.CharField(
        max_length=500,
        blank=True,
        default="",
        help_text="Optional group description",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_groups",
        help_text="User who created the group",
    )

    objects = VisibilityQuerySet.as_manager()

    class Meta:
        db_table = "messaging_group"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["visibility", "-created_at"],
                name="msg_group_visible_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        return f"Group {self.pk}: {self.name}"


class Membership(BaseModel):
    """
    A user's participation in a group.

    Membership Lifecycle:
        1. Added by create/update: row inserted with is_active=True
        2. Removed or replaced by update: is_active=False, left_at stamped
        3. Re-added later: NEW row inserted; older rows stay as history

    Fields:
        group: Group this membership belongs to
        user: Member
        joined_at: When this stint started
        left_at: When this stint ended (null while active)
        is_active: Whether the membership currently grants access

    Constraints:
        - UniqueConstraint(group, user) WHERE is_active:
          Only one active membership per user per group
    """

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="memberships",
        help_text="Group this membership belongs to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_memberships",
        help_text="Member of the group",
    )

    joined_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the user joined the group",
    )

    left_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the membership ended (null if still active)",
    )

    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this membership currently grants access",
    )

    class Meta:
        db_table = "messaging_membership"
        ordering = ["joined_at", "id"]
        indexes = [
            # Active members of a group
            models.Index(
                fields=["group", "is_active"],
                name="msg_member_group_active_idx",
            ),
            # A user's active groups
            models.Index(
                fields=["user", "is_active"],
                name="msg_member_user_active_idx",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["group", "user"],
                condition=Q(is_active=True),
                name="unique_active_membership",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        status = "active" if self.is_active else "left"
        return f"Membership: {self.user_id} in {self.group_id} [{status}]"


class GroupMessage(VisibilityMixin, BaseModel):
    """
    A message posted to a group.

    Only active members of a visible group can post. Group messages are
    never edited and carry no per-user read state.

    Fields:
        group: Group the message was posted to
        user: Member who posted it
        body: Trimmed text (1-1000 characters)
        sent_at: When the message was posted
    """

    group = models.ForeignKey(
        Group,
        on_delete=models.CASCADE,
        related_name="messages",
        help_text="Group the message was posted to",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="group_messages",
        help_text="Member who posted the message",
    )

    body = models.TextField(
        help_text="Message text",
    )

    sent_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the message was posted",
    )

    objects = VisibilityQuerySet.as_manager()

    class Meta:
        db_table = "messaging_group_message"
        ordering = ["-sent_at", "-id"]
        indexes = [
            models.Index(
                fields=["group", "visibility", "-sent_at"],
                name="msg_gmsg_group_sent_idx",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        preview = self.body[:50] + "..." if len(self.body) > 50 else self.body
        return f"GroupMessage {self.pk} in {self.group_id}: {preview}"


class DirectMessage(VisibilityMixin, BaseModel):
    """
    A message from one user to another.

    Read Tracking:
        is_read/read_at are set on the receiver's side when the receiver
        fetches the thread. Only the receiver's fetch marks messages read.

    Deletion:
        Only the sender can delete; deletion hides the message from both
        parties (visibility=HIDDEN) and removes it from unread counts.

    Fields:
        sender: User who sent the message
        receiver: User who received it
        body: Trimmed text (1-1000 characters)
        sent_at: When the message was sent
        is_read: Whether the receiver has seen it
        read_at: When the receiver first saw it
    """

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="sent_direct_messages",
        help_text="User who sent the message",
    )

    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_direct_messages",
        help_text="User who received the message",
    )

    body = models.TextField(
        help_text="Message text",
    )

    sent_at = models.DateTimeField(
        default=timezone.now,
        help_text="When the message was sent",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Whether the receiver has read the message",
    )

    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the receiver read the message",
    )

    objects = VisibilityQuerySet.as_manager()

    class Meta:
        db_table = "messaging_direct_message"
        ordering = ["-sent_at", "-id"]
        indexes = [
            # Thread reads in either direction
            models.Index(
                fields=["sender", "receiver", "-sent_at"],
                name="msg_dm_pair_sent_idx",
            ),
            # Unread counts per receiver
            models.Index(
                fields=["receiver", "is_read"],
                name="msg_dm_receiver_unread_idx",
                condition=Q(visibility="active"),
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(sender=F("receiver")),
                name="direct_message_distinct_parties",
            ),
        ]

    def __str__(self) -> str:
        """Return human-readable representation."""
        preview = self.body[:50] + "..." if len(self.body) > 50 else self.body
        return f"DirectMessage {self.pk} {self.sender_id}->{self.receiver_id}: {preview}"

    def counterpart_id(self, user_id: int) -> int:
        """Return the other party's id from user_id's point of view."""
        return self.receiver_id if self.sender_id == user_id else self.sender_id
