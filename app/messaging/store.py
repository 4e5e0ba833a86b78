"""
Named queries and writes over messaging tables.

MembershipStore is the only place that builds messaging querysets. Services
call these methods instead of traversing relations, so every read states its
filters (visibility, active membership, party) and every write states exactly
which rows it touches. Methods return model instances, lists or plain values,
never lazy querysets, except where a caller needs to paginate.

Transactions are owned by the calling service (BaseService.atomic); methods
that must run inside one say so in their docstring.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from django.contrib.auth import get_user_model
from django.db.models import Count, Max, Prefetch, Q, QuerySet

from core.models import is_storable_id
from messaging.models import DirectMessage, Group, GroupMessage, Membership
from messaging.pagination import PageWindow


class MembershipStore:
    """
    Data access for groups, memberships, group messages and direct messages.

    Sections:
        Groups: lookup, locking, metadata writes, hydration
        Memberships: active member sets, replace-all writes
        Group messages: insert, newest-first pages
        Direct messages: insert, thread pages, read receipts, hiding
    """

    # =========================================================================
    # Groups
    # =========================================================================

    @staticmethod
    def get_visible_group(group_id: int) -> Group | None:
        """Return the group if it exists and is not deactivated."""
        if not is_storable_id(group_id):
            return None
        return Group.objects.visible().filter(pk=group_id).first()

    @staticmethod
    def lock_visible_group(group_id: int) -> Group | None:
        """
        Return the visible group with its row locked until commit.

        Must run inside a transaction. Concurrent membership writes to the
        same group queue behind this lock.
        """
        if not is_storable_id(group_id):
            return None
        return Group.objects.select_for_update().visible().filter(pk=group_id).first()

    @staticmethod
    def create_group(name: str, description: str, created_by_id: int | None) -> Group:
        return Group.objects.create(
            name=name,
            description=description,
            created_by_id=created_by_id,
        )

    @staticmethod
    def save_group_metadata(group: Group, name: str, description: str) -> Group:
        group.name = name
        group.description = description
        group.save(update_fields=["name", "description", "updated_at"])
        return group

    @staticmethod
    def hydrated_groups() -> QuerySet[Group]:
        """
        Visible groups annotated with member_count and prefetched members.

        Each group gets ``active_memberships``: its active Membership rows
        (with users) in join order.
        """
        return (
            Group.objects.visible()
            .annotate(
                member_count=Count(
                    "memberships", filter=Q(memberships__is_active=True)
                )
            )
            .prefetch_related(
                Prefetch(
                    "memberships",
                    queryset=Membership.objects.filter(is_active=True)
                    .select_related("user")
                    .order_by("joined_at", "id"),
                    to_attr="active_memberships",
                )
            )
        )

    @classmethod
    def get_hydrated_group(cls, group_id: int) -> Group | None:
        if not is_storable_id(group_id):
            return None
        return cls.hydrated_groups().filter(pk=group_id).first()

    @classmethod
    def list_hydrated_groups(cls, window: PageWindow) -> list[Group]:
        """Page of visible groups, newest first."""
        queryset = cls.hydrated_groups().order_by("-created_at", "-id")
        return list(queryset[window.offset:window.limit])

    @classmethod
    def groups_for_member(cls, user_id: int) -> list[Group]:
        """Visible groups where user_id holds an active membership, by name."""
        return list(
            cls.hydrated_groups()
            .filter(
                pk__in=Membership.objects.filter(
                    user_id=user_id, is_active=True
                ).values("group_id")
            )
            .order_by("name", "id")
        )

    # =========================================================================
    # Memberships
    # =========================================================================

    @staticmethod
    def has_active_membership(user_id: int, group_id: int) -> bool:
        if not is_storable_id(group_id):
            return False
        return Membership.objects.filter(
            user_id=user_id, group_id=group_id, is_active=True
        ).exists()

    @staticmethod
    def active_member_ids(group_id: int) -> set[int]:
        return set(
            Membership.objects.filter(group_id=group_id, is_active=True).values_list(
                "user_id", flat=True
            )
        )

    @staticmethod
    def add_members(
        group_id: int, user_ids: Iterable[int], joined_at: datetime
    ) -> list[Membership]:
        """
        Insert one active membership per user id.

        Must run inside a transaction. An existing active row for the same
        (group, user) raises IntegrityError from the partial unique index.
        """
        rows = [
            Membership(
                group_id=group_id,
                user_id=user_id,
                joined_at=joined_at,
                is_active=True,
            )
            for user_id in user_ids
        ]
        return Membership.objects.bulk_create(rows)

    @staticmethod
    def deactivate_members(group_id: int, left_at: datetime) -> int:
        """
        End every active membership of the group.

        Must run inside a transaction.

        Returns:
            Number of memberships deactivated
        """
        return Membership.objects.filter(group_id=group_id, is_active=True).update(
            is_active=False,
            left_at=left_at,
            updated_at=left_at,
        )

    # =========================================================================
    # Group messages
    # =========================================================================

    @staticmethod
    def insert_group_message(
        group_id: int, user_id: int, body: str, sent_at: datetime
    ) -> GroupMessage:
        return GroupMessage.objects.create(
            group_id=group_id,
            user_id=user_id,
            body=body,
            sent_at=sent_at,
        )

    @staticmethod
    def group_message_page(group_id: int, window: PageWindow) -> list[GroupMessage]:
        """Visible messages of the group, newest first."""
        queryset = (
            GroupMessage.objects.visible()
            .filter(group_id=group_id)
            .select_related("user")
            .order_by("-sent_at", "-id")
        )
        return list(queryset[window.offset:window.limit])

    # =========================================================================
    # Direct messages
    # =========================================================================

    @staticmethod
    def insert_direct_message(
        sender_id: int, receiver_id: int, body: str, sent_at: datetime
    ) -> DirectMessage:
        return DirectMessage.objects.create(
            sender_id=sender_id,
            receiver_id=receiver_id,
            body=body,
            sent_at=sent_at,
        )

    @staticmethod
    def visible_messages_for_user(user_id: int) -> QuerySet[DirectMessage]:
        """Visible direct messages sent or received by user_id, newest first."""
        return (
            DirectMessage.objects.visible()
            .filter(Q(sender_id=user_id) | Q(receiver_id=user_id))
            .order_by("-sent_at", "-id")
        )

    @staticmethod
    def unread_counts_by_sender(receiver_id: int) -> dict[int, int]:
        """Number of visible unread messages to receiver_id, per sender."""
        rows = (
            DirectMessage.objects.visible()
            .filter(receiver_id=receiver_id, is_read=False)
            .values("sender_id")
            .annotate(unread=Count("id"))
            .order_by()
        )
        return {row["sender_id"]: row["unread"] for row in rows}

    @staticmethod
    def _thread(user_id: int, other_user_id: int) -> QuerySet[DirectMessage]:
        return DirectMessage.objects.visible().filter(
            Q(sender_id=user_id, receiver_id=other_user_id)
            | Q(sender_id=other_user_id, receiver_id=user_id)
        )

    @classmethod
    def thread_max_id(cls, user_id: int, other_user_id: int) -> int | None:
        """Highest visible message id in the thread, or None if empty."""
        if not is_storable_id(other_user_id):
            return None
        return cls._thread(user_id, other_user_id).aggregate(max_id=Max("id"))["max_id"]

    @classmethod
    def thread_page(
        cls,
        user_id: int,
        other_user_id: int,
        window: PageWindow,
        max_id: int,
    ) -> list[DirectMessage]:
        """Visible thread messages with id <= max_id, newest first."""
        queryset = (
            cls._thread(user_id, other_user_id)
            .filter(id__lte=max_id)
            .order_by("-sent_at", "-id")
        )
        return list(queryset[window.offset:window.limit])

    @staticmethod
    def unread_ids_in_thread(receiver_id: int, sender_id: int, max_id: int) -> list[int]:
        """Ids of visible unread messages from sender_id to receiver_id, up to max_id."""
        return list(
            DirectMessage.objects.visible()
            .filter(
                receiver_id=receiver_id,
                sender_id=sender_id,
                is_read=False,
                id__lte=max_id,
            )
            .values_list("id", flat=True)
        )

    @staticmethod
    def mark_thread_read(
        receiver_id: int, sender_id: int, message_ids: list[int], read_at: datetime
    ) -> int:
        """
        Mark the listed messages from sender_id to receiver_id as read.

        message_ids is the unread set the caller observed during its fetch;
        a message committed afterwards stays unread even if its id is lower.
        Rows already read or hidden are skipped, so re-running is a no-op.

        Returns:
            Number of messages marked read
        """
        return DirectMessage.objects.visible().filter(
            pk__in=message_ids,
            receiver_id=receiver_id,
            sender_id=sender_id,
            is_read=False,
        ).update(
            is_read=True,
            read_at=read_at,
            updated_at=read_at,
        )

    @staticmethod
    def get_sent_message(message_id: int, sender_id: int) -> DirectMessage | None:
        """Message by id and sender, regardless of visibility."""
        if not is_storable_id(message_id):
            return None
        return DirectMessage.objects.filter(pk=message_id, sender_id=sender_id).first()

    @staticmethod
    def get_visible_message_for_party(
        message_id: int, user_id: int
    ) -> DirectMessage | None:
        if not is_storable_id(message_id):
            return None
        return (
            DirectMessage.objects.visible()
            .filter(pk=message_id)
            .filter(Q(sender_id=user_id) | Q(receiver_id=user_id))
            .first()
        )

    # =========================================================================
    # Users
    # =========================================================================

    @staticmethod
    def users_by_id(user_ids: Iterable[int]) -> dict:
        """Map of id to User for the given ids, in one query."""
        return get_user_model().objects.in_bulk(list(user_ids))
