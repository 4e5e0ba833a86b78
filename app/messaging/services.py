"""
Messaging services.

This module contains the business logic of the messaging core:
- GroupLifecycleService: Create, update (replace-all members) and deactivate groups
- GroupQueryService: Group reads for members and staff
- GroupMessageService: Post to and read from a group's message stream
- ConversationService: Direct message inbox and thread reads with read receipts
- DirectMessageService: Send, fetch and delete direct messages

Error handling:
    Expected failures are returned as ServiceResult failures with an error
    code and a taxonomy class (core.exceptions) that decides the HTTP status.
    Database errors raised inside a unit of work roll the whole unit back
    and are converted with BaseService.handle_exception, except unique
    constraint violations on memberships, which report MEMBERSHIP_CONFLICT.

Notifications:
    Every notification goes through NotificationSink after the unit of work
    commits. Dispatch failures are logged by the sink and never change the
    result returned here.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from django.db import DatabaseError, IntegrityError
from django.utils import timezone

from authentication.services import ActiveUserResolver
from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from core.services import BaseService, ServiceResult
from messaging.access import AccessGate
from messaging.constants import GROUP_CONFIG, MESSAGE_CONFIG
from messaging.models import DirectMessage, Group, GroupMessage
from messaging.pagination import PageWindow
from messaging.store import MembershipStore
from notifications.models import NotificationKind
from notifications.sink import NotificationSink

if TYPE_CHECKING:
    from authentication.models import User


# =============================================================================
# Shared validation
# =============================================================================


def clean_body(body: str | None) -> str:
    """
    Trim and validate a message body.

    Raises:
        ValidationError: EMPTY_BODY or BODY_TOO_LONG
    """
    body = body.strip() if body else ""
    if len(body) < MESSAGE_CONFIG.MIN_BODY_LENGTH:
        raise ValidationError(
            "Message body cannot be empty",
            error_code="EMPTY_BODY",
        )
    if len(body) > MESSAGE_CONFIG.MAX_BODY_LENGTH:
        raise ValidationError(
            f"Message body cannot exceed {MESSAGE_CONFIG.MAX_BODY_LENGTH} characters",
            error_code="BODY_TOO_LONG",
        )
    return body


def clean_group_metadata(name: str | None, description: str | None) -> tuple[str, str]:
    """
    Trim and validate group name and description.

    Raises:
        ValidationError: NAME_REQUIRED, NAME_TOO_LONG or DESCRIPTION_TOO_LONG
    """
    name = name.strip() if name else ""
    description = description.strip() if description else ""

    if not name:
        raise ValidationError("Group name is required", error_code="NAME_REQUIRED")
    if len(name) > GROUP_CONFIG.MAX_NAME_LENGTH:
        raise ValidationError(
            f"Group name cannot exceed {GROUP_CONFIG.MAX_NAME_LENGTH} characters",
            error_code="NAME_TOO_LONG",
        )
    if len(description) > GROUP_CONFIG.MAX_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Group description cannot exceed "
            f"{GROUP_CONFIG.MAX_DESCRIPTION_LENGTH} characters",
            error_code="DESCRIPTION_TOO_LONG",
        )
    return name, description


def _group_not_found() -> NotFoundError:
    return NotFoundError("Group not found", error_code="GROUP_NOT_FOUND")


def _not_group_member() -> PermissionDeniedError:
    return PermissionDeniedError(
        "You are not a member of this group",
        error_code="NOT_GROUP_MEMBER",
    )


# =============================================================================
# Group lifecycle
# =============================================================================


class GroupLifecycleService(BaseService):
    """
    Service for group creation, membership replacement and deactivation.

    Membership model:
        The member list supplied by the caller is authoritative. Create
        inserts exactly that list; update discards every active membership
        and inserts exactly the new list (replace-all). The creator is not
        added implicitly.

    Validation happens twice with the same criterion (ActiveUserResolver):
    once before the transaction so bad input is rejected cheaply, and again
    inside it so a user deactivated in between cannot slip in.
    """

    @classmethod
    def _check_member_ids(cls, member_ids: Iterable[int]) -> list[int]:
        """
        Validate a member id list against the active-user set.

        Returns:
            The ids in their given order

        Raises:
            ValidationError: DUPLICATE_MEMBER_IDS or INVALID_MEMBER_IDS
        """
        ids = list(member_ids)
        if len(set(ids)) != len(ids):
            duplicates = sorted(i for i, n in Counter(ids).items() if n > 1)
            raise ValidationError(
                "Member ids must not contain duplicates",
                error_code="DUPLICATE_MEMBER_IDS",
                details={"duplicate_ids": duplicates},
            )

        resolved = ActiveUserResolver.are_active_users(ids)
        invalid = [i for i in ids if i not in resolved]
        if invalid:
            raise ValidationError(
                "Some member ids are invalid or inactive",
                error_code="INVALID_MEMBER_IDS",
                details={"invalid_ids": invalid},
            )
        return ids

    @classmethod
    def _rejected(cls, operation: str, exc: BaseApplicationError) -> ServiceResult:
        cls.get_logger().warning(f"{operation} rejected: {exc}")
        return ServiceResult.from_exception(exc)

    @classmethod
    def _membership_conflict(cls, operation: str, exc: IntegrityError) -> ServiceResult:
        cls.get_logger().warning(f"{operation} hit a membership conflict: {exc}")
        return ServiceResult.failure(
            "A membership for one of these users changed concurrently. Please retry.",
            error_code="MEMBERSHIP_CONFLICT",
            error_class=ConflictError,
        )

    @classmethod
    def create_group(
        cls,
        name: str,
        description: str | None,
        requester_id: int,
        member_ids: Iterable[int],
    ) -> ServiceResult[Group]:
        """
        Create a group with an initial member list.

        The group row and every membership row are written in one unit of
        work; if any write fails, nothing is persisted.

        Args:
            name: Group name (trimmed, 1-100 characters)
            description: Optional description (up to 500 characters)
            requester_id: Staff user creating the group
            member_ids: Initial members (active user ids, no duplicates)

        Returns:
            ServiceResult with the hydrated Group (member_count,
            active_memberships)

        Error codes:
            NAME_REQUIRED / NAME_TOO_LONG / DESCRIPTION_TOO_LONG
            DUPLICATE_MEMBER_IDS: The same id appears twice
            INVALID_MEMBER_IDS: Ids that are unknown or inactive (invalid_ids)
            MEMBERSHIP_CONFLICT: Unique constraint violation on memberships
            INFRASTRUCTURE_ERROR: Store or transaction failure
        """
        try:
            name, description = clean_group_metadata(name, description)
            ids = cls._check_member_ids(member_ids)
        except ValidationError as e:
            return cls._rejected("create_group", e)

        try:
            with cls.atomic():
                cls._check_member_ids(ids)
                now = timezone.now()
                group = MembershipStore.create_group(name, description, requester_id)
                MembershipStore.add_members(group.pk, ids, joined_at=now)
        except ValidationError as e:
            return cls._rejected("create_group", e)
        except IntegrityError as e:
            return cls._membership_conflict("create_group", e)
        except DatabaseError as e:
            return cls.handle_exception(e, "create_group")

        cls.get_logger().info(
            f"User {requester_id} created group {group.pk} '{name}' "
            f"with {len(ids)} members"
        )

        NotificationSink.notify_many(
            ids,
            NotificationKind.GROUP_MEMBER_ADDED,
            {"group_id": group.pk, "group_name": name},
        )

        return ServiceResult.success(MembershipStore.get_hydrated_group(group.pk))

    @classmethod
    def update_group(
        cls,
        group_id: int,
        name: str,
        description: str | None,
        member_ids: Iterable[int],
        requester_id: int | None = None,
    ) -> ServiceResult[Group]:
        """
        Update group metadata and replace its member list.

        The group row is locked for the whole unit of work, so concurrent
        updates of the same group apply one after the other. Every active
        membership is deactivated (left_at stamped) and one new membership
        is inserted per supplied id.

        Args:
            group_id: Group to update
            name: New name (trimmed, 1-100 characters)
            description: New description (up to 500 characters)
            member_ids: Complete new member list
            requester_id: Staff user making the change (for logging)

        Returns:
            ServiceResult with the hydrated Group

        Error codes:
            GROUP_NOT_FOUND: Group missing or deactivated
            NAME_REQUIRED / NAME_TOO_LONG / DESCRIPTION_TOO_LONG
            DUPLICATE_MEMBER_IDS / INVALID_MEMBER_IDS
            MEMBERSHIP_CONFLICT / INFRASTRUCTURE_ERROR
        """
        try:
            name, description = clean_group_metadata(name, description)
            if MembershipStore.get_visible_group(group_id) is None:
                raise _group_not_found()
            ids = cls._check_member_ids(member_ids)
        except BaseApplicationError as e:
            return cls._rejected("update_group", e)

        try:
            with cls.atomic():
                group = MembershipStore.lock_visible_group(group_id)
                if group is None:
                    raise _group_not_found()
                cls._check_member_ids(ids)

                now = timezone.now()
                previous = MembershipStore.active_member_ids(group.pk)
                MembershipStore.save_group_metadata(group, name, description)
                MembershipStore.deactivate_members(group.pk, left_at=now)
                MembershipStore.add_members(group.pk, ids, joined_at=now)
        except BaseApplicationError as e:
            return cls._rejected("update_group", e)
        except IntegrityError as e:
            return cls._membership_conflict("update_group", e)
        except DatabaseError as e:
            return cls.handle_exception(e, "update_group")

        current = set(ids)
        added = current - previous
        removed = previous - current

        cls.get_logger().info(
            f"User {requester_id} updated group {group_id}: "
            f"{len(current)} members, {len(added)} added, {len(removed)} removed"
        )

        payload = {"group_id": group_id, "group_name": name}
        NotificationSink.notify_many(added, NotificationKind.GROUP_MEMBER_ADDED, payload)
        NotificationSink.notify_many(
            removed, NotificationKind.GROUP_MEMBER_REMOVED, payload
        )

        return ServiceResult.success(MembershipStore.get_hydrated_group(group_id))

    @classmethod
    def deactivate_group(cls, group_id: int, requester_id: int) -> ServiceResult[None]:
        """
        Deactivate (hide) a group.

        Memberships and messages are kept. The group disappears from
        listings and every later read or send reports GROUP_NOT_FOUND.

        Error codes:
            GROUP_NOT_FOUND: Group missing or already deactivated
            INFRASTRUCTURE_ERROR: Store or transaction failure
        """
        try:
            with cls.atomic():
                group = MembershipStore.lock_visible_group(group_id)
                if group is None:
                    raise _group_not_found()
                group.hide()
        except NotFoundError as e:
            return ServiceResult.from_exception(e)
        except DatabaseError as e:
            return cls.handle_exception(e, "deactivate_group")

        cls.get_logger().info(f"User {requester_id} deactivated group {group_id}")
        return ServiceResult.success(None)


# =============================================================================
# Group reads
# =============================================================================


class GroupQueryService(BaseService):
    """
    Read-only group access for members and staff.

    Member reads only ever show visible groups the user actively belongs to;
    staff reads show every visible group.
    """

    @classmethod
    def list_user_groups(cls, user_id: int) -> ServiceResult[list[Group]]:
        """Visible groups where user_id has an active membership, by name."""
        return ServiceResult.success(MembershipStore.groups_for_member(user_id))

    @classmethod
    def get_group_for_member(cls, group_id: int, user_id: int) -> ServiceResult[Group]:
        """
        Hydrated group detail for one of its members.

        Error codes:
            GROUP_NOT_FOUND: Group missing or deactivated
            NOT_GROUP_MEMBER: user_id holds no active membership
        """
        group = MembershipStore.get_hydrated_group(group_id)
        if group is None:
            return ServiceResult.from_exception(_group_not_found())
        if not AccessGate.is_group_member(user_id, group_id):
            return ServiceResult.from_exception(_not_group_member())
        return ServiceResult.success(group)

    @classmethod
    def list_groups(
        cls, page: int | None = None, page_size: int | None = None
    ) -> ServiceResult[list[Group]]:
        """
        Staff listing of visible groups, newest first.

        Error codes:
            INVALID_PAGE: page < 1 or page_size outside 1..100
        """
        try:
            window = PageWindow.build(page, page_size)
        except ValidationError as e:
            return ServiceResult.from_exception(e)
        return ServiceResult.success(MembershipStore.list_hydrated_groups(window))

    @classmethod
    def get_group(cls, group_id: int) -> ServiceResult[Group]:
        """
        Staff group detail.

        Error codes:
            GROUP_NOT_FOUND: Group missing or deactivated
        """
        group = MembershipStore.get_hydrated_group(group_id)
        if group is None:
            return ServiceResult.from_exception(_group_not_found())
        return ServiceResult.success(group)


# =============================================================================
# Group messages
# =============================================================================


class GroupMessageService(BaseService):
    """
    Service for a group's message stream.

    Both operations gate on the group being visible (GROUP_NOT_FOUND) and
    then on live membership (NOT_GROUP_MEMBER). Group messages have no read
    tracking.
    """

    @classmethod
    def _gate(cls, group_id: int, user_id: int) -> Group:
        group = MembershipStore.get_visible_group(group_id)
        if group is None:
            raise _group_not_found()
        if not AccessGate.is_group_member(user_id, group_id):
            cls.get_logger().warning(
                f"User {user_id} denied access to group {group_id}: not a member"
            )
            raise _not_group_member()
        return group

    @classmethod
    def send_group_message(
        cls, group_id: int, user_id: int, body: str
    ) -> ServiceResult[GroupMessage]:
        """
        Post a message to a group.

        Args:
            group_id: Target group
            user_id: Posting user (must be an active member)
            body: Message text (trimmed, 1-1000 characters)

        Returns:
            ServiceResult with the new GroupMessage

        Error codes:
            GROUP_NOT_FOUND: Group missing or deactivated
            NOT_GROUP_MEMBER: User is not an active member
            EMPTY_BODY / BODY_TOO_LONG: Invalid body
            INFRASTRUCTURE_ERROR: Store failure
        """
        try:
            group = cls._gate(group_id, user_id)
            body = clean_body(body)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        try:
            with cls.atomic():
                message = MembershipStore.insert_group_message(
                    group_id, user_id, body, sent_at=timezone.now()
                )
        except DatabaseError as e:
            return cls.handle_exception(e, "send_group_message")

        recipients = MembershipStore.active_member_ids(group_id) - {user_id}
        NotificationSink.notify_many(
            recipients,
            NotificationKind.GROUP_MESSAGE,
            {
                "group_id": group_id,
                "group_name": group.name,
                "message_id": message.pk,
                "sender_id": user_id,
                "sender_name": message.user.get_short_name(),
                "preview": body,
            },
        )

        return ServiceResult.success(message)

    @classmethod
    def list_group_messages(
        cls,
        group_id: int,
        user_id: int,
        page: int | None = None,
        page_size: int | None = None,
    ) -> ServiceResult[list[GroupMessage]]:
        """
        Page of a group's visible messages, newest first.

        Error codes:
            GROUP_NOT_FOUND / NOT_GROUP_MEMBER: Same gates as sending
            INVALID_PAGE: page < 1 or page_size outside 1..100
        """
        try:
            window = PageWindow.build(page, page_size)
            cls._gate(group_id, user_id)
        except BaseApplicationError as e:
            return ServiceResult.from_exception(e)

        return ServiceResult.success(MembershipStore.group_message_page(group_id, window))


# =============================================================================
# Direct message conversations
# =============================================================================


@dataclass
class ConversationSummary:
    """
    One entry of a user's direct message inbox.

    Attributes:
        counterpart_id: The other party
        counterpart: The other party's User row
        last_message: Most recent visible message in the thread
        unread_count: Visible messages from counterpart the user has not read
    """

    counterpart_id: int
    counterpart: User | None
    last_message: DirectMessage
    unread_count: int


class ConversationService(BaseService):
    """
    Service for direct message inbox and thread reads.

    A thread is every visible message between two users, in both directions.
    Reading a thread marks the reader's unread messages in it as read.
    """

    @classmethod
    def list_conversations(cls, user_id: int) -> ServiceResult[list[ConversationSummary]]:
        """
        Summarize the user's direct message threads.

        Threads are ordered by their last message, newest first; threads
        whose last messages share a timestamp are ordered by counterpart id.

        Returns:
            ServiceResult with a list of ConversationSummary
        """
        latest: dict[int, DirectMessage] = {}
        messages = MembershipStore.visible_messages_for_user(user_id)
        for message in messages.iterator():
            latest.setdefault(message.counterpart_id(user_id), message)

        unread = MembershipStore.unread_counts_by_sender(user_id)
        users = MembershipStore.users_by_id(latest.keys())

        summaries = [
            ConversationSummary(
                counterpart_id=counterpart_id,
                counterpart=users.get(counterpart_id),
                last_message=message,
                unread_count=unread.get(counterpart_id, 0),
            )
            for counterpart_id, message in latest.items()
        ]
        summaries.sort(key=lambda s: s.counterpart_id)
        summaries.sort(key=lambda s: s.last_message.sent_at, reverse=True)
        return ServiceResult.success(summaries)

    @classmethod
    def get_thread(
        cls,
        user_id: int,
        other_user_id: int,
        page: int | None = None,
        page_size: int | None = None,
    ) -> ServiceResult[list[DirectMessage]]:
        """
        Page of the thread between user_id and other_user_id.

        The page is selected newest first (page 1 holds the most recent
        messages) and returned oldest first for display.

        Side effect:
            Every unread message from other_user_id to user_id that existed
            when the fetch started is marked read, in its own short unit of
            work. Messages that commit while the fetch runs stay unread. A failure there is logged and the page is still returned.
            Calling again without new messages writes nothing.

        Error codes:
            INVALID_PAGE: page < 1 or page_size outside 1..100
            NOT_THREAD_PARTY: user may not read this thread
        """
        try:
            window = PageWindow.build(page, page_size)
        except ValidationError as e:
            return ServiceResult.from_exception(e)

        if not AccessGate.is_thread_party(user_id, other_user_id):
            return ServiceResult.failure(
                "You cannot read this conversation",
                error_code="NOT_THREAD_PARTY",
                error_class=PermissionDeniedError,
            )

        max_id = MembershipStore.thread_max_id(user_id, other_user_id)
        if max_id is None:
            return ServiceResult.success([])

        unread_ids = MembershipStore.unread_ids_in_thread(user_id, other_user_id, max_id)
        messages = MembershipStore.thread_page(user_id, other_user_id, window, max_id)
        messages.reverse()

        read_at = cls._mark_read(user_id, other_user_id, unread_ids)
        if read_at is not None:
            for message in messages:
                if message.pk in unread_ids:
                    message.is_read = True
                    message.read_at = read_at

        return ServiceResult.success(messages)

    @classmethod
    def _mark_read(
        cls, user_id: int, other_user_id: int, unread_ids: list[int]
    ) -> datetime | None:
        """
        Mark the messages in unread_ids as read by user_id.

        Returns:
            The read timestamp applied, or None if nothing was marked
        """
        if not unread_ids:
            return None

        read_at = timezone.now()
        try:
            with cls.atomic():
                marked = MembershipStore.mark_thread_read(
                    user_id, other_user_id, unread_ids, read_at
                )
        except DatabaseError:
            cls.get_logger().warning(
                f"Could not mark thread {other_user_id}->{user_id} read "
                f"({len(unread_ids)} messages)",
                exc_info=True,
            )
            return None

        cls.get_logger().debug(
            f"Marked {marked} messages from {other_user_id} read for {user_id}"
        )
        return read_at


# =============================================================================
# Direct messages
# =============================================================================


class DirectMessageService(BaseService):
    """
    Service for individual direct messages.

    Deletion:
        Only the sender can delete, and deletion hides the message for both
        parties. Anyone else asking to delete a message gets
        MESSAGE_NOT_FOUND, so the existence of other people's messages is
        never revealed.
    """

    @classmethod
    def send(
        cls, sender_id: int, receiver_id: int, body: str
    ) -> ServiceResult[DirectMessage]:
        """
        Send a direct message.

        Args:
            sender_id: Sending user
            receiver_id: Receiving user (must be active)
            body: Message text (trimmed, 1-1000 characters)

        Returns:
            ServiceResult with the new DirectMessage (unread, visible)

        Error codes:
            SAME_USER: sender and receiver are the same user
            RECEIVER_UNAVAILABLE: Receiver missing or inactive
            EMPTY_BODY / BODY_TOO_LONG: Invalid body
            INFRASTRUCTURE_ERROR: Store failure
        """
        try:
            if sender_id == receiver_id:
                raise ValidationError(
                    "You cannot send a message to yourself",
                    error_code="SAME_USER",
                )
            if not ActiveUserResolver.is_active_user(receiver_id):
                raise ValidationError(
                    "Receiver not found or inactive",
                    error_code="RECEIVER_UNAVAILABLE",
                )
            body = clean_body(body)
        except ValidationError as e:
            cls.get_logger().warning(
                f"Direct message {sender_id}->{receiver_id} rejected: {e}"
            )
            return ServiceResult.from_exception(e)

        try:
            with cls.atomic():
                message = MembershipStore.insert_direct_message(
                    sender_id, receiver_id, body, sent_at=timezone.now()
                )
        except DatabaseError as e:
            return cls.handle_exception(e, "send_direct_message")

        NotificationSink.notify(
            receiver_id,
            NotificationKind.DIRECT_MESSAGE,
            {
                "message_id": message.pk,
                "sender_id": sender_id,
                "sender_name": message.sender.get_short_name(),
                "preview": body,
            },
        )

        return ServiceResult.success(message)

    @classmethod
    def get_message(cls, message_id: int, user_id: int) -> ServiceResult[DirectMessage]:
        """
        Fetch a visible message the user sent or received.

        Error codes:
            MESSAGE_NOT_FOUND: Unknown, deleted, or not a party
        """
        message = MembershipStore.get_visible_message_for_party(message_id, user_id)
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
                error_class=NotFoundError,
            )
        return ServiceResult.success(message)

    @classmethod
    def soft_delete(cls, message_id: int, requester_id: int) -> ServiceResult[DirectMessage]:
        """
        Hide a message the requester sent.

        Error codes:
            MESSAGE_NOT_FOUND: Unknown id, or requester is not the sender
            ALREADY_DELETED: Message was already deleted (reported as 404)
            INFRASTRUCTURE_ERROR: Store failure
        """
        message = MembershipStore.get_sent_message(message_id, requester_id)
        if message is None:
            return ServiceResult.failure(
                "Message not found",
                error_code="MESSAGE_NOT_FOUND",
                error_class=NotFoundError,
            )
        if message.is_deleted:
            return ServiceResult.failure(
                "Message already deleted",
                error_code="ALREADY_DELETED",
                error_class=NotFoundError,
            )

        try:
            with cls.atomic():
                message.hide()
        except DatabaseError as e:
            return cls.handle_exception(e, "soft_delete_direct_message")

        cls.get_logger().info(f"User {requester_id} deleted direct message {message_id}")
        return ServiceResult.success(message)
