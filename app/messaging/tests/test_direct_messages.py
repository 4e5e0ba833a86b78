"""
Tests for direct messaging: sending, threads, inbox aggregation, deletion.

Covers:
- DirectMessageService.send / get_message / soft_delete
- ConversationService.list_conversations / get_thread (with read receipts)
"""

from datetime import timedelta

from django.db import DatabaseError
from django.utils import timezone

from authentication.tests.factories import UserFactory
from messaging.models import DirectMessage
from messaging.services import ConversationService, DirectMessageService
from messaging.store import MembershipStore
from messaging.tests.factories import DirectMessageFactory
from notifications.models import Notification, NotificationKind


# =============================================================================
# TestSend
# =============================================================================


class TestSend:
    """Tests for DirectMessageService.send()."""

    def test_sends_unread_visible_message(self, member_user, outsider):
        result = DirectMessageService.send(member_user.id, outsider.id, " hi there ")

        assert result.success is True
        message = result.data
        assert message.body == "hi there"
        assert message.is_read is False
        assert message.is_active is True

    def test_inactive_receiver_is_unavailable(self, member_user, inactive_user):
        result = DirectMessageService.send(member_user.id, inactive_user.id, "hi")

        assert result.error_code == "RECEIVER_UNAVAILABLE"
        assert result.status_code == 400
        assert not DirectMessage.objects.exists()

    def test_unknown_receiver_is_unavailable(self, member_user):
        result = DirectMessageService.send(member_user.id, 999_999, "hi")

        assert result.error_code == "RECEIVER_UNAVAILABLE"

    def test_out_of_range_receiver_is_unavailable(self, member_user):
        result = DirectMessageService.send(member_user.id, 2**70, "hi")

        assert result.error_code == "RECEIVER_UNAVAILABLE"
        assert not DirectMessage.objects.exists()

    def test_self_message_is_rejected(self, member_user):
        result = DirectMessageService.send(member_user.id, member_user.id, "me")

        assert result.error_code == "SAME_USER"

    def test_empty_body_is_rejected(self, member_user, outsider):
        result = DirectMessageService.send(member_user.id, outsider.id, "\n\t ")

        assert result.error_code == "EMPTY_BODY"

    def test_store_failure_is_infrastructure_error(self, member_user, outsider, monkeypatch):
        def failing_insert(*args, **kwargs):
            raise DatabaseError("disk full")

        monkeypatch.setattr(
            MembershipStore, "insert_direct_message", staticmethod(failing_insert)
        )

        result = DirectMessageService.send(member_user.id, outsider.id, "hi")

        assert result.error_code == "INFRASTRUCTURE_ERROR"
        assert "correlation_id" in result.to_response()

    def test_notifies_receiver(
        self, member_user, outsider, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            result = DirectMessageService.send(member_user.id, outsider.id, "hi")

        notification = Notification.objects.get()
        assert notification.recipient_id == outsider.id
        assert notification.kind == NotificationKind.DIRECT_MESSAGE
        assert notification.payload["message_id"] == result.data.id


# =============================================================================
# TestListConversations
# =============================================================================


class TestListConversations:
    """Tests for ConversationService.list_conversations()."""

    def test_aggregates_by_counterpart(self, db):
        """
        (A->B, t1), (B->A, t2 unread), (A->C, t3) gives
        A: [C@t3, B@t2 unread 1] and B: [A@t2 unread 0].

        Why it matters: this is the inbox every client renders.
        """
        a, b, c = UserFactory.create_batch(3)
        t1 = timezone.now() - timedelta(minutes=3)
        t2 = t1 + timedelta(minutes=1)
        t3 = t2 + timedelta(minutes=1)
        DirectMessageFactory(sender=a, receiver=b, sent_at=t1, is_read=True)
        b_to_a = DirectMessageFactory(sender=b, receiver=a, sent_at=t2)
        a_to_c = DirectMessageFactory(sender=a, receiver=c, sent_at=t3)

        inbox_a = ConversationService.list_conversations(a.id).data
        inbox_b = ConversationService.list_conversations(b.id).data

        assert [(s.counterpart_id, s.last_message.id, s.unread_count) for s in inbox_a] == [
            (c.id, a_to_c.id, 0),
            (b.id, b_to_a.id, 1),
        ]
        assert [(s.counterpart_id, s.last_message.id, s.unread_count) for s in inbox_b] == [
            (a.id, b_to_a.id, 0),
        ]
        assert inbox_a[0].counterpart == c

    def test_ties_broken_by_counterpart_id(self, db):
        me = UserFactory()
        first, second = UserFactory.create_batch(2)
        at = timezone.now()
        DirectMessageFactory(sender=second, receiver=me, sent_at=at)
        DirectMessageFactory(sender=first, receiver=me, sent_at=at)

        inbox = ConversationService.list_conversations(me.id).data

        assert [s.counterpart_id for s in inbox] == sorted([first.id, second.id])

    def test_deleted_messages_excluded_from_summary_and_unread(self, member_user, outsider):
        kept = DirectMessageFactory(
            sender=outsider, receiver=member_user, sent_at=timezone.now() - timedelta(minutes=1)
        )
        DirectMessageFactory(sender=outsider, receiver=member_user).hide()

        inbox = ConversationService.list_conversations(member_user.id).data

        assert len(inbox) == 1
        assert inbox[0].last_message.id == kept.id
        assert inbox[0].unread_count == 1

    def test_empty_inbox(self, member_user):
        assert ConversationService.list_conversations(member_user.id).data == []


# =============================================================================
# TestGetThread
# =============================================================================


class TestGetThread:
    """Tests for ConversationService.get_thread()."""

    def _thread(self, a, b, count):
        start = timezone.now() - timedelta(minutes=count)
        return [
            DirectMessageFactory(
                sender=a if i % 2 == 0 else b,
                receiver=b if i % 2 == 0 else a,
                sent_at=start + timedelta(minutes=i),
            )
            for i in range(count)
        ]

    def test_page_is_newest_selected_oldest_first(self, member_user, outsider):
        messages = self._thread(member_user, outsider, 5)

        page1 = ConversationService.get_thread(member_user.id, outsider.id, 1, 2).data
        page3 = ConversationService.get_thread(member_user.id, outsider.id, 3, 2).data

        assert [m.id for m in page1] == [messages[3].id, messages[4].id]
        assert [m.id for m in page3] == [messages[0].id]

    def test_marks_only_incoming_messages_read(self, member_user, outsider):
        outgoing = DirectMessageFactory(sender=member_user, receiver=outsider)
        incoming = DirectMessageFactory(sender=outsider, receiver=member_user)

        result = ConversationService.get_thread(member_user.id, outsider.id)

        outgoing.refresh_from_db()
        incoming.refresh_from_db()
        assert incoming.is_read is True
        assert incoming.read_at is not None
        assert outgoing.is_read is False
        returned = {m.id: m for m in result.data}
        assert returned[incoming.id].is_read is True

    def test_marks_whole_thread_not_just_page(self, member_user, outsider):
        start = timezone.now() - timedelta(minutes=10)
        older = [
            DirectMessageFactory(
                sender=outsider, receiver=member_user, sent_at=start + timedelta(minutes=i)
            )
            for i in range(3)
        ]

        ConversationService.get_thread(member_user.id, outsider.id, 1, 1)

        assert all(
            DirectMessage.objects.get(pk=m.pk).is_read for m in older
        )

    def test_second_fetch_writes_nothing(
        self, member_user, outsider, django_assert_num_queries
    ):
        """
        Reading a thread twice leaves zero unread both times and the second
        read issues no update.

        Why it matters: read receipts are idempotent.
        """
        DirectMessageFactory.create_batch(3, sender=outsider, receiver=member_user)

        ConversationService.get_thread(member_user.id, outsider.id)
        first_read_at = set(
            DirectMessage.objects.values_list("read_at", flat=True)
        )

        # max id, unread ids, page
        with django_assert_num_queries(3):
            ConversationService.get_thread(member_user.id, outsider.id)

        assert not DirectMessage.objects.filter(is_read=False).exists()
        assert set(DirectMessage.objects.values_list("read_at", flat=True)) == first_read_at

    def test_deleted_messages_are_hidden_from_thread(self, member_user, outsider):
        kept = DirectMessageFactory(sender=outsider, receiver=member_user)
        deleted = DirectMessageFactory(sender=outsider, receiver=member_user)
        deleted.hide()

        result = ConversationService.get_thread(member_user.id, outsider.id)

        assert [m.id for m in result.data] == [kept.id]
        deleted.refresh_from_db()
        assert deleted.is_read is False

    def test_read_receipt_failure_does_not_fail_fetch(
        self, member_user, outsider, monkeypatch
    ):
        message = DirectMessageFactory(sender=outsider, receiver=member_user)

        def failing_mark(*args, **kwargs):
            raise DatabaseError("lock timeout")

        monkeypatch.setattr(MembershipStore, "mark_thread_read", failing_mark)

        result = ConversationService.get_thread(member_user.id, outsider.id)

        assert result.success is True
        assert [m.id for m in result.data] == [message.id]
        assert result.data[0].is_read is False

    def test_message_arriving_mid_fetch_stays_unread(
        self, member_user, outsider, monkeypatch
    ):
        """
        A message that commits while the thread is being read keeps is_read
        False, even when its id is lower than ones already marked.

        Why it matters: ids are allocated before commit, so a concurrent send
        can land below the fetch's max id without the reader having seen it.
        """
        first = DirectMessageFactory(sender=outsider, receiver=member_user)
        second = DirectMessageFactory(
            pk=first.pk + 10, sender=outsider, receiver=member_user
        )
        late = {}
        original_page = MembershipStore.thread_page

        def page_with_late_arrival(*args, **kwargs):
            late["message"] = DirectMessageFactory(
                pk=first.pk + 5, sender=outsider, receiver=member_user
            )
            return original_page(*args, **kwargs)

        monkeypatch.setattr(MembershipStore, "thread_page", page_with_late_arrival)

        ConversationService.get_thread(member_user.id, outsider.id)

        first.refresh_from_db()
        second.refresh_from_db()
        late["message"].refresh_from_db()
        assert first.is_read is True
        assert second.is_read is True
        assert late["message"].is_read is False
        assert late["message"].read_at is None

    def test_invalid_page_size(self, member_user, outsider):
        result = ConversationService.get_thread(member_user.id, outsider.id, 1, 0)

        assert result.error_code == "INVALID_PAGE"

    def test_out_of_range_counterpart_is_empty(self, member_user):
        result = ConversationService.get_thread(member_user.id, 2**70)

        assert result.success is True
        assert result.data == []

    def test_empty_thread(self, member_user, outsider):
        assert ConversationService.get_thread(member_user.id, outsider.id).data == []


# =============================================================================
# TestSoftDelete / TestGetMessage
# =============================================================================


class TestSoftDelete:
    """Tests for DirectMessageService.soft_delete()."""

    def test_sender_can_delete(self, member_user, outsider):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)

        result = DirectMessageService.soft_delete(message.id, member_user.id)

        message.refresh_from_db()
        assert result.success is True
        assert message.is_deleted is True

    def test_receiver_gets_not_found(self, member_user, outsider):
        """
        Why it matters: non-senders cannot learn whether a message exists.
        """
        message = DirectMessageFactory(sender=member_user, receiver=outsider)

        result = DirectMessageService.soft_delete(message.id, outsider.id)

        message.refresh_from_db()
        assert result.error_code == "MESSAGE_NOT_FOUND"
        assert result.status_code == 404
        assert message.is_active is True

    def test_repeat_delete_reports_already_deleted(self, member_user, outsider):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)
        DirectMessageService.soft_delete(message.id, member_user.id)

        result = DirectMessageService.soft_delete(message.id, member_user.id)

        assert result.error_code == "ALREADY_DELETED"
        assert result.status_code == 404


class TestGetMessage:
    """Tests for DirectMessageService.get_message()."""

    def test_party_can_fetch(self, member_user, outsider):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)

        assert DirectMessageService.get_message(message.id, outsider.id).data == message

    def test_third_party_gets_not_found(self, member_user, outsider, second_member):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)

        result = DirectMessageService.get_message(message.id, second_member.id)

        assert result.error_code == "MESSAGE_NOT_FOUND"

    def test_deleted_message_is_not_found(self, member_user, outsider):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)
        message.hide()

        result = DirectMessageService.get_message(message.id, outsider.id)

        assert result.error_code == "MESSAGE_NOT_FOUND"
