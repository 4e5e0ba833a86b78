"""
Tests for VisibilityQuerySet and VisibilityMixin.

These tests verify that:
- visible() and hidden() split rows by visibility
- Bulk hide() only touches active rows and reports how many changed
- Instance hide() stamps hidden_at once and is a no-op afterwards
"""

from __future__ import annotations

from messaging.models import DirectMessage
from messaging.tests.factories import DirectMessageFactory


class TestVisibilityQuerySet:
    """Tests for VisibilityQuerySet filters and bulk hide."""

    def test_visible_and_hidden_partition_rows(self, db):
        shown = DirectMessageFactory()
        hidden = DirectMessageFactory()
        hidden.hide()

        assert list(DirectMessage.objects.visible()) == [shown]
        assert list(DirectMessage.objects.hidden()) == [hidden]

    def test_nothing_is_filtered_implicitly(self, db):
        DirectMessageFactory()
        DirectMessageFactory().hide()

        assert DirectMessage.objects.count() == 2

    def test_bulk_hide_counts_only_state_changes(self, db):
        first = DirectMessageFactory()
        DirectMessageFactory(sender=first.sender)
        DirectMessageFactory(sender=first.sender).hide()

        changed = DirectMessage.objects.filter(sender=first.sender).hide()

        assert changed == 2
        assert not DirectMessage.objects.filter(sender=first.sender).visible().exists()
        assert DirectMessage.objects.filter(hidden_at__isnull=True).count() == 0


class TestVisibilityMixin:
    """Tests for instance-level hide()."""

    def test_new_rows_are_active(self, db):
        message = DirectMessageFactory()

        assert message.is_active is True
        assert message.is_deleted is False
        assert message.hidden_at is None

    def test_hide_persists(self, db):
        message = DirectMessageFactory()

        message.hide()
        message.refresh_from_db()

        assert message.is_deleted is True
        assert message.hidden_at is not None

    def test_hide_twice_keeps_first_timestamp(self, db):
        message = DirectMessageFactory()
        message.hide()
        first_hidden_at = message.hidden_at

        message.hide()
        message.refresh_from_db()

        assert message.hidden_at == first_hidden_at
