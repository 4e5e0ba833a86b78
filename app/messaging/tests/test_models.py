"""
Tests for messaging model constraints and visibility behavior.
"""

import pytest
from django.db import IntegrityError, transaction
from django.utils import timezone

from core.model_mixins import Visibility
from messaging.models import DirectMessage, Group, Membership
from messaging.tests.factories import (
    DirectMessageFactory,
    GroupFactory,
    MembershipFactory,
)


class TestMembershipUniqueness:
    """
    Tests for the unique_active_membership constraint.

    Why it matters: at most one active membership per (user, group) is the
    invariant every access check relies on.
    """

    def test_second_active_membership_is_rejected(self, member_user):
        group = GroupFactory()
        MembershipFactory(group=group, user=member_user)

        with pytest.raises(IntegrityError):
            with transaction.atomic():
                MembershipFactory(group=group, user=member_user)

        assert Membership.objects.filter(group=group, user=member_user).count() == 1

    def test_inactive_history_rows_may_repeat(self, member_user):
        group = GroupFactory()
        MembershipFactory(group=group, user=member_user, is_active=False, left_at=timezone.now())
        MembershipFactory(group=group, user=member_user, is_active=False, left_at=timezone.now())
        MembershipFactory(group=group, user=member_user)

        assert Membership.objects.filter(group=group, user=member_user).count() == 3
        assert (
            Membership.objects.filter(group=group, user=member_user, is_active=True).count()
            == 1
        )

    def test_same_user_active_in_different_groups(self, member_user):
        MembershipFactory(user=member_user)
        MembershipFactory(user=member_user)

        assert Membership.objects.filter(user=member_user, is_active=True).count() == 2


class TestVisibility:
    """Tests for VisibilityMixin / VisibilityQuerySet on messaging models."""

    def test_hide_sets_state_and_timestamp(self, db):
        group = GroupFactory()

        group.hide()
        group.refresh_from_db()

        assert group.visibility == Visibility.HIDDEN
        assert group.hidden_at is not None
        assert group.is_deleted is True
        assert group.is_active is False

    def test_visible_excludes_hidden_rows(self, db):
        shown = GroupFactory()
        GroupFactory().hide()

        assert list(Group.objects.visible()) == [shown]
        assert Group.objects.hidden().count() == 1

    def test_bulk_hide_counts_only_state_changes(self, db):
        message = DirectMessageFactory()
        DirectMessageFactory(sender=message.sender)

        assert DirectMessage.objects.filter(sender=message.sender).hide() == 2
        assert DirectMessage.objects.filter(sender=message.sender).hide() == 0


class TestDirectMessageConstraints:
    """Tests for DirectMessage constraints and helpers."""

    def test_sender_and_receiver_must_differ(self, member_user):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                DirectMessageFactory(sender=member_user, receiver=member_user)

    def test_counterpart_id(self, member_user, outsider):
        message = DirectMessageFactory(sender=member_user, receiver=outsider)

        assert message.counterpart_id(member_user.id) == outsider.id
        assert message.counterpart_id(outsider.id) == member_user.id
