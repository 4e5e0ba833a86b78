"""
Tests for AccessGate.
"""

from django.utils import timezone

from messaging.access import AccessGate
from messaging.models import Membership


class TestIsGroupMember:
    """Tests for AccessGate.is_group_member()."""

    def test_active_member(self, group, member_user):
        assert AccessGate.is_group_member(member_user.id, group.id) is True

    def test_outsider(self, group, outsider):
        assert AccessGate.is_group_member(outsider.id, group.id) is False

    def test_former_member(self, group, member_user):
        """
        A deactivated membership row grants nothing.

        Why it matters: replace-all keeps history rows; only the active row
        may grant access.
        """
        Membership.objects.filter(group=group, user=member_user).update(
            is_active=False, left_at=timezone.now()
        )

        assert AccessGate.is_group_member(member_user.id, group.id) is False

    def test_unknown_group(self, member_user):
        assert AccessGate.is_group_member(member_user.id, 999_999) is False


class TestIsThreadParty:
    """Tests for AccessGate.is_thread_party()."""

    def test_any_pair_may_open_a_thread(self, member_user, outsider):
        assert AccessGate.is_thread_party(member_user.id, outsider.id) is True
