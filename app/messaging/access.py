"""
Access checks for messaging reads and writes.

AccessGate answers "may this user touch this group / thread?". It is side
effect free; services turn a False answer into a NOT_GROUP_MEMBER failure
(HTTP 403) instead of returning an empty result, so an unauthorized caller
can always tell "forbidden" apart from "nothing here".
"""

from __future__ import annotations

from messaging.store import MembershipStore


class AccessGate:
    """
    Membership and thread-party predicates.

    Usage:
        if not AccessGate.is_group_member(user.id, group.id):
            return ServiceResult.failure(..., error_class=PermissionDeniedError)
    """

    @staticmethod
    def is_group_member(user_id: int, group_id: int) -> bool:
        """True if user_id holds an active membership in group_id."""
        return MembershipStore.has_active_membership(user_id, group_id)

    @staticmethod
    def is_thread_party(user_id: int, other_user_id: int) -> bool:
        """
        True if user_id may read the thread with other_user_id.

        Any authenticated user may open a thread with any other user; the
        thread query itself only returns messages where user_id is a party.
        """
        return True
