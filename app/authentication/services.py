"""
User resolution services consumed by the messaging core.

ActiveUserResolver is the single place that decides whether an id names a
user who can take part in messaging. Group membership validation (both the
pre-check and the in-transaction re-check) and direct message receiver
checks go through it, so the criterion can never drift between call sites.

Usage:
    from authentication.services import ActiveUserResolver

    if not ActiveUserResolver.is_active_user(receiver_id):
        ...

    resolved = ActiveUserResolver.are_active_users([3, 5, 8])
    invalid = [uid for uid in [3, 5, 8] if uid not in resolved]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from authentication.models import User
from core.models import is_storable_id

logger = logging.getLogger(__name__)


class ActiveUserResolver:
    """
    Resolve user ids against the set of active accounts.

    Methods:
        is_active_user: Check a single id
        are_active_users: Return the subset of ids that resolve
    """

    @staticmethod
    def is_active_user(user_id: int) -> bool:
        """
        Check whether user_id names an active user.

        Args:
            user_id: Candidate user id

        Returns:
            True if the user exists and is active
        """
        if not is_storable_id(user_id):
            return False
        return User.objects.active().filter(pk=user_id).exists()

    @staticmethod
    def are_active_users(user_ids: Iterable[int]) -> set[int]:
        """
        Return the ids from user_ids that resolve to active users.

        Runs a single query regardless of list length. Ids outside the
        primary key range never resolve; if none remain, the database is
        not touched.

        Args:
            user_ids: Candidate user ids

        Returns:
            Set of ids that exist and are active
        """
        ids = set(user_ids)
        candidates = {i for i in ids if is_storable_id(i)}
        if not candidates:
            return set()
        resolved = set(
            User.objects.active().filter(pk__in=candidates).values_list("pk", flat=True)
        )
        if len(resolved) != len(ids):
            logger.debug(
                f"Unresolved user ids: {sorted(ids - resolved)}"
            )
        return resolved
