"""
Permission classes for messaging API.

- IsGroupAdministrator: Group management (create, replace, deactivate, staff reads)

Membership checks for group reads and posts live in the services
(AccessGate), because they must report NOT_GROUP_MEMBER with the same
error body the service layer produces.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rest_framework import permissions

if TYPE_CHECKING:
    from rest_framework.request import Request
    from rest_framework.views import APIView


class IsGroupAdministrator(permissions.BasePermission):
    """
    Allows access only to staff users.

    Groups are administered centrally: only staff create groups, replace
    their member lists, deactivate them or list every group.
    """

    message = "Only administrators can manage groups."

    def has_permission(self, request: Request, view: APIView) -> bool:
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
