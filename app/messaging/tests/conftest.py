"""
Test configuration and fixtures for messaging tests.

This module provides:
- User fixtures (staff administrator, members, outsiders)
- Group fixtures with active memberships
- API client helpers for authenticated requests

Usage:
    def test_example(group, member_client):
        response = member_client.get(f'/api/v1/messaging/my-groups/{group.id}/')
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.tests.factories import UserFactory
from messaging.tests.factories import GroupFactory, MembershipFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def staff_user(db):
    """Create a staff user who administers groups."""
    return UserFactory(is_staff=True)


@pytest.fixture
def member_user(db):
    """Create a user who will be an active group member."""
    return UserFactory()


@pytest.fixture
def second_member(db):
    """Create a second active group member."""
    return UserFactory()


@pytest.fixture
def outsider(db):
    """Create a user who belongs to no group."""
    return UserFactory()


@pytest.fixture
def inactive_user(db):
    """Create a deactivated user."""
    return UserFactory(is_active=False)


# =============================================================================
# Group Fixtures
# =============================================================================


@pytest.fixture
def group(staff_user, member_user, second_member):
    """Active group with member_user and second_member as active members."""
    group = GroupFactory(name="Hiking", created_by=staff_user)
    MembershipFactory(group=group, user=member_user)
    MembershipFactory(group=group, user=second_member)
    return group


@pytest.fixture
def hidden_group(staff_user, member_user):
    """Deactivated group that member_user still has a membership row in."""
    group = GroupFactory(name="Archived", created_by=staff_user)
    MembershipFactory(group=group, user=member_user)
    group.hide()
    return group


# =============================================================================
# API Client Fixtures
# =============================================================================


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_client(staff_user):
    """API client authenticated as the staff user."""
    return _client_for(staff_user)


@pytest.fixture
def member_client(member_user):
    """API client authenticated as member_user."""
    return _client_for(member_user)


@pytest.fixture
def outsider_client(outsider):
    """API client authenticated as a non-member."""
    return _client_for(outsider)


@pytest.fixture
def client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(client_factory, some_user):
            client = client_factory(some_user)
    """
    return _client_for
