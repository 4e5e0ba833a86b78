"""
Tests for messaging app.

This package contains test modules for:
- test_models.py: Membership constraint and visibility behavior
- test_access.py: AccessGate predicates
- test_group_lifecycle.py: GroupLifecycleService / GroupQueryService
- test_group_messages.py: GroupMessageService
- test_direct_messages.py: ConversationService / DirectMessageService
- test_views.py: API endpoint tests

Usage:
    pytest messaging/tests/
"""
