"""
Tests for notifications app.

This package contains test modules for:
- test_services.py: NotificationService and rendering tests
- test_sink.py: NotificationSink dispatch tests
- test_tasks.py: deliver_notification task tests
- test_views.py: API endpoint tests

Usage:
    pytest notifications/tests/
"""
