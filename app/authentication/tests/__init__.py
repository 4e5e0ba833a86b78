"""
Tests for authentication app.

This package contains test modules for:
- test_managers.py: UserManager tests
- test_services.py: ActiveUserResolver tests
- test_views.py: JWT token endpoint tests

Usage:
    pytest authentication/tests/
    pytest authentication/tests/test_services.py
"""
