"""
Authentication application.

Provides the email-based user model, JWT token endpoints and the
ActiveUserResolver that other apps use to check which users exist and are
active.

Usage:
    from authentication.models import User
    from authentication.services import ActiveUserResolver
"""
