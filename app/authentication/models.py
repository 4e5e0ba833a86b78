"""
Authentication models.

This module defines the user model the messaging core resolves against:
- User: Custom user model with email-based authentication

Related files:
    - managers.py: Custom user manager for email-based creation
    - services.py: ActiveUserResolver used to validate member and receiver ids

Note:
    Deactivating a user (is_active=False) is the only way an account leaves
    the system. Deactivated users cannot be added to groups or receive
    direct messages, but their past messages and memberships remain.
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        username: Public handle shown to other users (optional)
        first_name / last_name: Display name parts (optional)
        is_active: Whether the user account is active
        is_staff: Whether the user may administer groups and the admin site
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            email='user@example.com',
            password='securepassword'
        )
    """

    # Primary identifier (replaces username as login)
    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )

    # Display data shown in member lists and conversation summaries
    username = models.CharField(
        max_length=30,
        blank=True,
        default="",
        help_text="Public handle shown to other users",
    )
    first_name = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="User's first name",
    )
    last_name = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="User's last name",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        db_index=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can manage groups and access the admin site.",
    )

    # Timestamps
    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        db_table = "authentication_user"

    def __str__(self):
        return self.email

    def get_full_name(self):
        """Return first and last name, falling back to the email address."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.email

    def get_short_name(self):
        """Return the public handle, falling back to the email address."""
        return self.username or self.email
