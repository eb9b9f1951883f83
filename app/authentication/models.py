"""
Authentication models.

This module defines the single authentication model:
- User: A chat user identified by a unique, case-sensitive name

Related files:
    - managers.py: User manager for name-based creation
    - services.py: AuthService login-or-register logic

Security:
    - Secrets are stored through Django's password hashers (salted, one-way)
      in the inherited `password` column and never compared verbatim
    - The name is the primary key, so two concurrent first logins for the
      same name cannot both insert a row
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Chat user identified by name.

    A user is created by the first successful login with an unused name
    and is never deleted by the chat system. The name is immutable: it is
    the primary key and every chat/message reference points at it.

    Fields:
        name: Primary key, case-sensitive ("Ana" and "ana" are different users)
        password: Hashed secret (inherited from AbstractBaseUser)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user claimed the name

    Usage:
        user = User.objects.create_user(name="ana", secret="s3cret")
        user.check_password("s3cret")  # True
    """

    name = models.CharField(
        primary_key=True,
        max_length=64,
        help_text="Unique, case-sensitive user name (immutable)",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user claimed this name",
    )

    USERNAME_FIELD = "name"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["name"]

    def __str__(self):
        return self.name

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name
