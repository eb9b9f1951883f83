"""
User manager for name-based authentication.

This module provides the UserManager class that creates users keyed by
their chat name instead of an email address.

Related files:
    - models.py: User model that uses this manager

Security:
    - Secrets are hashed via set_password(); the raw value is never stored
"""

from django.contrib.auth.models import BaseUserManager


class UserManager(BaseUserManager):
    """
    Manager for the User model.

    Usage:
        user = User.objects.create_user(name="ana", secret="s3cret")
        admin = User.objects.create_superuser(name="ops", secret="...")

    Note:
        create_user() performs a plain INSERT. A concurrent insert of the
        same name fails with IntegrityError; AuthService turns that into
        NAME_TAKEN.
    """

    use_in_migrations = True

    def create_user(self, name, secret=None, **extra_fields):
        """
        Create and save a user with the given name and secret.

        Args:
            name: Unique user name (required, used verbatim)
            secret: Raw secret to hash (optional; unusable if omitted)
            **extra_fields: Additional fields to set on the user

        Returns:
            User: The created user instance

        Raises:
            ValueError: If name is not provided
        """
        if not name:
            raise ValueError("The name field must be set")

        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)

        user = self.model(name=name, **extra_fields)

        if secret:
            user.set_password(secret)
        else:
            user.set_unusable_password()

        # force_insert: a primary-key collision must fail, not update
        user.save(using=self._db, force_insert=True)
        return user

    def create_superuser(self, name, password=None, **extra_fields):
        """
        Create and save a superuser for the Django admin.

        The keyword is `password` because the createsuperuser management
        command passes it under that name.

        Raises:
            ValueError: If is_staff or is_superuser is not True
        """
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(name, password, **extra_fields)
