"""
Factory Boy factories for authentication models.

Provides realistic test data generation for:
- User: Name-keyed chat user with a hashed secret

Usage:
    from authentication.tests.factories import UserFactory, DEFAULT_SECRET

    # Create a user with a generated name and the default secret
    user = UserFactory()

    # Create a user with a specific name and secret
    user = UserFactory(name="ana", secret="s3cret")
"""

import factory

from authentication.models import User

DEFAULT_SECRET = "TestSecret123"


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Users are created through UserManager.create_user() so the secret is
    hashed exactly as it is at login.

    Examples:
        # Basic user
        user = UserFactory()

        # Inactive user
        user = UserFactory(is_active=False)

        # Staff user
        user = UserFactory(is_staff=True)
    """

    class Meta:
        model = User

    name = factory.Sequence(lambda n: f"user{n}")
    secret = DEFAULT_SECRET
    is_active = True

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Create the user via the manager so the secret gets hashed."""
        manager = cls._get_manager(model_class)
        return manager.create_user(*args, **kwargs)
