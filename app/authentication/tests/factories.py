"""
Factory Boy factories for authentication models.

Usage:
    from authentication.tests.factories import UserFactory, AdminFactory

    buyer = UserFactory()
    admin = AdminFactory()
    seller = UserFactory(username="seller_one")
"""

import factory

from authentication.models import User


class UserFactory(factory.django.DjangoModelFactory):
    """
    Factory for User model.

    Creates active, approved, non-admin users with a unique email and username.

    Examples:
        user = UserFactory()
        inactive = UserFactory(is_active=False)
        pending = UserFactory(status="pending")
    """

    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f"user{n}@example.com")
    username = factory.Sequence(lambda n: f"member{n}")
    name = factory.Faker("name")
    is_active = True
    is_staff = False
    status = User.Status.APPROVED

    @classmethod
    def _create(cls, model_class, *args, **kwargs):
        """Override create to use UserManager.create_user()."""
        password = kwargs.pop("password", "TestPass123!")
        return model_class.objects.create_user(
            email=kwargs.pop("email"), password=password, **kwargs
        )


class AdminFactory(UserFactory):
    """Marketplace administrator (staff account)."""

    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    username = factory.Sequence(lambda n: f"moderator{n}")
    is_staff = True
