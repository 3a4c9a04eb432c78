"""Factory Boy definitions for :class:`filmauth.models.user.User`."""

from __future__ import annotations

import factory
from filmauth.models.user import Role, User

from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """Build persisted ``USER`` accounts with a hashed default password."""

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"viewer{n}@example.com")
    username = factory.Sequence(lambda n: f"viewer{n}")
    role = Role.USER
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD


class AdminFactory(UserFactory):
    email = factory.Sequence(lambda n: f"admin{n}@example.com")
    username = factory.Sequence(lambda n: f"admin{n}")
    role = Role.ADMIN
