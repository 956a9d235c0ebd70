"""Factory Boy definition for :class:`coursehub.models.user.User`."""

from __future__ import annotations

import factory

from coursehub.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "test1234"


class UserFactory(BaseFactory):
    """Build persisted :class:`coursehub.models.user.User` instances."""

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    name = factory.Sequence(lambda n: f"Learner {n}")
    email = factory.Sequence(lambda n: f"learner{n}@example.com")
    password_hash = factory.LazyFunction(lambda: "")  # set via postgen

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        """Set password using model setter (ensures hashing)."""
        obj.password = extracted or DEFAULT_PASSWORD
