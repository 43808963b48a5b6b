"""Factory Boy definition for :class:`fits.models.invitation.Invitation`."""

from __future__ import annotations

import hashlib
from datetime import timedelta

import factory

from fits.models.base import utcnow
from fits.models.invitation import Invitation
from tests.factories import BaseFactory


class InvitationFactory(BaseFactory):
    """Unused student invitations expiring in seven days."""

    class Meta:
        model = Invitation

    fingerprint = factory.Sequence(lambda n: hashlib.sha256(f"invite-{n}".encode()).hexdigest())
    email = factory.Faker("email")
    role = "student"
    teacher_ref = "t1"
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    department = None
    created_by = factory.Faker("uuid4")
    used = False
    expires_at = factory.LazyFunction(lambda: utcnow() + timedelta(days=7))
