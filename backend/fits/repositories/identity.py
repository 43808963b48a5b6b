"""Identity repository: lookups and state flips for :class:`Identity`."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from fits.models.identity import ROLE_ADMIN, Identity
from fits.repositories.base import BaseRepository


class IdentityRepository(BaseRepository[Identity]):
    """Persistence-only repository for :class:`Identity`.

    It never hashes or verifies passwords; that belongs to the credential
    service.
    """

    model = Identity

    def _filterable_fields(self):
        return {
            "username": Identity.username,
            "role": Identity.role,
            "is_active": Identity.is_active,
        }

    def _updatable_fields(self):
        return {"email", "is_active", "last_login", "password_hash"}

    def get_by_username(self, username: str) -> Identity | None:
        """Fetch an identity by exact (trimmed) username.

        :param username: Login handle.
        :returns: Identity or ``None``.
        """
        stmt = select(Identity).where(Identity.username == username.strip())
        return cast(Identity | None, self.session.execute(stmt).scalars().first())

    def admin_exists(self) -> bool:
        return self.exists(role=ROLE_ADMIN)

    def get_admin(self) -> Identity | None:
        return self.find_one(role=ROLE_ADMIN)

    def touch_last_login(self, identity: Identity, when: datetime) -> None:
        self.assign_updates(identity, {"last_login": when})

