"""Invitation repository with compare-and-swap redemption."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select, update

from fits.models.invitation import Invitation
from fits.repositories.base import BaseRepository


class InvitationRepository(BaseRepository[Invitation]):
    """Persistence-only repository for :class:`Invitation`."""

    model = Invitation

    def _filterable_fields(self):
        return {"fingerprint": Invitation.fingerprint, "created_by": Invitation.created_by}

    def find_by_fingerprint(self, fingerprint: str, *, lock: bool = False) -> Invitation | None:
        """Fetch an invitation by token fingerprint.

        :param fingerprint: SHA-256 hex of the raw invitation token.
        :param lock: Take a row lock (``SELECT ... FOR UPDATE``) when the
            backend supports it.
        """
        stmt = select(Invitation).where(Invitation.fingerprint == fingerprint)
        if lock:
            stmt = stmt.with_for_update()
        return cast(Invitation | None, self.session.execute(stmt).scalars().first())

    def mark_used(self, invitation_id: str, *, now: datetime) -> bool:
        """Flip ``used`` from false to true if still redeemable.

        The guard lives in the ``WHERE`` clause, so two concurrent redemptions
        cannot both succeed.

        :returns: ``True`` when this call won the swap.
        """
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation_id,
                Invitation.used.is_(False),
                Invitation.expires_at > now,
            )
            .values(used=True, used_at=now)
            .execution_options(synchronize_session=False)
        )
        won = self.execute_write(stmt) == 1
        loaded = self.session.identity_map.get(self.session.identity_key(Invitation, invitation_id))
        if loaded is not None:
            self.session.expire(loaded)
        return won

    def purge_expired(self, *, now: datetime) -> int:
        """Delete expired invitations that were never redeemed."""
        ids = self.session.execute(
            select(Invitation.id).where(Invitation.expires_at <= now, Invitation.used.is_(False))
        ).scalars().all()
        if not ids:
            return 0
        for invitation_id in ids:
            loaded = self.session.identity_map.get(
                self.session.identity_key(Invitation, invitation_id)
            )
            if loaded is not None:
                self.session.expunge(loaded)
        stmt = (
            delete(Invitation)
            .where(Invitation.id.in_(list(ids)))
            .execution_options(synchronize_session=False)
        )
        return self.execute_write(stmt)
