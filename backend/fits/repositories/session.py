"""Refresh-session repository with atomic consume semantics."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from fits.models.session import RefreshSession
from fits.repositories.base import BaseRepository


class RefreshSessionRepository(BaseRepository[RefreshSession]):
    """Persistence-only repository for :class:`RefreshSession`.

    Rows are keyed by token fingerprint; raw tokens never reach this layer.
    """

    model = RefreshSession

    def _filterable_fields(self):
        return {
            "identity_id": RefreshSession.identity_id,
            "fingerprint": RefreshSession.fingerprint,
        }

    def create(self, *, identity_id: str, fingerprint: str, expires_at: datetime) -> RefreshSession:
        """Insert a session row.

        :raises UniqueViolation: On a duplicate fingerprint.
        """
        return self.add(
            RefreshSession(identity_id=identity_id, fingerprint=fingerprint, expires_at=expires_at)
        )

    def find_by_fingerprint(self, fingerprint: str) -> RefreshSession | None:
        return self.find_one(fingerprint=fingerprint)

    def consume(self, fingerprint: str, *, now: datetime) -> str | None:
        """Delete the live row for ``fingerprint`` in one conditional statement.

        Concurrent callers presenting the same token race on this ``DELETE``;
        exactly one of them observes ``rowcount == 1``.

        :param fingerprint: SHA-256 hex of the presented refresh token.
        :param now: Current UTC time; rows expiring at or before it are ignored.
        :returns: Owning identity id of the consumed row, or ``None``.
        """
        row = self.session.execute(
            select(RefreshSession.id, RefreshSession.identity_id).where(
                RefreshSession.fingerprint == fingerprint, RefreshSession.expires_at > now
            )
        ).first()
        if row is None:
            return None
        stmt = (
            delete(RefreshSession)
            .where(
                RefreshSession.id == row.id,
                RefreshSession.fingerprint == fingerprint,
                RefreshSession.expires_at > now,
            )
            .execution_options(synchronize_session=False)
        )
        if self.execute_write(stmt) != 1:
            return None
        self._evict(row.id)
        return cast(str, row.identity_id)

    def delete_by_fingerprint(self, identity_id: str, fingerprint: str) -> int:
        ids = self.session.execute(
            select(RefreshSession.id).where(
                RefreshSession.identity_id == identity_id,
                RefreshSession.fingerprint == fingerprint,
            )
        ).scalars().all()
        return self._delete_ids(list(ids))

    def delete_newest(self, identity_id: str) -> int:
        newest = self.session.execute(
            select(RefreshSession.id)
            .where(RefreshSession.identity_id == identity_id)
            .order_by(RefreshSession.created_at.desc(), RefreshSession.id.desc())
            .limit(1)
        ).scalar()
        return self._delete_ids([newest] if newest else [])

    def delete_for_identity(self, identity_id: str) -> int:
        ids = self.session.execute(
            select(RefreshSession.id).where(RefreshSession.identity_id == identity_id)
        ).scalars().all()
        return self._delete_ids(list(ids))

    def count_for_identity(self, identity_id: str) -> int:
        return len(
            self.session.execute(
                select(RefreshSession.id).where(RefreshSession.identity_id == identity_id)
            ).all()
        )

    def purge_expired(self, *, now: datetime) -> int:
        ids = self.session.execute(
            select(RefreshSession.id).where(RefreshSession.expires_at <= now)
        ).scalars().all()
        return self._delete_ids(list(ids))

    # ------------------------------ Internals --------------------------------

    def _delete_ids(self, ids: list[str]) -> int:
        if not ids:
            return 0
        stmt = (
            delete(RefreshSession)
            .where(RefreshSession.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        deleted = self.execute_write(stmt)
        for session_id in ids:
            self._evict(session_id)
        return deleted

    def _evict(self, session_id: str) -> None:
        key = self.session.identity_key(RefreshSession, session_id)
        loaded = self.session.identity_map.get(key)
        if loaded is not None:
            self.session.expunge(loaded)
