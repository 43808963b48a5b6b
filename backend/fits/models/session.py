"""Refresh session rows backing refresh-token rotation."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fits.core.extensions import db

from .base import ReprMixin, UTCDateTime, UUIDPKMixin, utcnow


class RefreshSession(UUIDPKMixin, ReprMixin, db.Model):
    """
    One live refresh token of an identity.

    Only the SHA-256 ``fingerprint`` of the raw token is stored. A raw
    refresh token is valid when its fingerprint matches exactly one row whose
    ``expires_at`` is still in the future.
    """

    __tablename__ = "refresh_sessions"

    identity_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    identity = relationship("Identity", back_populates="sessions")

    __table_args__ = (
        UniqueConstraint("fingerprint", name="uq_refresh_sessions_fingerprint"),
        Index("ix_refresh_sessions_identity_id", "identity_id"),
        Index("ix_refresh_sessions_expires_at", "expires_at"),
    )
