"""Single-use invitation rows for onboarding teachers and students."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fits.core.extensions import db

from .base import ReprMixin, UTCDateTime, UUIDPKMixin, utcnow

INVITABLE_ROLES = ("teacher", "student")


class Invitation(UUIDPKMixin, ReprMixin, db.Model):
    """
    Admin-issued invitation consumed at most once.

    Fields
    ------
    fingerprint : str
        SHA-256 hex of the raw invitation token; the token itself is never
        stored.
    email : str
        Address of the invitee; copied onto the created identity.
    role : str
        ``teacher`` or ``student``.
    teacher_ref : str | None
        Required when ``role == "student"``.
    created_by : str
        Identifier of the admin who issued the invitation.
    used / used_at : bool / datetime | None
        Redemption marker, flipped by a compare-and-swap update.
    expires_at : datetime
        Hard expiry; expired rows are unusable even when unused.
    """

    __tablename__ = "invitations"

    fingerprint: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    teacher_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_by: Mapped[str] = mapped_column(String(36), nullable=False)
    used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    used_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        UniqueConstraint("fingerprint", name="uq_invitations_fingerprint"),
        CheckConstraint("role IN ('teacher', 'student')", name="role_invitable"),
        CheckConstraint(
            "role <> 'student' OR teacher_ref IS NOT NULL", name="student_has_teacher"
        ),
        Index("ix_invitations_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_redeemable(self, now: datetime) -> bool:
        return not self.used and not self.is_expired(now)
