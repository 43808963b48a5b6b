"""Identity model: the authenticated principal of the platform."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Index, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from fits.core.extensions import db

from .base import ReprMixin, TimestampMixin, UTCDateTime, UUIDPKMixin

ROLE_ADMIN = "admin"
ROLE_TEACHER = "teacher"
ROLE_STUDENT = "student"
ROLES = (ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT)


class Identity(UUIDPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authenticated principal with a role and a bcrypt credential.

    Fields
    ------
    username : str
        Login handle. Unique per system, stored trimmed.
    email : str | None
        Contact address carried over from the invitation (lowercased).
    password_hash : str
        bcrypt hash; the plaintext never reaches this model.
    role : str
        One of ``admin``, ``teacher``, ``student``.
    is_active : bool
        ``False`` once deactivated; identities are never hard-deleted.
    teacher_ref : str | None
        Supervising teacher for students.
    invitation_id : str | None
        Invitation this identity was created from, if any.
    last_login : datetime | None
        Timestamp of the latest successful login.

    Notes
    -----
    ``uq_users_single_admin`` is a partial unique index over ``role`` limited
    to admin rows: the database refuses a second admin, which is what makes
    bootstrap safe under concurrent callers.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    teacher_ref: Mapped[str | None] = mapped_column(String(64), nullable=True)
    invitation_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    last_login: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    sessions = relationship(
        "RefreshSession",
        back_populates="identity",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_users_username"),
        Index(
            "uq_users_single_admin",
            "role",
            unique=True,
            sqlite_where=text("role = 'admin'"),
            postgresql_where=text("role = 'admin'"),
        ),
        Index("ix_users_role", "role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @validates("role")
    def _check_role(self, key: str, value: str) -> str:
        if value not in ROLES:
            raise ValueError(f"Unknown role: {value!r}")
        return value

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize and validate username.

        :param key: Field name (``username``).
        :param value: Username to normalize.
        :returns: Trimmed username.
        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()

    @validates("email")
    def _normalize_email(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip().lower()
        return v or None
