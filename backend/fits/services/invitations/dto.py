"""DTOs for the invitation service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from fits.services._shared.dto import IdentityOut, TokenPairOut


@dataclass(frozen=True, slots=True)
class CreateInvitationIn:
    """
    Input DTO for issuing an invitation.

    :param admin_id: Issuing administrator (already authorized upstream).
    :param email: Invitee address.
    :param role: ``teacher`` or ``student``.
    :param teacher_ref: Supervising teacher; required for students.
    """

    admin_id: str
    email: str
    role: str
    teacher_ref: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    department: str | None = None


@dataclass(frozen=True, slots=True)
class InvitationCreatedOut:
    """The raw token is returned here once and never stored."""

    invitation_id: str
    token: str
    link: str
    email: str
    role: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class InvitationSummaryOut:
    email: str
    role: str
    first_name: str | None
    last_name: str | None
    department: str | None
    teacher_ref: str | None
    used: bool
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class CompleteInvitationIn:
    token: str
    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    identity: IdentityOut
    tokens: TokenPairOut
