"""DTOs shared by several services."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from fits.models.identity import Identity

DEFAULT_ACCESS = timedelta(minutes=15)
DEFAULT_REFRESH = timedelta(days=7)
DEFAULT_INVITATION = timedelta(days=7)
DEFAULT_ADMIN = timedelta(days=100 * 365)


@dataclass(frozen=True, slots=True)
class TokenLifetimes:
    """
    Token lifetimes per token type.

    :param access: Access token lifetime (minutes).
    :param refresh: Refresh token and session row lifetime (days).
    :param invitation: Invitation token and row lifetime (7 days).
    :param admin: Admin token lifetime (effectively non-expiring).
    """

    access: timedelta = DEFAULT_ACCESS
    refresh: timedelta = DEFAULT_REFRESH
    invitation: timedelta = DEFAULT_INVITATION
    admin: timedelta = DEFAULT_ADMIN

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> TokenLifetimes:
        return cls(
            access=config.get("ACCESS_TOKEN_EXPIRES") or DEFAULT_ACCESS,
            refresh=config.get("REFRESH_TOKEN_EXPIRES") or DEFAULT_REFRESH,
            invitation=config.get("INVITATION_TOKEN_EXPIRES") or DEFAULT_INVITATION,
            admin=config.get("ADMIN_TOKEN_EXPIRES") or DEFAULT_ADMIN,
        )


@dataclass(frozen=True, slots=True)
class IdentityOut:
    """Public projection of an :class:`Identity` (no credential material)."""

    id: str
    username: str
    email: str | None
    role: str
    is_active: bool
    teacher_ref: str | None
    created_at: datetime
    last_login: datetime | None

    @classmethod
    def from_model(cls, identity: Identity) -> IdentityOut:
        return cls(
            id=identity.id,
            username=identity.username,
            email=identity.email,
            role=identity.role,
            is_active=identity.is_active,
            teacher_ref=identity.teacher_ref,
            created_at=identity.created_at,
            last_login=identity.last_login,
        )


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Access/refresh pair returned by login, refresh, bootstrap and registration.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT; its fingerprint backs a session row.
    :param expires_in: Access token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"
