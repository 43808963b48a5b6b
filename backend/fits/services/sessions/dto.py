"""DTOs for the session service."""

from __future__ import annotations

from dataclasses import dataclass

from fits.services._shared.dto import IdentityOut, TokenPairOut


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param username: Login handle.
    :param password: Raw password (verified, never stored or logged).
    """

    username: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for refresh.

    :param refresh_token: Encoded refresh JWT.
    :param subject_id: Identity of an access token presented alongside, if
        any; a refresh token belonging to someone else is then refused.
    """

    refresh_token: str
    subject_id: str | None = None


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    :param identity_id: Authenticated identity.
    :param refresh_token: Session to end. When omitted the newest session of
        the identity is ended.
    """

    identity_id: str
    refresh_token: str | None = None


@dataclass(frozen=True, slots=True)
class LoginOut:
    identity: IdentityOut
    tokens: TokenPairOut
