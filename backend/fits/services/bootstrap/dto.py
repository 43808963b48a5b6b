"""DTOs for the bootstrap service."""

from __future__ import annotations

from dataclasses import dataclass

from fits.services._shared.dto import IdentityOut, TokenPairOut


@dataclass(frozen=True, slots=True)
class BootstrapIn:
    """
    Credentials of the first administrator.

    :param username: Admin login handle.
    :param password: Raw password; must pass the strength policy.
    :param email: Optional contact address.
    """

    username: str
    password: str
    email: str | None = None


@dataclass(frozen=True, slots=True)
class BootstrapOut:
    """
    Result of a successful bootstrap.

    :param identity: The created admin identity.
    :param admin_token: Long-lived ``admin`` token, issued exactly once.
    :param tokens: Regular access/refresh pair backed by a session row.
    :param public_key_path: Where the admin public key was written.
    :param certificate_path: Where the signed admin certificate was written.
    """

    identity: IdentityOut
    admin_token: str
    tokens: TokenPairOut
    public_key_path: str
    certificate_path: str
