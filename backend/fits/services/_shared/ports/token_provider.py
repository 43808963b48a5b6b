"""Token capability ports.

Services depend on these protocols instead of a concrete JWT library, so the
access-control layer and the tests can plug in any verifier.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

TOKEN_ACCESS = "access"
TOKEN_REFRESH = "refresh"
TOKEN_INVITATION = "invitation"
TOKEN_ADMIN = "admin"
TOKEN_TYPES = frozenset({TOKEN_ACCESS, TOKEN_REFRESH, TOKEN_INVITATION, TOKEN_ADMIN})


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims of a bearer token."""

    subject_id: str
    role: str
    token_type: str
    jti: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer(Protocol):
    """Port for minting signed tokens."""

    def issue(self, subject_id: str, role: str, token_type: str, ttl: timedelta) -> str: ...

    def fingerprint(self, token: str) -> str: ...


class TokenVerifier(Protocol):
    """Port for validating tokens. Implementations perform no I/O."""

    def verify(self, token: str, expected_types: Iterable[str]) -> TokenClaims: ...

    def fingerprint(self, token: str) -> str: ...


class TokenCodec(TokenIssuer, TokenVerifier, Protocol):
    """Both capabilities; what services that mint *and* check tokens take."""
