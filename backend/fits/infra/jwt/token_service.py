"""HS256 bearer tokens via PyJWT."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from fits.services._shared.errors import (
    BadSignatureError,
    MalformedTokenError,
    TokenExpiredError,
    TokenTypeError,
)
from fits.services._shared.ports import TOKEN_TYPES, TokenClaims

ALGORITHM = "HS256"
MIN_SECRET_BYTES = 32
REQUIRED_CLAIMS = ["sub", "role", "type", "jti", "iat", "nbf", "exp"]


class JWTTokenService:
    """
    Issue and verify signed bearer tokens.

    Parameters
    ----------
    secret:
        HMAC key. Empty or shorter than 32 bytes raises ``ValueError`` so a
        misconfigured deployment fails at startup.

    Notes
    -----
    The verification algorithm list is pinned to ``HS256``; tokens declaring
    ``none`` or any asymmetric algorithm are rejected as malformed.
    """

    __slots__ = ("secret",)

    def __init__(self, secret: bytes | str) -> None:
        raw = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret or b"")
        if len(raw) < MIN_SECRET_BYTES:
            raise ValueError(f"Token signing secret must be at least {MIN_SECRET_BYTES} bytes.")
        self.secret = raw

    # ------------------------------- Issue -----------------------------------

    def issue(self, subject_id: str, role: str, token_type: str, ttl: timedelta) -> str:
        """
        Sign a token for ``subject_id``.

        :param subject_id: Identity id placed in ``sub``.
        :param role: Role claim copied verbatim.
        :param token_type: One of access, refresh, invitation, admin.
        :param ttl: Lifetime; must be positive.
        :returns: Compact JWS string.
        :raises ValueError: On unknown type or non-positive ttl.
        """
        if token_type not in TOKEN_TYPES:
            raise ValueError(f"Unknown token type: {token_type!r}")
        if ttl <= timedelta(0):
            raise ValueError("Token lifetime must be positive.")
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": str(subject_id),
            "role": role,
            "type": token_type,
            "jti": uuid4().hex,
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    # ------------------------------- Verify ----------------------------------

    def verify(self, token: str, expected_types: Iterable[str]) -> TokenClaims:
        """
        Validate signature, time window and type of ``token``.

        :param token: Raw bearer token.
        :param expected_types: Token types the caller accepts.
        :returns: Parsed :class:`TokenClaims`.
        :raises TokenExpiredError: ``exp`` is in the past.
        :raises BadSignatureError: Signature does not match the secret.
        :raises MalformedTokenError: Structure, algorithm or claims are invalid.
        :raises TokenTypeError: ``type`` is not in ``expected_types``.
        """
        if not token or not isinstance(token, str):
            raise MalformedTokenError()
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidSignatureError as exc:
            raise BadSignatureError() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError() from exc

        token_type = payload.get("type")
        if token_type not in TOKEN_TYPES or not isinstance(payload.get("sub"), str):
            raise MalformedTokenError()
        if token_type not in set(expected_types):
            raise TokenTypeError()
        try:
            return TokenClaims(
                subject_id=payload["sub"],
                role=str(payload["role"]),
                token_type=token_type,
                jti=str(payload["jti"]),
                issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
                expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            )
        except (TypeError, ValueError) as exc:
            raise MalformedTokenError() from exc

    # ------------------------------- Helpers ---------------------------------

    @staticmethod
    def peek_subject(token: str) -> str | None:
        """Return ``sub`` without verifying anything. Diagnostics only."""
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None
        sub = payload.get("sub")
        return sub if isinstance(sub, str) else None

    @staticmethod
    def fingerprint(token: str) -> str:
        """SHA-256 hex digest used to store tokens without storing them."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
