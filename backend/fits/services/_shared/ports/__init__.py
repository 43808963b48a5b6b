"""
fits.services._shared.ports
===========================

Ports (hexagonal interfaces) decoupling services from token infrastructure.
The concrete adapter is :class:`fits.infra.jwt.token_service.JWTTokenService`.
"""

from __future__ import annotations

from .token_provider import (
    TOKEN_ACCESS,
    TOKEN_ADMIN,
    TOKEN_INVITATION,
    TOKEN_REFRESH,
    TOKEN_TYPES,
    TokenClaims,
    TokenCodec,
    TokenIssuer,
    TokenVerifier,
)

__all__ = [
    "TOKEN_ACCESS",
    "TOKEN_ADMIN",
    "TOKEN_INVITATION",
    "TOKEN_REFRESH",
    "TOKEN_TYPES",
    "TokenClaims",
    "TokenCodec",
    "TokenIssuer",
    "TokenVerifier",
]
