"""PyJWT adapter implementing the token ports."""

from .token_service import JWTTokenService

__all__ = ["JWTTokenService"]
