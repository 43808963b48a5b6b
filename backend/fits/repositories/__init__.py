"""Repository package exposing persistence-layer access for the auth models."""

from __future__ import annotations

from fits.repositories.base import BaseRepository, translate_integrity_error
from fits.repositories.identity import IdentityRepository
from fits.repositories.invitation import InvitationRepository
from fits.repositories.session import RefreshSessionRepository

__all__ = [
    "BaseRepository",
    "IdentityRepository",
    "InvitationRepository",
    "RefreshSessionRepository",
    "translate_integrity_error",
]
