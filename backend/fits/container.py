"""
Composition root.

Builds every service once per application from its configuration and stores
the result in ``app.extensions["fits"]``. Nothing here is a module-level
singleton: two apps with different secrets get two independent containers.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

from flask import Flask, current_app

from fits.api.access_control import AccessControl
from fits.infra.jwt import JWTTokenService
from fits.services._shared.dto import TokenLifetimes
from fits.services.bootstrap import BootstrapService
from fits.services.credentials import CredentialService, PasswordPolicy
from fits.services.invitations import InvitationService
from fits.services.keys import KeyService
from fits.services.sessions import SessionService

EXTENSION_KEY = "fits"


@dataclass(frozen=True, slots=True)
class ServiceContainer:
    tokens: JWTTokenService
    credentials: CredentialService
    keys: KeyService
    sessions: SessionService
    bootstrap: BootstrapService
    invitations: InvitationService
    access_control: AccessControl


def build_container(config: Mapping[str, Any]) -> ServiceContainer:
    """
    Wire services from a Flask configuration mapping.

    :param config: Loaded configuration (``app.config``).
    :raises ValueError: When the signing secret is unusable.
    """
    tokens = JWTTokenService(config["JWT_SECRET_KEY"])
    lifetimes = TokenLifetimes.from_config(config)
    credentials = CredentialService(
        rounds=int(config.get("PASSWORD_HASH_ROUNDS", 12)),
        policy=PasswordPolicy.from_config(config),
    )
    keys = KeyService(
        config.get("ADMIN_KEY_DIR", "configs/keys"),
        bits=int(config.get("ADMIN_KEY_BITS", 4096)),
    )
    return ServiceContainer(
        tokens=tokens,
        credentials=credentials,
        keys=keys,
        sessions=SessionService(credentials=credentials, tokens=tokens, lifetimes=lifetimes),
        bootstrap=BootstrapService(
            credentials=credentials, tokens=tokens, keys=keys, lifetimes=lifetimes
        ),
        invitations=InvitationService(
            credentials=credentials,
            tokens=tokens,
            base_url=str(config.get("INVITATION_BASE_URL", "")),
            lifetimes=lifetimes,
        ),
        access_control=AccessControl(tokens),
    )


def init_app(app: Flask) -> ServiceContainer:
    container = build_container(app.config)
    app.extensions[EXTENSION_KEY] = container
    return container


def get_container() -> ServiceContainer:
    """Return the container of the current application."""
    return cast(ServiceContainer, current_app.extensions[EXTENSION_KEY])
