"""API v1 blueprint package bundling versioned routes."""

from __future__ import annotations

from flask import Blueprint

API_VERSION = "v1"

# Import blueprints *only here* to keep imports localized and avoid cycles.
from .auth import bp as auth_bp  # noqa: E402
from .bootstrap import bp as bootstrap_bp  # noqa: E402
from .health import bp as health_bp  # noqa: E402
from .invitations import admin_bp  # noqa: E402
from .invitations import bp as invitations_bp  # noqa: E402
from .users import bp as users_bp  # noqa: E402

# Each tuple: (blueprint, url_prefix_relative_to_version)
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),  # -> /api/v1/health
    (bootstrap_bp, "/bootstrap"),
    (auth_bp, "/auth"),
    (admin_bp, "/admin"),
    (invitations_bp, "/invite"),
    (users_bp, "/users"),
]
