"""HTTP surface of FITS: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments into a single absolute prefix.

    Empty segments and stray slashes are ignored, so ``join_prefix("/api/",
    "v1", "")`` yields ``"/api/v1"``.
    """
    parts = [segment.strip("/") for segment in segments if segment.strip("/")]
    return "/" + "/".join(parts)


def mount(app: Flask, prefix: str, registry: Iterable[tuple[Blueprint, str]]) -> None:
    """Register every ``(blueprint, relative_prefix)`` pair beneath ``prefix``.

    :param app: Application receiving the blueprints.
    :param prefix: Version root, e.g. ``"/api/v1"``.
    :param registry: Blueprints with their prefix relative to the version
        root. An empty relative prefix mounts the blueprint at the root itself.
    """
    for blueprint, relative in registry:
        app.register_blueprint(blueprint, url_prefix=join_prefix(prefix, relative))


def init_app(app: Flask) -> None:
    """Mount the v1 API."""
    from fits.api.v1 import API_VERSION, REGISTRY

    mount(app, join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION), REGISTRY)


__all__ = ["init_app", "join_prefix", "mount"]
