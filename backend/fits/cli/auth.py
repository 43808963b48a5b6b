"""Flask CLI commands for auth housekeeping."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from fits.container import get_container
from fits.services._shared.errors import InternalServiceError

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Authentication housekeeping commands."""


@auth_cli.command("purge-expired")
@with_appcontext
def purge_expired() -> None:
    """Delete expired refresh sessions and unredeemed expired invitations."""
    container = get_container()
    sessions = container.sessions.purge_expired()
    invitations = container.invitations.purge_expired()
    LOGGER.info("Expired rows purged", extra={"event": "purge"})
    click.echo(f"Purged sessions={sessions} invitations={invitations}")


@auth_cli.command("status")
@with_appcontext
def status() -> None:
    """Report whether the system is bootstrapped and the admin certificate verifies."""
    bootstrap = get_container().bootstrap
    if not bootstrap.is_initialized():
        click.echo("initialized=no")
        return
    try:
        verified = "yes" if bootstrap.verify_certificate() else "no"
    except InternalServiceError:
        verified = "missing"
    click.echo(f"initialized=yes certificate={verified}")
