"""Pytest fixtures wiring a single testing app to an in-memory database.

One Flask app is built per session: the rate limiter is a process-wide
extension object and binding it to a second app would clobber the first.
Tables are created and dropped around every test so each case starts from an
empty, uninitialized system.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask

from fits.core.config import TestingConfig
from fits.core.extensions import db as _db
from fits.factory import create_app
from fits.models.identity import ROLE_ADMIN, ROLE_STUDENT, ROLE_TEACHER, Identity
from tests.factories import SQLAlchemySession
from tests.factories.identity import IdentityFactory
from tests.helpers.auth import PASSWORD, bearer


@pytest.fixture(scope="session")
def key_dir(tmp_path_factory) -> Any:
    """Directory receiving the admin keypair during bootstrap tests."""
    return tmp_path_factory.mktemp("keys") / "admin"


@pytest.fixture(scope="session")
def app(key_dir) -> Flask:
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application built from :class:`TestingConfig` with the key directory
        redirected to a temporary path.
    """
    os.environ.pop("DATABASE_URL", None)
    config = type(
        "TestConfig",
        (TestingConfig,),
        {"ADMIN_KEY_DIR": str(key_dir), "LOG_LEVEL": "WARNING"},
    )
    application = create_app(config, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    return application


@pytest.fixture()
def db(app: Flask) -> Generator[Any, None, None]:
    """Create all tables for one test and drop them afterwards.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application, with an app
        context pushed for the duration of the test.
    """
    with app.app_context():
        _db.create_all()
        try:
            yield _db
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def session(db) -> Any:
    """The scoped session services and repositories use by default."""
    return db.session


@pytest.fixture(autouse=True)
def _factories_session(request) -> Generator[None, None, None]:
    """Wire Factory Boy to the scoped session for tests that touch the database."""
    if "db" in request.fixturenames or "session" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)


@pytest.fixture()
def container(app: Flask) -> Any:
    """Service container built by the application factory."""
    return app.extensions["fits"]


@pytest.fixture()
def client(app: Flask, db) -> Any:
    """Return a Flask test client backed by a fresh schema."""
    return app.test_client()


@pytest.fixture()
def make_identity(session) -> Callable[..., Identity]:
    """Persist an identity whose password is :data:`PASSWORD`."""

    def _make(**kwargs: Any) -> Identity:
        identity = IdentityFactory(**kwargs)
        session.commit()
        return identity

    return _make


@pytest.fixture()
def admin(make_identity) -> Identity:
    return make_identity(username="admin", role=ROLE_ADMIN)


@pytest.fixture()
def teacher(make_identity) -> Identity:
    return make_identity(username="teacher1", role=ROLE_TEACHER)


@pytest.fixture()
def student(make_identity) -> Identity:
    return make_identity(username="student1", role=ROLE_STUDENT, teacher_ref="t1")


@pytest.fixture()
def auth_headers(container) -> Callable[[Identity], dict[str, str]]:
    """Build an ``Authorization`` header carrying an access token for an identity."""

    def _headers(identity: Identity, token_type: str = "access") -> dict[str, str]:
        token = container.tokens.issue(
            identity.id, identity.role, token_type, container.sessions.lifetimes.access
        )
        return bearer(token)

    return _headers


@pytest.fixture()
def password() -> str:
    return PASSWORD


@pytest.fixture()
def freeze_time() -> Callable[[Any], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2026-01-01") as frozen:
    ...         frozen.tick(60)
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: Any = None) -> Any:
        return _freeze_time(target or "2026-01-01 12:00:00")

    return _factory
