"""Bearer authentication and role/ownership checks for Flask views.

The :class:`AccessControl` object holds only a :class:`TokenVerifier`, so it
can be exercised with a fake verifier and no signing secret. The decorators
resolve the application's instance at request time.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import current_app, g, request

from fits.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    MalformedTokenError,
)
from fits.services._shared.ports import TOKEN_ACCESS, TOKEN_ADMIN, TokenVerifier

F = TypeVar("F", bound=Callable[..., Any])

ROLE_RANK = {"student": 1, "teacher": 2, "admin": 3}
DEFAULT_TYPES = (TOKEN_ACCESS, TOKEN_ADMIN)


@dataclass(frozen=True, slots=True)
class AuthContext:
    """What a view may know about its caller."""

    subject_id: str
    role: str
    token_type: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def bearer_token(header: str | None) -> str:
    """
    Extract the token from an ``Authorization: Bearer <token>`` header.

    :raises MalformedTokenError: When absent or not a bearer credential.
    """
    if not header:
        raise MalformedTokenError("Missing bearer token")
    scheme, _, value = header.strip().partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        raise MalformedTokenError("Missing bearer token")
    return value.strip()


class AccessControl:
    """
    Stateless per-request checks.

    Role order is ``admin > teacher > student``. Failures never say which
    check failed.
    """

    def __init__(self, verifier: TokenVerifier) -> None:
        self.verifier = verifier

    def authenticate(
        self, header: str | None, expected_types: Iterable[str] = DEFAULT_TYPES
    ) -> AuthContext:
        """
        :raises InvalidTokenError: Missing, malformed, expired, forged or
            wrong-type token.
        """
        claims = self.verifier.verify(bearer_token(header), expected_types)
        return AuthContext(
            subject_id=claims.subject_id, role=claims.role, token_type=claims.token_type
        )

    @staticmethod
    def authorize_role(ctx: AuthContext | None, min_role: str) -> None:
        if ctx is None:
            raise AuthenticationError()
        if min_role not in ROLE_RANK:
            raise ValueError(f"Unknown role: {min_role!r}")
        if ROLE_RANK.get(ctx.role, 0) < ROLE_RANK[min_role]:
            raise AuthorizationError()

    @staticmethod
    def authorize_owner(ctx: AuthContext | None, owner_id: Any) -> None:
        if ctx is None:
            raise AuthenticationError()
        if ctx.is_admin:
            return
        if str(owner_id) != ctx.subject_id:
            raise AuthorizationError()


# --------------------------------------------------------------------------- #
# Flask glue
# --------------------------------------------------------------------------- #


def _access_control() -> AccessControl:
    return current_app.extensions["fits"].access_control


def current_auth() -> AuthContext | None:
    """Return the request's :class:`AuthContext`, if one was attached."""
    return g.get("auth")


def require_auth(*types: str) -> Callable[[F], F]:
    """Reject the request with 401 unless a valid bearer token of ``types`` is present."""
    expected = types or DEFAULT_TYPES

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            g.auth = _access_control().authenticate(
                request.headers.get("Authorization"), expected
            )
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def optional_auth(*types: str) -> Callable[[F], F]:
    """Attach context when a valid token is present; proceed anonymously otherwise."""
    expected = types or DEFAULT_TYPES

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            header = request.headers.get("Authorization")
            g.auth = None
            if header:
                try:
                    g.auth = _access_control().authenticate(header, expected)
                except InvalidTokenError:
                    g.auth = None
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_role(min_role: str) -> Callable[[F], F]:
    """Forbid callers ranked below ``min_role``. Stack under :func:`require_auth`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            AccessControl.authorize_role(current_auth(), min_role)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def require_ownership(param: str) -> Callable[[F], F]:
    """Forbid callers whose subject differs from the ``param`` path value (admins pass)."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            AccessControl.authorize_owner(current_auth(), kwargs.get(param))
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
