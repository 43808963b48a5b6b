"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
types. They are the stable contract between repositories, services and the
API layer; ``fits/core/errors.py`` renders them as RFC 7807 problems.

Every class carries a ``kind`` used for the HTTP mapping:

=====================  ======
kind                   status
=====================  ======
``validation``         422
``unauthorized``       401
``forbidden``          403
``conflict``           409
``not_found``          404
``internal``           500
=====================  ======
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - ``public_message`` is the only text that may reach a client.
    """

    kind = "internal"
    default_message = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def public_message(self) -> str:
        return self.message


class ValidationError(ServiceError):
    """
    Raised when input violates a service-level rule.

    :param message: Human-readable summary.
    :param details: Optional field -> messages mapping.
    """

    kind = "validation"
    default_message = "Validation failed"

    def __init__(
        self, message: str | None = None, *, details: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.details = dict(details or {})


class WeakSecretError(ValidationError):
    """Password does not satisfy the strength policy.

    ``missing`` lists every unmet requirement, gathered in one pass.
    """

    default_message = "Password does not meet the strength policy"

    def __init__(self, message: str | None = None, *, missing: Sequence[str] = ()) -> None:
        super().__init__(message, details={"password": list(missing)} if missing else None)
        self.missing = tuple(missing)


class AuthenticationError(ServiceError):
    """The caller could not be authenticated (HTTP 401)."""

    kind = "unauthorized"
    default_message = "Authentication required"

    @property
    def public_message(self) -> str:
        # Never reveal which check failed.
        return "Unauthorized"


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid username or password"

    @property
    def public_message(self) -> str:
        return self.default_message


class InvalidTokenError(AuthenticationError):
    """Base for bearer token verification failures."""

    default_message = "Invalid token"


class TokenExpiredError(InvalidTokenError):
    default_message = "Token expired"


class BadSignatureError(InvalidTokenError):
    default_message = "Token signature mismatch"


class MalformedTokenError(InvalidTokenError):
    default_message = "Malformed token"


class TokenTypeError(InvalidTokenError):
    default_message = "Unexpected token type"


class InvalidOrRevokedError(AuthenticationError):
    """Refresh token is unknown, expired, rotated away or its owner is gone."""

    default_message = "Refresh token invalid or revoked"


class CredentialMismatchError(AuthenticationError):
    """Password does not match the stored hash."""

    default_message = "Credential mismatch"


class AuthorizationError(ServiceError):
    """Authenticated caller lacks permission (HTTP 403)."""

    kind = "forbidden"
    default_message = "Forbidden"

    @property
    def public_message(self) -> str:
        return "Forbidden"


class InactiveAccountError(AuthorizationError):
    default_message = "Account is deactivated"

    @property
    def public_message(self) -> str:
        return self.default_message


class NotFoundError(ServiceError):
    """
    Raised when an entity is not found.

    :param entity: Entity name (e.g., "Identity").
    :param key: Identifier or search key.
    """

    kind = "not_found"
    default_message = "Resource not found"

    def __init__(self, entity: str = "Resource", key: Any = None) -> None:
        super().__init__(f"{entity} not found" if key is None else f"{entity} not found: {key}")
        self.entity = entity
        self.key = key


class InvitationUnavailableError(NotFoundError):
    """Invitation is malformed, unknown, expired or already consumed on fetch.

    The public message is identical for every cause; ``reason`` is for logs.
    """

    def __init__(self, reason: str = "unknown") -> None:
        super().__init__("Invitation")
        self.message = "Invitation not found or expired"
        self.reason = reason


class ConflictError(ServiceError):
    """
    Raised when a uniqueness or state rule conflict occurs.

    :param entity: Entity name (e.g., "Identity").
    :param detail: Short human-readable explanation.
    """

    kind = "conflict"
    default_message = "Conflict"

    def __init__(self, entity: str = "Resource", detail: str | None = None) -> None:
        super().__init__(detail or self.default_message)
        self.entity = entity
        self.detail = detail or self.default_message


class AlreadyInitializedError(ConflictError):
    default_message = "System is already initialized"

    def __init__(self) -> None:
        super().__init__("Bootstrap")


class InvitationAlreadyUsedError(ConflictError):
    default_message = "Invitation has already been used"

    def __init__(self) -> None:
        super().__init__("Invitation")


class UsernameTakenError(ConflictError):
    default_message = "Username is already taken"

    def __init__(self) -> None:
        super().__init__("Identity")


class InternalServiceError(ServiceError):
    """Unexpected failure inside a collaborator (storage, filesystem)."""

    kind = "internal"
    default_message = "Internal error"

    @property
    def public_message(self) -> str:
        return "Unexpected error"


class SignatureMismatchError(ServiceError):
    """RSA-PSS signature does not verify against the given public key."""

    kind = "validation"
    default_message = "Signature verification failed"


# --------------------------------------------------------------------------- #
# Persistence kinds raised by repositories
# --------------------------------------------------------------------------- #


class UniqueViolation(ServiceError):
    """
    A write hit a unique constraint or unique index.

    :param constraint: Constraint/index name (e.g. ``uq_users_username``) or
        ``None`` when the driver does not report one.
    """

    kind = "conflict"
    default_message = "Unique constraint violated"

    def __init__(self, constraint: str | None) -> None:
        super().__init__(f"Unique constraint violated: {constraint or 'unknown'}")
        self.constraint = constraint


__all__ = [
    "AlreadyInitializedError",
    "AuthenticationError",
    "AuthorizationError",
    "BadSignatureError",
    "ConflictError",
    "CredentialMismatchError",
    "InactiveAccountError",
    "InternalServiceError",
    "InvalidCredentialsError",
    "InvalidOrRevokedError",
    "InvalidTokenError",
    "InvitationAlreadyUsedError",
    "InvitationUnavailableError",
    "MalformedTokenError",
    "NotFoundError",
    "ServiceError",
    "SignatureMismatchError",
    "TokenExpiredError",
    "TokenTypeError",
    "UniqueViolation",
    "UsernameTakenError",
    "ValidationError",
    "WeakSecretError",
]
