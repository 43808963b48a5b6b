"""Unit tests for the service-error to RFC 7807 mapping."""

from __future__ import annotations

import pytest
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from fits.core.errors import service_error_to_problem
from fits.services._shared.errors import (
    AlreadyInitializedError,
    BadSignatureError,
    CredentialMismatchError,
    InactiveAccountError,
    InternalServiceError,
    InvalidCredentialsError,
    InvitationUnavailableError,
    NotFoundError,
    ServiceError,
    UniqueViolation,
    WeakSecretError,
)


@pytest.mark.parametrize(
    ("error", "status", "code", "detail"),
    [
        (WeakSecretError("weak", missing=["number"]), 422, "validation_error", "weak"),
        (InvalidCredentialsError(), 401, "unauthorized", "Invalid username or password"),
        (BadSignatureError(), 401, "unauthorized", "Unauthorized"),
        (CredentialMismatchError(), 401, "unauthorized", "Unauthorized"),
        (InactiveAccountError(), 403, "forbidden", "Account is deactivated"),
        (NotFoundError("Identity", "x"), 404, "not_found", "Identity not found: x"),
        (
            InvitationUnavailableError("expired"),
            404,
            "not_found",
            "Invitation not found or expired",
        ),
        (AlreadyInitializedError(), 409, "conflict", "System is already initialized"),
        (UniqueViolation("uq_users_username"), 409, "conflict", None),
        (InternalServiceError("disk on fire"), 500, "internal_server_error", "Unexpected error"),
    ],
)
def test_kind_maps_to_status(app, error, status, code, detail):
    with app.test_request_context("/api/v1/anything"):
        problem, got = service_error_to_problem(error)

    assert got == status
    assert problem["status"] == status
    assert problem["code"] == code
    assert problem["instance"] == "/api/v1/anything"
    assert problem["request_id"]
    if detail is not None:
        assert problem["detail"] == detail


def test_validation_details_are_exposed(app):
    with app.test_request_context("/"):
        problem, _ = service_error_to_problem(WeakSecretError("weak", missing=["number"]))

    assert problem["details"] == {"password": ["number"]}


def test_token_failures_do_not_say_why(app):
    with app.test_request_context("/"):
        problem, _ = service_error_to_problem(BadSignatureError())

    assert "signature" not in problem["detail"].lower()


def test_registered_handlers_cover_only_raised_error_families(app):
    handled = set(app.error_handler_spec[None][None])

    assert handled == {
        ServiceError,
        HTTPException,
        MarshmallowValidationError,
        OperationalError,
        Exception,
    }
