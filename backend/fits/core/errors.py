"""Centralized JSON (RFC 7807) error handling for the API."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import OperationalError
from werkzeug.exceptions import HTTPException

from fits.core.logger import ensure_request_id
from fits.services._shared.errors import ServiceError

log = logging.getLogger(__name__)

# Service error ``kind`` -> (HTTP status, stable error code)
KIND_TO_STATUS: dict[str, tuple[int, str]] = {
    "validation": (HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error"),
    "unauthorized": (HTTPStatus.UNAUTHORIZED, "unauthorized"),
    "forbidden": (HTTPStatus.FORBIDDEN, "forbidden"),
    "conflict": (HTTPStatus.CONFLICT, "conflict"),
    "not_found": (HTTPStatus.NOT_FOUND, "not_found"),
    "internal": (HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
}


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


def service_error_to_problem(err: ServiceError) -> tuple[dict[str, Any], int]:
    """
    Translate a :class:`ServiceError` into a problem payload and status.

    :param err: Service-layer exception.
    :returns: ``(problem, status)`` tuple.
    """
    status, code = KIND_TO_STATUS.get(err.kind, KIND_TO_STATUS["internal"])
    details = getattr(err, "details", None) or None
    return _as_problem(status=status, code=code, message=err.public_message, details=details), int(
        status
    )


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Guarantees RFC 7807 responses for all handled errors.
    - Expected failures are logged as warnings without secrets; 5xx carry
      ``exc_info`` for traceability.
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        problem, status = service_error_to_problem(err)
        if status >= 500:
            log.error(
                "ServiceError: kind=%s request_id=%s",
                err.kind,
                problem.get("request_id"),
                exc_info=err,
            )
        else:
            log.warning(
                "ServiceError: kind=%s type=%s status=%s",
                err.kind,
                type(err).__name__,
                status,
                extra={"reason": getattr(err, "reason", None)},
            )
        return _problem_response(problem), status

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _problem_response(problem), status

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        fields = sorted(err.messages) if isinstance(err.messages, dict) else []
        log.warning("Schema validation failed: fields=%s", fields)
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem), HTTPStatus.SERVICE_UNAVAILABLE

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("Unhandled exception: request_id=%s", problem.get("request_id"), exc_info=True)
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
