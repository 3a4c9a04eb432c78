"""RFC 7807 problem+json responses for every error the API can produce.

Two layers feed into this module:

* :class:`APIError` subclasses raised by views and decorators;
* :class:`~filmauth.services._shared.errors.ServiceError` raised by services
  and stores, mapped to HTTP through :data:`SERVICE_ERROR_MAP`.

Everything else (werkzeug, marshmallow, SQLAlchemy, unexpected exceptions)
is normalized by dedicated handlers so clients only ever see one shape.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from filmauth.core.logger import ensure_request_id
from filmauth.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    RevocationError,
    ServiceError,
    StoreUnavailable,
    UserNotFound,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"
BEARER_CHALLENGE = 'Bearer realm="api"'

# Fallback ``code`` per status for errors that do not carry their own.
STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "validation_error",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem_body(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a Problem Details document.

    :param status: HTTP status code.
    :param code: Stable, machine-readable error code (snake_case).
    :param detail: Client-safe summary; never includes token internals.
    :param details: Optional structured payload (e.g. field errors).
    :returns: JSON-serializable dictionary.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(
    status: int,
    code: str,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> tuple[Response, int]:
    """Render a problem document and log it (4xx as warning, 5xx as error)."""
    body = problem_body(status, code, detail, details)
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(level, "http.problem code=%s status=%s", code, status, extra={"reason": code})
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    resp.headers.extend(headers or {})
    return resp, status


class APIError(Exception):
    """
    An error that already knows its HTTP representation.

    :param message: Client-safe description.
    :param status_code: HTTP status (``400`` by default).
    :param code: Stable error code; derived from the status when omitted.
    :param details: Optional structured payload.
    :param headers: Extra response headers.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str | None = None
    headers: dict[str, str] = {}

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code or type(self).status_code)
        self.code = code or type(self).code or STATUS_CODES.get(self.status_code, "error")
        self.details = details or {}
        self.headers = dict(headers if headers is not None else type(self).headers)

    def to_response(self) -> tuple[Response, int]:
        return problem_response(
            self.status_code,
            self.code,
            self.message,
            details=self.details,
            headers=self.headers,
        )


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT


class Unauthorized(APIError):
    """401; always carries a ``WWW-Authenticate: Bearer`` challenge."""

    status_code = HTTPStatus.UNAUTHORIZED
    headers = {"WWW-Authenticate": BEARER_CHALLENGE}


class Forbidden(APIError):
    """403: authenticated, but the role does not allow the action."""

    status_code = HTTPStatus.FORBIDDEN


class ServiceUnavailable(APIError):
    """503: a backing store is down; clients may retry."""

    status_code = HTTPStatus.SERVICE_UNAVAILABLE


# Checked in order; the first matching type wins, so subclasses go first.
SERVICE_ERROR_MAP: list[tuple[type[ServiceError], Callable[[Any], APIError]]] = [
    (AuthenticationError, lambda e: Unauthorized(str(e), code=e.code)),
    (UserNotFound, lambda e: NotFound("User not found.", code="user_not_found")),
    (NotFoundError, lambda e: NotFound(str(e))),
    (ConflictError, lambda e: Conflict(str(e))),
    (StoreUnavailable, lambda e: ServiceUnavailable("Service temporarily unavailable")),
    (
        RevocationError,
        lambda e: APIError(
            "Session revocation failed; the operation was not applied.",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="revocation_failed",
        ),
    ),
]


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a service-layer error to its HTTP counterpart.

    Unknown service errors become a generic ``400 bad_request``.
    """
    for exc_type, build in SERVICE_ERROR_MAP:
        if isinstance(exc, exc_type):
            return build(exc)
    return APIError(str(exc))


def init_app(app: Flask) -> None:
    """Register the problem+json handlers on ``app``."""

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return err.to_response()

    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        if isinstance(err, (StoreUnavailable, RevocationError)):
            log.error("service.error %s", type(err).__name__, exc_info=err)
        return translate_service_error(err).to_response()

    @app.errorhandler(HTTPException)
    def _http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or code.replace("_", " ").capitalize()).strip()
        return problem_response(status, code, detail)

    @app.errorhandler(ValidationError)
    def _validation_error(err: ValidationError):
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        log.error("db.integrity_error", exc_info=err)
        return problem_response(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        log.error("db.operational_error", exc_info=err)
        return problem_response(
            HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable", "Service temporarily unavailable"
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        log.error("unhandled.exception", exc_info=err)
        return problem_response(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )
