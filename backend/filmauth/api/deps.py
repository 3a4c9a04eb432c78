"""Shared API helpers for responses and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from filmauth.api.authn import AuthContext
from filmauth.core.errors import Forbidden
from filmauth.models.user import Role
from filmauth.services._shared.errors import MissingCredential

F = TypeVar("F", bound=Callable[..., Any])


def current_auth() -> AuthContext:
    """Return the context set by the authenticator for this request.

    :raises MissingCredential: The route was reached without authentication
        (for instance it was put on the public allow-list by mistake).
    """
    ctx = g.get("auth")
    if ctx is None:
        raise MissingCredential()
    return ctx


def require_auth(func: F) -> F:
    """Pass the request's :class:`AuthContext` to the view as ``auth``."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        kwargs["auth"] = current_auth()
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(role: Role) -> Callable[[F], F]:
    """Ensure the authenticated principal holds ``role``; 403 otherwise."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            auth = current_auth()
            if auth.principal.role != role:
                raise Forbidden("Insufficient role")
            kwargs["auth"] = auth
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
