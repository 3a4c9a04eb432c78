"""Per-request bearer authentication.

Pipeline, single pass, no retries:

1. paths on the public allow-list skip authentication entirely;
2. ``Authorization`` must be ``Bearer <token>``: absent raises
   :class:`MissingCredential`, any other shape :class:`MalformedCredential`;
3. the token goes through :meth:`SessionManager.validate`;
4. the resulting :class:`AuthContext` is stored on ``flask.g`` for this
   request only and handed to views as an explicit ``auth`` argument
   (see :func:`filmauth.api.deps.require_auth`).

Role checks happen later, in :func:`filmauth.api.deps.require_role`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from flask import Flask, g, request

from filmauth.services._shared.errors import MalformedCredential, MissingCredential
from filmauth.services.auth import Principal, SessionManager

BEARER_PREFIX = "Bearer "

_PARAM_SEGMENT = re.compile(r"^\{[^/{}]+\}$")


@dataclass(frozen=True, slots=True)
class AuthContext:
    """Request-scoped authentication result."""

    principal: Principal
    token: str


def extract_bearer(header: str | None) -> str:
    """
    Return the token carried by an ``Authorization`` header value.

    :raises MissingCredential: Header absent or blank.
    :raises MalformedCredential: Anything but ``"Bearer "`` followed by one token.
    """
    if header is None or not header.strip():
        raise MissingCredential()
    if not header.startswith(BEARER_PREFIX):
        raise MalformedCredential()
    token = header[len(BEARER_PREFIX) :].strip()
    if not token or any(ch.isspace() for ch in token):
        raise MalformedCredential()
    return token


def _normalize(path: str) -> str:
    return path.rstrip("/") or "/"


class PublicRoutes:
    """
    Allow-list of paths reachable without credentials.

    Pattern forms: ``/api/v1/health`` (exact), ``/api/v1/movies/{id}`` or
    ``/api/v1/movies/*`` (one segment), ``/docs/**`` (whole subtree).
    """

    def __init__(self, patterns: Iterable[str]) -> None:
        self._exact: set[str] = set()
        self._prefixes: list[str] = []
        self._regexes: list[re.Pattern[str]] = []
        for raw in patterns:
            pattern = _normalize(raw.strip())
            if pattern.endswith("/**"):
                self._prefixes.append(_normalize(pattern[:-3]))
            elif "*" in pattern or "{" in pattern:
                self._regexes.append(self._compile(pattern))
            else:
                self._exact.add(pattern)

    @staticmethod
    def _compile(pattern: str) -> re.Pattern[str]:
        parts = []
        for segment in pattern.split("/"):
            if segment == "*" or _PARAM_SEGMENT.match(segment):
                parts.append("[^/]+")
            else:
                parts.append(re.escape(segment))
        return re.compile("^" + "/".join(parts) + "$")

    def matches(self, path: str) -> bool:
        path = _normalize(path)
        if path in self._exact:
            return True
        for prefix in self._prefixes:
            if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
                return True
        return any(regex.match(path) for regex in self._regexes)


class RequestAuthenticator:
    """
    Establish *who* is calling; never *what they may do*.

    :param public_routes: Allow-list patterns (see :class:`PublicRoutes`).
    :param sessions: Callable returning the app's :class:`SessionManager`.
    """

    def __init__(
        self,
        public_routes: Iterable[str],
        sessions: Callable[[], SessionManager],
    ) -> None:
        self.public_routes = PublicRoutes(public_routes)
        self._sessions = sessions

    def authenticate(self, path: str, authorization: str | None) -> AuthContext | None:
        """
        Run the pipeline for one request.

        :returns: ``None`` for public paths, otherwise the established context.
        :raises AuthenticationError: Header missing or malformed, or token rejected.
        :raises StoreUnavailable: The blacklist could not be queried.
        """
        if self.public_routes.matches(path):
            return None
        token = extract_bearer(authorization)
        principal = self._sessions().validate(token)
        return AuthContext(principal=principal, token=token)

    def init_app(self, app: Flask) -> None:
        """Install the ``before_request`` hook."""

        @app.before_request
        def _authenticate_request() -> None:
            g.pop("auth", None)
            # Unknown routes fall through to the 404/405 handlers.
            if request.endpoint is None or request.method == "OPTIONS":
                return None
            ctx = self.authenticate(request.path, request.headers.get("Authorization"))
            if ctx is not None:
                g.auth = ctx
            return None


def init_app(app: Flask) -> RequestAuthenticator:
    """Build the authenticator from ``AUTH_PUBLIC_ROUTES`` and attach it."""
    from filmauth.core.auth import get_session_manager

    authenticator = RequestAuthenticator(
        app.config.get("AUTH_PUBLIC_ROUTES", ()),
        sessions=get_session_manager,
    )
    authenticator.init_app(app)
    app.extensions["filmauth.authenticator"] = authenticator
    return authenticator
