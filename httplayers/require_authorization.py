"""Validators that require a fixed ``Authorization`` header on each request."""

from __future__ import annotations

import base64
from http import HTTPStatus

from .http import HeaderValue, Request, Response


def _unauthorized() -> Response:
    return Response(status=HTTPStatus.UNAUTHORIZED)


class Bearer:
    """Requires ``Authorization: Bearer <token>``, compared exactly.

    Raises :class:`~httplayers.http.InvalidHeaderValue` if the token cannot be
    part of a header value.
    """

    def __init__(self, token: str):
        self.header_value = HeaderValue(f"Bearer {token}")

    def validate(self, request: Request) -> Response | None:
        """Return None if the request is authorized, otherwise a ``401`` response."""
        if request.headers.get("authorization") == self.header_value:
            return None
        return _unauthorized()

    def __repr__(self) -> str:
        return f"Bearer(header_value={self.header_value!r})"


class Basic:
    """Requires ``Authorization: Basic base64(username:password)``, compared exactly."""

    def __init__(self, username: str, password: str):
        encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        self.header_value = HeaderValue(f"Basic {encoded}")

    def validate(self, request: Request) -> Response | None:
        """Return None if the request is authorized, otherwise a ``401`` response
        carrying ``WWW-Authenticate: Basic``."""
        if request.headers.get("authorization") == self.header_value:
            return None
        response = _unauthorized()
        response.headers.insert("www-authenticate", "Basic")
        return response

    def __repr__(self) -> str:
        return f"Basic(header_value={self.header_value!r})"