"""Middleware that adds an ``Authorization`` header to every request."""

from __future__ import annotations

import base64
from collections.abc import Awaitable, Callable

from .http import HeaderValue, Request, Response

Service = Callable[[Request], Awaitable[Response]]


def _basic_value(username: str, password: str) -> HeaderValue:
    encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return HeaderValue(f"Basic {encoded}")


def _bearer_value(token: str) -> HeaderValue:
    return HeaderValue(f"Bearer {token}")


def _with_sensitivity(value: HeaderValue, sensitive: bool) -> HeaderValue:
    return HeaderValue(bytes(value), sensitive=sensitive)


class AddAuthorizationLayer:
    """Layer that wraps services with :class:`AddAuthorization`."""

    def __init__(self, value: HeaderValue):
        self.value = HeaderValue.coerce(value)

    @classmethod
    def basic(cls, username: str, password: str) -> "AddAuthorizationLayer":
        """Use ``Basic base64(username:password)``."""
        return cls(_basic_value(username, password))

    @classmethod
    def bearer(cls, token: str) -> "AddAuthorizationLayer":
        """Use ``Bearer <token>``; raises if the token is not a valid header value."""
        return cls(_bearer_value(token))

    def as_sensitive(self, sensitive: bool) -> "AddAuthorizationLayer":
        """Return a layer whose header value is marked (or unmarked) as sensitive."""
        return AddAuthorizationLayer(_with_sensitivity(self.value, sensitive))

    def layer(self, inner: Service) -> "AddAuthorization":
        return AddAuthorization(inner, self.value)


class AddAuthorization:
    """Service that sets the ``Authorization`` header before calling ``inner``."""

    def __init__(self, inner: Service, value: HeaderValue):
        self.inner = inner
        self.value = HeaderValue.coerce(value)

    @classmethod
    def basic(cls, inner: Service, username: str, password: str) -> "AddAuthorization":
        """Use ``Basic base64(username:password)``."""
        return AddAuthorizationLayer.basic(username, password).layer(inner)

    @classmethod
    def bearer(cls, inner: Service, token: str) -> "AddAuthorization":
        """Use ``Bearer <token>``; raises if the token is not a valid header value."""
        return AddAuthorizationLayer.bearer(token).layer(inner)

    def as_sensitive(self, sensitive: bool) -> "AddAuthorization":
        """Return a service whose header value is marked (or unmarked) as sensitive."""
        return AddAuthorization(self.inner, _with_sensitivity(self.value, sensitive))

    async def __call__(self, request: Request) -> Response:
        request.headers.insert("authorization", _with_sensitivity(self.value, self.value.sensitive))
        return await self.inner(request)