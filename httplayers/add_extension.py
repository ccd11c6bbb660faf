"""Middleware that puts a shared value into each request's extensions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from .http import Request, Response

Service = Callable[[Request], Awaitable[Response]]


class AddExtensionLayer:
    """Layer that wraps services with :class:`AddExtension`."""

    def __init__(self, value: Any):
        self.value = value

    def layer(self, inner: Service) -> "AddExtension":
        return AddExtension(inner, self.value)


class AddExtension:
    """Service that inserts ``value`` into request extensions before calling ``inner``."""

    def __init__(self, inner: Service, value: Any):
        self.inner = inner
        self.value = value

    async def __call__(self, request: Request) -> Response:
        request.extensions.insert(self.value)
        return await self.inner(request)