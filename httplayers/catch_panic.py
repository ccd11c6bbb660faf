"""Middleware that turns exceptions raised by a service into responses."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from http import HTTPStatus

from .http import Request, Response

_log = logging.getLogger(__name__)

Service = Callable[[Request], Awaitable[Response]]
PanicHandler = Callable[[Exception], Response]


def default_response_for_panic(error: Exception) -> Response:
    """Log the error and return a plain ``500 Internal Server Error`` response."""
    message = str(error)
    if message:
        _log.error("Service panicked: %s", message)
    else:
        _log.error("Service panicked but no message could be extracted from %r", error)
    response = Response(status=HTTPStatus.INTERNAL_SERVER_ERROR, body=b"Service panicked")
    response.headers.insert("content-type", "text/plain; charset=utf-8")
    return response


class CatchPanicLayer:
    """Layer that wraps services with :class:`CatchPanic`."""

    def __init__(self, panic_handler: PanicHandler = default_response_for_panic):
        self.panic_handler = panic_handler

    def layer(self, inner: Service) -> "CatchPanic":
        return CatchPanic(inner, self.panic_handler)


class CatchPanic:
    """Service that converts exceptions from ``inner`` into responses.

    Exceptions raised when calling ``inner`` and while awaiting its result are both
    handled. Exceptions outside ``Exception`` (such as cancellation) propagate.
    """

    def __init__(self, inner: Service, panic_handler: PanicHandler = default_response_for_panic):
        self.inner = inner
        self.panic_handler = panic_handler

    async def __call__(self, request: Request) -> Response:
        try:
            pending = self.inner(request)
            if inspect.isawaitable(pending):
                return await pending
            return pending
        except Exception as error:
            return self.panic_handler(error)