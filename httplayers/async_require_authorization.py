"""Middleware that authorizes each request asynchronously before it reaches the service."""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Union

from .http import Request, Response

Service = Callable[[Request], Awaitable[Response]]
AuthorizeResult = Union[Request, Response]
Authorizer = Union["AsyncAuthorizeRequest", Callable[[Request], Awaitable[AuthorizeResult]]]


class AsyncAuthorizeRequest(ABC):
    """Decides whether a request may pass.

    ``authorize`` resolves to the (possibly modified) request when it is allowed
    through, or to a response that is sent back instead.
    """

    @abstractmethod
    async def authorize(self, request: Request) -> AuthorizeResult:
        """Authorize ``request``: return a request to let it through, or a response to reject it."""

    async def __call__(self, request: Request) -> AuthorizeResult:
        return await self.authorize(request)


async def _run_authorizer(auth: Authorizer, request: Request) -> AuthorizeResult:
    if isinstance(auth, AsyncAuthorizeRequest):
        outcome = auth.authorize(request)
    else:
        outcome = auth(request)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    if not isinstance(outcome, (Request, Response)):
        raise TypeError(
            f"authorizer must produce a Request or a Response, not {type(outcome).__name__}"
        )
    return outcome


class AsyncRequireAuthorizationLayer:
    """Layer that wraps services with :class:`AsyncRequireAuthorization`."""

    def __init__(self, auth: Authorizer):
        self.auth = auth

    def layer(self, inner: Service) -> "AsyncRequireAuthorization":
        return AsyncRequireAuthorization(inner, self.auth)


class AsyncRequireAuthorization:
    """Service that calls ``inner`` only for requests that ``auth`` lets through."""

    def __init__(self, inner: Service, auth: Authorizer):
        self.inner = inner
        self.auth = auth

    async def __call__(self, request: Request) -> Response:
        outcome = await _run_authorizer(self.auth, request)
        if isinstance(outcome, Response):
            return outcome
        return await self.inner(outcome)