"""Compose middleware layers around a service."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from .add_extension import AddExtensionLayer
from .catch_panic import CatchPanicLayer
from .http import Request, Response

Service = Callable[[Request], Awaitable[Response]]


async def _ready(value: Response) -> Response:
    return value


class _ServiceFn:
    """Service backed by a plain function, sync or async."""

    def __init__(self, f: Callable[[Request], Any]):
        self.f = f

    def __call__(self, request: Request) -> Awaitable[Response]:
        # The function runs here, so an error raised before any awaiting
        # surfaces at call time, just like with any other service.
        outcome = self.f(request)
        if inspect.isawaitable(outcome):
            return outcome
        return _ready(outcome)

    def __repr__(self) -> str:
        name = getattr(self.f, "__qualname__", type(self.f).__name__)
        return f"service_fn({name})"


def service_fn(f: Callable[[Request], Any]) -> Service:
    """Turn a function taking a request into a service.

    ``f`` may return a response directly or an awaitable resolving to one.
    """
    if not callable(f):
        raise TypeError("service_fn needs a callable")
    return _ServiceFn(f)


def _apply(layer: Any, inner: Service) -> Service:
    if hasattr(layer, "layer"):
        return layer.layer(inner)
    return layer(inner)


class ServiceBuilder:
    """Immutable stack of layers.

    Each method returns a new builder. The first layer added is the outermost
    one: it sees requests first and responses last.
    """

    def __init__(self, layers: tuple[Any, ...] = ()):
        self._layers = tuple(layers)

    def layer(self, layer: Any) -> "ServiceBuilder":
        """Add a layer: an object with a ``layer(inner)`` method, or a callable taking ``inner``."""
        if not hasattr(layer, "layer") and not callable(layer):
            raise TypeError(f"not a layer: {layer!r}")
        return ServiceBuilder(self._layers + (layer,))

    def add_extension(self, value: Any) -> "ServiceBuilder":
        """Insert ``value`` into the extensions of each request."""
        return self.layer(AddExtensionLayer(value))

    def catch_panic(self) -> "ServiceBuilder":
        """Turn exceptions from the inner service into ``500`` responses."""
        return self.layer(CatchPanicLayer())

    def service(self, inner: Service) -> Service:
        """Wrap ``inner`` in every layer of this builder."""
        wrapped = inner
        for layer in reversed(self._layers):
            wrapped = _apply(layer, wrapped)
        return wrapped

    def service_fn(self, f: Callable[[Request], Any]) -> Service:
        """Wrap a function, as made by :func:`service_fn`, in every layer."""
        return self.service(service_fn(f))

    def __len__(self) -> int:
        return len(self._layers)

    def __repr__(self) -> str:
        return f"ServiceBuilder({list(self._layers)!r})"