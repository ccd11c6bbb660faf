"""Classify responses as either success or failure."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any

from .http import Headers, Request, Response


def _format_status(code: int) -> str:
    """Render a status code as ``"<code> <reason>"``."""
    try:
        phrase = HTTPStatus(int(code)).phrase
    except ValueError:
        phrase = "<unknown status code>"
    return f"{int(code)} {phrase}"


@dataclass(frozen=True)
class Ready:
    """The response was classified immediately.

    ``failure`` is None on success, otherwise the failure class.
    """

    failure: Any = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class RequiresEos:
    """The response can only be classified once its stream ends."""

    classify_eos: "ClassifyEos"


Classified = Ready | RequiresEos


class ClassifyResponse(ABC):
    """Classifies responses as success or failure."""

    @abstractmethod
    def classify_response(self, response: Response) -> Classified:
        """Classify the start of a response."""

    @abstractmethod
    def classify_error(self, error: object) -> Any:
        """Turn an error into a failure class."""

    def map_failure_class(self, f: Callable[[Any], Any]) -> "MapFailureClass":
        """Return a classifier whose failure classes are transformed by ``f``."""
        return MapFailureClass(self, f)


class ClassifyEos(ABC):
    """Classifies the end of a response stream as success or failure."""

    @abstractmethod
    def classify_eos(self, trailers: Headers | None) -> Any:
        """Return None on success, otherwise the failure class."""

    @abstractmethod
    def classify_error(self, error: object) -> Any:
        """Turn an error into a failure class."""

    def map_failure_class(self, f: Callable[[Any], Any]) -> "MapFailureClass":
        """Return a classifier whose failure classes are transformed by ``f``."""
        return MapFailureClass(self, f)


class MakeClassifier(ABC):
    """Produces a response classifier for each request."""

    @abstractmethod
    def make_classifier(self, request: Request) -> ClassifyResponse:
        """Return a classifier for ``request``."""


class SharedClassifier(MakeClassifier):
    """Produces classifiers by copying one that does not depend on the request."""

    def __init__(self, classifier: ClassifyResponse):
        if not isinstance(classifier, ClassifyResponse):
            raise TypeError("SharedClassifier needs a ClassifyResponse")
        self.classifier = classifier

    def make_classifier(self, request: Request) -> ClassifyResponse:
        return copy.copy(self.classifier)

    def __repr__(self) -> str:
        return f"SharedClassifier({self.classifier!r})"


class MapFailureClass(ClassifyResponse, ClassifyEos):
    """Classifier that transforms the failure class of another classifier."""

    def __init__(self, inner: ClassifyResponse | ClassifyEos, f: Callable[[Any], Any]):
        self.inner = inner
        self.f = f

    def classify_response(self, response: Response) -> Classified:
        result = self.inner.classify_response(response)
        if isinstance(result, RequiresEos):
            return RequiresEos(MapFailureClass(result.classify_eos, self.f))
        if result.ok:
            return result
        return Ready(self.f(result.failure))

    def classify_eos(self, trailers: Headers | None) -> Any:
        failure = self.inner.classify_eos(trailers)
        return None if failure is None else self.f(failure)

    def classify_error(self, error: object) -> Any:
        return self.f(self.inner.classify_error(error))

    def __repr__(self) -> str:
        name = getattr(self.f, "__qualname__", type(self.f).__name__)
        return f"MapFailureClass(inner={self.inner!r}, f={name})"


@dataclass(frozen=True)
class ServerErrorsFailureClass:
    """Failure class for :class:`ServerErrorsAsFailures`: a status code or an error message."""

    status_code: int | None = None
    error: str | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"Status code: {_format_status(self.status_code)}"
        return f"Error: {self.error}"


class ServerErrorsAsFailures(ClassifyResponse):
    """Default HTTP classifier: ``5xx`` responses are failures, all others succeed."""

    def classify_response(self, response: Response) -> Classified:
        status = int(response.status)
        if 500 <= status < 600:
            return Ready(ServerErrorsFailureClass(status_code=status))
        return Ready()

    def classify_error(self, error: object) -> ServerErrorsFailureClass:
        return ServerErrorsFailureClass(error=str(error))

    @classmethod
    def make_classifier(cls) -> SharedClassifier:
        """Return a :class:`SharedClassifier` producing this classifier."""
        return SharedClassifier(cls())

    def __repr__(self) -> str:
        return "ServerErrorsAsFailures()"