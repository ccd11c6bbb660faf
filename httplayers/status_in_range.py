"""Classifier that treats responses with a status code in some range as failures."""

from __future__ import annotations

from dataclasses import dataclass

from .classify import (
    Classified,
    ClassifyResponse,
    Ready,
    SharedClassifier,
    _format_status,
)
from .http import Response


def _valid_status(code: int) -> bool:
    return 100 <= code <= 999


@dataclass(frozen=True)
class StatusInRangeFailureClass:
    """Failure class for :class:`StatusInRangeAsFailures`: a status code or an error message."""

    status_code: int | None = None
    error: str | None = None

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"Status code: {_format_status(self.status_code)}"
        return f"Error: {self.error}"


class StatusInRangeAsFailures(ClassifyResponse):
    """Responses whose status lies in ``start..=end`` are failures."""

    def __init__(self, start: int, end: int):
        if not _valid_status(start):
            raise ValueError("range start isn't a valid status code")
        if not _valid_status(end):
            raise ValueError("range end isn't a valid status code")
        self.start = start
        self.end = end

    @classmethod
    def new_for_client_and_server_errors(cls) -> "StatusInRangeAsFailures":
        """Classify ``400..=599`` as failures."""
        return cls(400, 599)

    def into_make_classifier(self) -> SharedClassifier:
        """Wrap this classifier in a :class:`SharedClassifier`."""
        return SharedClassifier(self)

    def classify_response(self, response: Response) -> Classified:
        status = int(response.status)
        if self.start <= status <= self.end:
            return Ready(StatusInRangeFailureClass(status_code=status))
        return Ready()

    def classify_error(self, error: object) -> StatusInRangeFailureClass:
        return StatusInRangeFailureClass(error=str(error))

    def __repr__(self) -> str:
        return f"StatusInRangeAsFailures({self.start}, {self.end})"