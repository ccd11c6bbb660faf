"""Response classifier for gRPC, which reports failures through ``grpc-status``."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from .classify import Classified, ClassifyEos, ClassifyResponse, Ready, RequiresEos, SharedClassifier
from .http import HeaderToStrError, Headers, Response

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


class GrpcCode(enum.IntEnum):
    """gRPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    def into_bitmask(self) -> "GrpcCodeBitmask":
        """Return the single-bit mask for this code."""
        return GrpcCodeBitmask(1 << self.value)


class GrpcCodeBitmask(enum.IntFlag):
    """A set of gRPC codes, one bit per code."""

    OK = 1 << 0
    CANCELLED = 1 << 1
    UNKNOWN = 1 << 2
    INVALID_ARGUMENT = 1 << 3
    DEADLINE_EXCEEDED = 1 << 4
    NOT_FOUND = 1 << 5
    ALREADY_EXISTS = 1 << 6
    PERMISSION_DENIED = 1 << 7
    RESOURCE_EXHAUSTED = 1 << 8
    FAILED_PRECONDITION = 1 << 9
    ABORTED = 1 << 10
    OUT_OF_RANGE = 1 << 11
    UNIMPLEMENTED = 1 << 12
    INTERNAL = 1 << 13
    UNAVAILABLE = 1 << 14
    DATA_LOSS = 1 << 15
    UNAUTHENTICATED = 1 << 16

    @classmethod
    def from_code(cls, code: int) -> "GrpcCodeBitmask | None":
        """Return the mask for a numeric gRPC code, or None if it is not a known code."""
        if 0 <= code <= 16:
            return cls(1 << code)
        return None


class GrpcStatusKind(enum.Enum):
    """Outcome of reading the ``grpc-status`` header."""

    SUCCESS = "success"
    NON_SUCCESS = "non_success"
    HEADER_MISSING = "header_missing"
    HEADER_NOT_STRING = "header_not_string"
    HEADER_NOT_INT = "header_not_int"


@dataclass(frozen=True)
class ParsedGrpcStatus:
    """Parsed ``grpc-status``; ``code`` is set only for ``NON_SUCCESS``."""

    kind: GrpcStatusKind
    code: int | None = None


def _parse_i32(text: str) -> int | None:
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not _I32_MIN <= value <= _I32_MAX:
        return None
    return value


def classify_grpc_metadata(headers: Headers, success_codes: GrpcCodeBitmask) -> ParsedGrpcStatus:
    """Classify the ``grpc-status`` entry of ``headers`` against ``success_codes``."""
    raw = headers.get("grpc-status")
    if raw is None:
        return ParsedGrpcStatus(GrpcStatusKind.HEADER_MISSING)
    try:
        text = raw.to_str()
    except HeaderToStrError:
        return ParsedGrpcStatus(GrpcStatusKind.HEADER_NOT_STRING)
    status = _parse_i32(text)
    if status is None:
        return ParsedGrpcStatus(GrpcStatusKind.HEADER_NOT_INT)

    mask = GrpcCodeBitmask.from_code(status)
    if mask is not None and (int(success_codes) & int(mask)) == int(mask):
        return ParsedGrpcStatus(GrpcStatusKind.SUCCESS)
    if status == 0:
        raise ValueError("grpc-status 0 is not among the success codes")
    return ParsedGrpcStatus(GrpcStatusKind.NON_SUCCESS, status)


@dataclass(frozen=True)
class GrpcFailureClass:
    """Failure class for gRPC: a non-success status code or an error message."""

    code: int | None = None
    error: str | None = None

    def __str__(self) -> str:
        if self.code is not None:
            return f"Code: {self.code}"
        return f"Error: {self.error}"


class GrpcEosErrorsAsFailures(ClassifyEos):
    """Classifies the trailers at the end of a gRPC response stream."""

    def __init__(self, success_codes: GrpcCodeBitmask = GrpcCodeBitmask.OK):
        self.success_codes = success_codes

    def classify_eos(self, trailers: Headers | None) -> GrpcFailureClass | None:
        if trailers is None:
            return None
        parsed = classify_grpc_metadata(trailers, self.success_codes)
        if parsed.kind is GrpcStatusKind.NON_SUCCESS:
            return GrpcFailureClass(code=parsed.code)
        return None

    def classify_error(self, error: object) -> GrpcFailureClass:
        return GrpcFailureClass(error=str(error))

    def __repr__(self) -> str:
        return f"GrpcEosErrorsAsFailures({self.success_codes!r})"


class GrpcErrorsAsFailures(ClassifyResponse):
    """Classifies gRPC responses by ``grpc-status``; only ``OK`` succeeds by default.

    A missing, non-text or non-integer status counts as success; a missing one
    defers the decision to the trailers.
    """

    def __init__(self, success_codes: GrpcCodeBitmask = GrpcCodeBitmask.OK):
        self.success_codes = GrpcCodeBitmask(int(success_codes) | int(GrpcCodeBitmask.OK))

    def with_success(self, code: GrpcCode) -> "GrpcErrorsAsFailures":
        """Return a classifier that also treats ``code`` as success."""
        return GrpcErrorsAsFailures(self.success_codes | GrpcCode(code).into_bitmask())

    @classmethod
    def make_classifier(cls) -> SharedClassifier:
        """Return a :class:`SharedClassifier` producing this classifier."""
        return SharedClassifier(cls())

    def classify_response(self, response: Response) -> Classified:
        parsed = classify_grpc_metadata(response.headers, self.success_codes)
        if parsed.kind is GrpcStatusKind.NON_SUCCESS:
            return Ready(GrpcFailureClass(code=parsed.code))
        if parsed.kind is GrpcStatusKind.HEADER_MISSING:
            return RequiresEos(GrpcEosErrorsAsFailures(self.success_codes))
        return Ready()

    def classify_error(self, error: object) -> GrpcFailureClass:
        return GrpcFailureClass(error=str(error))

    def __repr__(self) -> str:
        return f"GrpcErrorsAsFailures({self.success_codes!r})"