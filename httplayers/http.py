"""HTTP message types shared by the middleware: headers, extensions, requests and responses."""

from __future__ import annotations

from collections.abc import AsyncIterable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar, Union

T = TypeVar("T")

_TOKEN_CHARS = frozenset("!#$%&'*+-.^_`|~0123456789abcdefghijklmnopqrstuvwxyz")


class InvalidHeaderName(ValueError):
    """Raised when a header name is not a valid HTTP token."""


class InvalidHeaderValue(ValueError):
    """Raised when a header value contains forbidden bytes."""


class HeaderToStrError(ValueError):
    """Raised when a header value is not visible ASCII."""


def _normalize_name(name: str) -> str:
    if isinstance(name, bytes):
        name = name.decode("latin-1")
    key = name.lower()
    if not key or any(ch not in _TOKEN_CHARS for ch in key):
        raise InvalidHeaderName(f"invalid header name: {name!r}")
    return key


class HeaderValue:
    """A single header value, stored as bytes, with a sensitivity flag."""

    __slots__ = ("_raw", "sensitive")

    def __init__(self, value: Union[str, bytes, bytearray], *, sensitive: bool = False):
        raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        if any((b < 32 and b != 9) or b == 127 for b in raw):
            raise InvalidHeaderValue(f"invalid header value: {value!r}")
        self._raw = raw
        self.sensitive = sensitive

    @classmethod
    def coerce(cls, value: Union["HeaderValue", str, bytes, bytearray]) -> "HeaderValue":
        """Return ``value`` as a HeaderValue, converting strings and bytes."""
        if isinstance(value, HeaderValue):
            return value
        return cls(value)

    def to_str(self) -> str:
        """Return the value as text; raises if it is not visible ASCII."""
        if any(not (32 <= b < 127 or b == 9) for b in self._raw):
            raise HeaderToStrError("header value contains non visible ASCII characters")
        return self._raw.decode("ascii")

    def __bytes__(self) -> bytes:
        return self._raw

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderValue):
            return self._raw == other._raw
        if isinstance(other, str):
            return self._raw == other.encode("utf-8")
        if isinstance(other, (bytes, bytearray)):
            return self._raw == bytes(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._raw)

    def __repr__(self) -> str:
        if self.sensitive:
            return "HeaderValue(Sensitive)"
        return f"HeaderValue({self._raw!r})"


HeaderInput = Union[HeaderValue, str, bytes, bytearray]


class Headers:
    """Ordered, case-insensitive multimap of header names to values.

    Iteration yields ``(name, value)`` pairs; ``len`` counts values.
    """

    def __init__(self, initial: Union[Mapping[str, HeaderInput], Iterable[tuple[str, HeaderInput]], None] = None):
        self._entries: list[tuple[str, HeaderValue]] = []
        if initial is None:
            return
        pairs = initial.items() if isinstance(initial, Mapping) else initial
        for name, value in pairs:
            self.append(name, value)

    def get(self, name: str) -> HeaderValue | None:
        """Return the first value for ``name``, or None."""
        key = _normalize_name(name)
        return next((v for n, v in self._entries if n == key), None)

    def get_all(self, name: str) -> list[HeaderValue]:
        """Return every value for ``name`` in insertion order."""
        key = _normalize_name(name)
        return [v for n, v in self._entries if n == key]

    def insert(self, name: str, value: HeaderInput) -> HeaderValue | None:
        """Set ``name`` to a single value, returning the previous first value."""
        key = _normalize_name(name)
        new_value = HeaderValue.coerce(value)
        previous = None
        entries: list[tuple[str, HeaderValue]] = []
        for n, v in self._entries:
            if n != key:
                entries.append((n, v))
            elif previous is None:
                previous = v
                entries.append((key, new_value))
        if previous is None:
            entries.append((key, new_value))
        self._entries = entries
        return previous

    def append(self, name: str, value: HeaderInput) -> None:
        """Add a value for ``name``, keeping existing ones."""
        self._entries.append((_normalize_name(name), HeaderValue.coerce(value)))

    def remove(self, name: str) -> HeaderValue | None:
        """Remove every value for ``name``, returning the first removed value."""
        key = _normalize_name(name)
        removed = self.get(key)
        self._entries = [(n, v) for n, v in self._entries if n != key]
        return removed

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, bytes)):
            return False
        try:
            key = _normalize_name(name)
        except InvalidHeaderName:
            return False
        return any(n == key for n, _ in self._entries)

    def __iter__(self) -> Iterator[tuple[str, HeaderValue]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Headers({self._entries!r})"


class Extensions:
    """A map holding at most one value of each type."""

    def __init__(self) -> None:
        self._values: dict[type, Any] = {}

    def insert(self, value: Any) -> Any:
        """Store ``value`` under its type, returning the value it replaced, if any."""
        previous = self._values.get(type(value))
        self._values[type(value)] = value
        return previous

    def get(self, type_: type[T]) -> T | None:
        """Return the value stored for exactly ``type_``, or None."""
        return self._values.get(type_)

    def __contains__(self, type_: object) -> bool:
        return type_ in self._values

    def __len__(self) -> int:
        return len(self._values)


@dataclass
class Request:
    """An HTTP request."""

    method: str = "GET"
    uri: str = "/"
    headers: Headers = field(default_factory=Headers)
    extensions: Extensions = field(default_factory=Extensions)
    body: Any = b""


@dataclass
class Response:
    """An HTTP response."""

    status: int = 200
    headers: Headers = field(default_factory=Headers)
    extensions: Extensions = field(default_factory=Extensions)
    body: Any = b""


def _chunk_bytes(chunk: Any) -> bytes:
    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    raise TypeError(f"body chunk must be bytes or str, not {type(chunk).__name__}")


async def collect_body(body: Any) -> bytes:
    """Read a whole body into bytes.

    A body may be None, bytes-like, str, or a sync or async iterable of such chunks.
    Errors raised by a streaming body propagate.
    """
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray, memoryview, str)):
        return _chunk_bytes(body)
    if isinstance(body, AsyncIterable):
        return b"".join([_chunk_bytes(chunk) async for chunk in body])
    if isinstance(body, Iterable):
        return b"".join(_chunk_bytes(chunk) for chunk in body)
    raise TypeError(f"unsupported body type: {type(body).__name__}")