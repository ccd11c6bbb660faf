import pytest

from httplayers.http import (
    Extensions,
    HeaderToStrError,
    HeaderValue,
    Headers,
    InvalidHeaderName,
    InvalidHeaderValue,
    Request,
    Response,
    collect_body,
)


async def _two_chunk_stream():
    yield b"foo"
    yield "bar"


async def _broken_stream():
    yield b"foo"
    raise OSError("broken")


def test_header_lookup_is_case_insensitive():
    headers = Headers()
    headers.insert("Content-Type", "text/plain")
    assert headers.get("content-type") == "text/plain"
    assert "CONTENT-TYPE" in headers


def test_insert_replaces_all_values_and_returns_previous():
    headers = Headers([("x-a", "1"), ("x-a", "2")])
    previous = headers.insert("x-a", "3")
    assert previous == "1"
    assert headers.get_all("x-a") == ["3"]
    assert len(headers) == 1


def test_insert_missing_returns_none():
    headers = Headers()
    assert headers.insert("x-a", "1") is None
    assert headers.get("x-a") == "1"


def test_append_keeps_all_values_in_order():
    headers = Headers()
    headers.append("x-a", "1")
    headers.append("X-A", "2")
    assert headers.get_all("x-a") == ["1", "2"]
    assert headers.get("x-a") == "1"
    assert len(headers) == 2


def test_remove_returns_first_and_deletes_all():
    headers = Headers({"x-a": "1", "x-b": "2"})
    headers.append("x-a", "3")
    assert headers.remove("x-a") == "1"
    assert "x-a" not in headers
    assert headers.remove("x-a") is None
    assert list(headers) == [("x-b", HeaderValue("2"))]


def test_iteration_preserves_order():
    headers = Headers([("b", "1"), ("a", "2")])
    assert [name for name, _ in headers] == ["b", "a"]


def test_invalid_header_name():
    with pytest.raises(InvalidHeaderName):
        Headers().insert("bad name", "x")


def test_invalid_header_value():
    with pytest.raises(InvalidHeaderValue):
        HeaderValue("line\nbreak")


def test_header_value_to_str_rejects_non_ascii():
    value = HeaderValue("caf\u00e9")
    with pytest.raises(HeaderToStrError):
        value.to_str()
    assert HeaderValue("plain\ttext").to_str() == "plain\ttext"


def test_header_value_equality_and_sensitive_repr():
    value = HeaderValue(b"abc", sensitive=True)
    assert value == "abc"
    assert value == b"abc"
    assert value == HeaderValue("abc")
    assert "abc" not in repr(value)


def test_extensions_keyed_by_type():
    extensions = Extensions()
    assert extensions.insert(1) is None
    assert extensions.insert("text") is None
    assert extensions.insert(2) == 1
    assert extensions.get(int) == 2
    assert extensions.get(str) == "text"
    assert extensions.get(float) is None
    assert int in extensions


def test_request_and_response_defaults():
    request = Request()
    response = Response()
    assert (request.method, request.uri, request.body) == ("GET", "/", b"")
    assert response.status == 200
    assert len(response.headers) == 0


@pytest.mark.asyncio
async def test_collect_empty_body():
    assert await collect_body(None) == b""
    assert await collect_body(b"") == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"hello", bytearray(b"hello"), "hello", [b"he", "llo"]])
async def test_collect_full_bodies(body):
    assert await collect_body(body) == b"hello"


@pytest.mark.asyncio
async def test_collect_async_stream():
    assert await collect_body(_two_chunk_stream()) == b"foobar"


@pytest.mark.asyncio
async def test_collect_stream_error_propagates():
    with pytest.raises(OSError, match="broken"):
        await collect_body(_broken_stream())


@pytest.mark.asyncio
async def test_collect_rejects_bad_chunk():
    with pytest.raises(TypeError):
        await collect_body([1, 2])