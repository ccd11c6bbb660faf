import pytest

from httplayers.classify import Ready, RequiresEos, SharedClassifier
from httplayers.grpc import (
    GrpcCode,
    GrpcCodeBitmask,
    GrpcEosErrorsAsFailures,
    GrpcErrorsAsFailures,
    GrpcFailureClass,
    GrpcStatusKind,
    ParsedGrpcStatus,
    classify_grpc_metadata,
)
from httplayers.http import Headers, Request, Response


def _headers(status):
    return Headers({"grpc-status": status})


@pytest.mark.parametrize(
    "status, flags, expected",
    [
        ("0", GrpcCodeBitmask.OK, ParsedGrpcStatus(GrpcStatusKind.SUCCESS)),
        ("1", GrpcCodeBitmask.OK, ParsedGrpcStatus(GrpcStatusKind.NON_SUCCESS, 1)),
        (
            "0",
            GrpcCodeBitmask.OK | GrpcCodeBitmask.INVALID_ARGUMENT,
            ParsedGrpcStatus(GrpcStatusKind.SUCCESS),
        ),
        (
            "3",
            GrpcCodeBitmask.OK | GrpcCodeBitmask.INVALID_ARGUMENT,
            ParsedGrpcStatus(GrpcStatusKind.SUCCESS),
        ),
        (
            "16",
            GrpcCodeBitmask.OK | GrpcCodeBitmask.INVALID_ARGUMENT,
            ParsedGrpcStatus(GrpcStatusKind.NON_SUCCESS, 16),
        ),
    ],
    ids=[
        "basic_ok",
        "basic_error",
        "two_success_codes_first_matches",
        "two_success_codes_second_matches",
        "two_success_codes_none_matches",
    ],
)
def test_classify_grpc_metadata(status, flags, expected):
    assert classify_grpc_metadata(_headers(status), flags) == expected


def test_missing_header():
    result = classify_grpc_metadata(Headers(), GrpcCodeBitmask.OK)
    assert result.kind is GrpcStatusKind.HEADER_MISSING


def test_header_not_int():
    assert classify_grpc_metadata(_headers("abc"), GrpcCodeBitmask.OK).kind is GrpcStatusKind.HEADER_NOT_INT
    assert classify_grpc_metadata(_headers(" 1"), GrpcCodeBitmask.OK).kind is GrpcStatusKind.HEADER_NOT_INT
    assert (
        classify_grpc_metadata(_headers("99999999999"), GrpcCodeBitmask.OK).kind
        is GrpcStatusKind.HEADER_NOT_INT
    )


def test_header_not_string():
    result = classify_grpc_metadata(_headers(b"\x80"), GrpcCodeBitmask.OK)
    assert result.kind is GrpcStatusKind.HEADER_NOT_STRING


def test_unknown_and_negative_codes_are_failures():
    assert classify_grpc_metadata(_headers("42"), GrpcCodeBitmask.OK) == ParsedGrpcStatus(
        GrpcStatusKind.NON_SUCCESS, 42
    )
    assert classify_grpc_metadata(_headers("-1"), GrpcCodeBitmask.OK) == ParsedGrpcStatus(
        GrpcStatusKind.NON_SUCCESS, -1
    )


def test_zero_not_in_success_codes_raises():
    with pytest.raises(ValueError):
        classify_grpc_metadata(_headers("0"), GrpcCodeBitmask.CANCELLED)


def test_bitmask_mapping():
    assert GrpcCode.OK.into_bitmask() == GrpcCodeBitmask.OK
    assert GrpcCode.NOT_FOUND.into_bitmask() == GrpcCodeBitmask.NOT_FOUND
    assert GrpcCode.UNAUTHENTICATED.into_bitmask() == GrpcCodeBitmask.UNAUTHENTICATED
    assert GrpcCodeBitmask.from_code(5) == GrpcCodeBitmask.NOT_FOUND
    assert GrpcCodeBitmask.from_code(17) is None
    assert GrpcCodeBitmask.from_code(-1) is None


def test_classify_response_success_and_failure():
    classifier = GrpcErrorsAsFailures()
    ok = classifier.classify_response(Response(headers=_headers("0")))
    assert ok == Ready()
    failed = classifier.classify_response(Response(headers=_headers("5")))
    assert failed == Ready(GrpcFailureClass(code=5))


def test_classify_response_invalid_header_counts_as_success():
    classifier = GrpcErrorsAsFailures()
    assert classifier.classify_response(Response(headers=_headers("nope"))) == Ready()


def test_with_success():
    classifier = GrpcErrorsAsFailures().with_success(GrpcCode.INVALID_ARGUMENT).with_success(GrpcCode.NOT_FOUND)
    assert classifier.classify_response(Response(headers=_headers("3"))) == Ready()
    assert classifier.classify_response(Response(headers=_headers("5"))) == Ready()
    assert classifier.classify_response(Response(headers=_headers("13"))) == Ready(GrpcFailureClass(code=13))


def test_with_success_does_not_change_original():
    base = GrpcErrorsAsFailures()
    base.with_success(GrpcCode.NOT_FOUND)
    assert base.classify_response(Response(headers=_headers("5"))) == Ready(GrpcFailureClass(code=5))


def test_missing_header_requires_eos():
    classifier = GrpcErrorsAsFailures().with_success(GrpcCode.NOT_FOUND)
    result = classifier.classify_response(Response())
    assert isinstance(result, RequiresEos)
    eos = result.classify_eos
    assert eos.classify_eos(None) is None
    assert eos.classify_eos(Headers()) is None
    assert eos.classify_eos(_headers("0")) is None
    assert eos.classify_eos(_headers("5")) is None
    assert eos.classify_eos(_headers("2")) == GrpcFailureClass(code=2)


def test_eos_classifier_error():
    eos = GrpcEosErrorsAsFailures()
    assert eos.classify_error(RuntimeError("boom")) == GrpcFailureClass(error="boom")


def test_classify_error():
    assert GrpcErrorsAsFailures().classify_error(ValueError("bad")) == GrpcFailureClass(error="bad")


def test_failure_class_str():
    assert str(GrpcFailureClass(code=5)) == "Code: 5"
    assert str(GrpcFailureClass(error="boom")) == "Error: boom"


def test_make_classifier():
    make = GrpcErrorsAsFailures.make_classifier()
    assert isinstance(make, SharedClassifier)
    classifier = make.make_classifier(Request())
    assert classifier.classify_response(Response(headers=_headers("1"))) == Ready(GrpcFailureClass(code=1))


def test_map_failure_class():
    classifier = GrpcErrorsAsFailures().map_failure_class(lambda failure: failure.code)
    assert classifier.classify_response(Response(headers=_headers("7"))) == Ready(7)
    result = classifier.classify_response(Response())
    assert isinstance(result, RequiresEos)
    assert result.classify_eos.classify_eos(_headers("9")) == 9