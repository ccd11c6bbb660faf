# httplayers

Small, composable async middleware for HTTP-style services.

A *service* is an async callable that takes a `httplayers.http.Request` and
returns a `httplayers.http.Response`. A *layer* is an object with a
`layer(inner)` method that wraps one service in another.

## What is in the package

- `httplayers.http`: the message types. `Request` (method, uri, headers,
  extensions, body), `Response` (status, headers, extensions, body),
  `Headers` (an ordered, case-insensitive multimap with `get`, `get_all`,
  `insert`, `append`, `remove`), `HeaderValue` (bytes plus a `sensitive`
  flag), `Extensions` (at most one value per type) and `collect_body`, which
  reads a bytes, str, sync-iterable or async-iterable body into bytes.
- `httplayers.add_extension`: `AddExtensionLayer` / `AddExtension` insert a
  shared value into each request's `extensions`.
- `httplayers.catch_panic`: `CatchPanicLayer` / `CatchPanic` turn exceptions
  raised by the inner service (when called or while awaited) into responses.
  The default handler, `default_response_for_panic`, logs the error and
  returns `500` with the body `Service panicked` and
  `content-type: text/plain; charset=utf-8`. A custom handler taking the
  exception and returning a `Response` can be passed instead.
- `httplayers.add_authorization`: `AddAuthorizationLayer` /
  `AddAuthorization` set the `Authorization` header on every request, built
  with `basic(username, password)` or `bearer(token)`; `as_sensitive(flag)`
  marks the header value as sensitive.
- `httplayers.async_require_authorization`: `AsyncRequireAuthorizationLayer`
  / `AsyncRequireAuthorization` run an authorizer before the inner service.
  The authorizer is an `AsyncAuthorizeRequest` subclass or any callable
  taking the request; it returns (or resolves to) a `Request` to let the
  request through, or a `Response` that is sent back instead.
- `httplayers.require_authorization`: `Bearer` and `Basic` validators.
  `validate(request)` returns `None` when the `Authorization` header matches
  exactly, otherwise a `401` response (`Basic` adds `WWW-Authenticate: Basic`).
- `httplayers.classify`: `ClassifyResponse`, `ClassifyEos`, `MakeClassifier`,
  `SharedClassifier`, `MapFailureClass`, the results `Ready` and
  `RequiresEos`, and `ServerErrorsAsFailures` (`5xx` is a failure).
- `httplayers.status_in_range`: `StatusInRangeAsFailures(start, end)`
  treats statuses in `start..=end` as failures.
- `httplayers.grpc`: `GrpcErrorsAsFailures`, which reads `grpc-status`
  (only `OK` succeeds unless `with_success` adds more codes), together with
  `GrpcCode`, `GrpcCodeBitmask`, `GrpcEosErrorsAsFailures`,
  `GrpcFailureClass` and `classify_grpc_metadata`.
- `httplayers.builder`: `service_fn` turns a sync or async function into a
  service; `ServiceBuilder` stacks layers (`layer`, `add_extension`,
  `catch_panic`) and wraps a handler with `service` or `service_fn`. The
  first layer added is the outermost.

## Install

```
pip install .
```

## Example

```python
import asyncio

from httplayers.builder import ServiceBuilder
from httplayers.http import Request, Response


class State:
    def __init__(self, count):
        self.count = count


async def handle(request):
    state = request.extensions.get(State)
    return Response(body=str(state.count).encode())


service = (
    ServiceBuilder()
    .catch_panic()
    .add_extension(State(1))
    .service_fn(handle)
)

response = asyncio.run(service(Request()))
print(response.status, response.body)
```

## Requiring authorization

The `Basic` and `Bearer` validators are not layers themselves; use them from
an authorizer:

```python
from httplayers.async_require_authorization import AsyncRequireAuthorizationLayer
from httplayers.builder import ServiceBuilder
from httplayers.require_authorization import Bearer

validator = Bearer("token")


async def authorize(request):
    rejection = validator.validate(request)
    return request if rejection is None else rejection


service = (
    ServiceBuilder()
    .layer(AsyncRequireAuthorizationLayer(authorize))
    .service_fn(lambda request: Response())
)
```

A request carrying `Authorization: Bearer token` reaches the handler; any
other gets a `401` response.

## Classifying responses

```python
from httplayers.http import Response
from httplayers.status_in_range import StatusInRangeAsFailures

classifier = StatusInRangeAsFailures.new_for_client_and_server_errors()
result = classifier.classify_response(Response(status=404))
print(result.ok, str(result.failure))  # False  Status code: 404 Not Found
```

`classify_response` returns a `Ready` (its `failure` is `None` on success)
or a `RequiresEos` holding a classifier for the trailers at the end of the
stream; the gRPC classifier returns the latter when `grpc-status` is not in
the headers.

## What the package does not do

There is no network code: no server, no client and no HTTP parsing. Requests
and responses are plain in-memory objects, and services are called directly
with `await service(request)`. Plug the layers into whatever transport you
use by converting to and from `Request` and `Response`. Classifiers only
classify; nothing in the package logs or traces based on them.

## Tests

```
pip install ".[test]"
pytest
```