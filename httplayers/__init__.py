"""Composable async middleware layers for HTTP services: message types, extensions,
panic catching, authorization and response classification."""

__version__ = "0.1.0"

__all__ = [
    "add_authorization",
    "add_extension",
    "async_require_authorization",
    "builder",
    "catch_panic",
    "classify",
    "grpc",
    "http",
    "require_authorization",
    "status_in_range",
]