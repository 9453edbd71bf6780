"""Request execution engine - transport, classifier, scheduler and client."""

from .classifier import ResponseClassifier
from .client import HttpClient
from .errors import CallContext, api_error_from_response, request_failed_error
from .scheduler import BackoffScheduler
from .transport import (
    CLIENT_USER_AGENT,
    CONTENT_TYPE_JSON_HEADER,
    RequestSpec,
    Response,
    Transport,
    build_request,
)

__all__ = [
    "BackoffScheduler",
    "CallContext",
    "CLIENT_USER_AGENT",
    "CONTENT_TYPE_JSON_HEADER",
    "HttpClient",
    "RequestSpec",
    "Response",
    "ResponseClassifier",
    "Transport",
    "api_error_from_response",
    "build_request",
    "request_failed_error",
]
