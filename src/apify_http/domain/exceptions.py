"""Custom exceptions for the Apify HTTP client.

Every failure a call can end in is an ``ApifyClientError``. The ``type``
attribute carries the API-facing classification tag, which comes in two
spellings depending on whether the caller targets the legacy (v1) or the
current (v2) API.
"""

import typing as t
from dataclasses import asdict, dataclass
from enum import Enum
from urllib.parse import urlsplit


class ErrorType(str, Enum):
    """Classification tags, one pair per API major version."""

    INVALID_PARAMETER_V1 = "INVALID_PARAMETER"
    INVALID_PARAMETER_V2 = "invalid-parameter"
    REQUEST_FAILED_V1 = "REQUEST_FAILED"
    REQUEST_FAILED_V2 = "request-failed"

    @classmethod
    def invalid_parameter(cls, is_api_v1: bool = False) -> "ErrorType":
        return cls.INVALID_PARAMETER_V1 if is_api_v1 else cls.INVALID_PARAMETER_V2

    @classmethod
    def request_failed(cls, is_api_v1: bool = False) -> "ErrorType":
        return cls.REQUEST_FAILED_V1 if is_api_v1 else cls.REQUEST_FAILED_V2


@dataclass(frozen=True)
class ErrorDetails:
    """Request context attached to a failed call."""

    url: str
    method: str
    params: t.Mapping[str, t.Any] | None = None
    has_body: bool = False
    attempt: int | None = None
    status_code: int | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, t.Any]:
        return asdict(self)


class ApifyClientError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        type: ErrorType | str | None,
        message: str,
        details: ErrorDetails | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.type = type
        self.message = message
        self.details = details
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message


class InvalidParameterError(ApifyClientError):
    """Raised when call options fail validation, before any network activity."""


class RequestFailedError(ApifyClientError):
    """Raised when a call keeps failing with retryable errors until the
    attempt ceiling is reached.

    ``cause`` holds the last transport exception, if the final attempt
    failed before a response was received.
    """


class ApiError(ApifyClientError):
    """Raised when the API rejects a request with a non-retryable status.

    The message and type come from the error object in the response body
    when the API sent one.
    """

    def __init__(
        self,
        type: ErrorType | str | None,
        message: str,
        details: ErrorDetails,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(type, message, details, cause)
        self.status_code = details.status_code
        self.attempt = details.attempt
        self.http_method = details.method
        self.path = _path_from_url(details.url)

    def __str__(self) -> str:
        context = {
            "status_code": self.status_code,
            "type": self.type.value if isinstance(self.type, Enum) else self.type,
            "attempt": self.attempt,
            "http_method": self.http_method,
            "path": self.path,
        }
        lines = [f"  {key}: {value}" for key, value in context.items()]
        return "\n".join([self.message, *lines])


class ClientNotInitialisedError(ApifyClientError):
    """Raised when the HTTP client is used outside its async context."""

    def __init__(self, message: str = "HTTP client not initialised") -> None:
        super().__init__(None, message)


def _path_from_url(url: str) -> str:
    """Return path and query of ``url``, or ``url`` itself if it has no scheme."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url
    return f"{parts.path}?{parts.query}" if parts.query else parts.path
