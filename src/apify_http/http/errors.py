"""Construction of structured errors from failed attempts."""

import json
import typing as t
from dataclasses import dataclass

from ..domain.call import CallDescriptor
from ..domain.exceptions import (
    ApiError,
    ErrorDetails,
    ErrorType,
    RequestFailedError,
)
from ..domain.retry import Attempt


@dataclass(frozen=True)
class CallContext:
    """What is known about a call when it fails."""

    url: str
    method: str
    params: t.Mapping[str, t.Any]
    has_body: bool
    is_api_v1: bool
    attempt: int
    status_code: int | None = None

    @classmethod
    def from_attempt(cls, descriptor: CallDescriptor, attempt: Attempt) -> "CallContext":
        return cls(
            url=descriptor.request_url,
            method=descriptor.method.value,
            params=dict(descriptor.params),
            has_body=descriptor.has_body,
            is_api_v1=descriptor.is_api_v1,
            attempt=attempt.ordinal,
            status_code=attempt.status_code,
        )

    def details(self, error: str | None = None) -> ErrorDetails:
        return ErrorDetails(
            url=self.url,
            method=self.method,
            params=self.params,
            has_body=self.has_body,
            attempt=self.attempt,
            status_code=self.status_code,
            error=error,
        )


def api_error_from_response(body: t.Any, context: CallContext) -> ApiError:
    """Build an ApiError from a response body.

    Uses the ``{"error": {"type": ..., "message": ...}}`` object when the API
    sent one, otherwise dumps the whole body into the message.
    """
    body = _coerce_body(body)
    nested = body.get("error") if isinstance(body, dict) else None

    if isinstance(nested, dict) and "message" in nested:
        message = str(nested["message"])
        error_type = nested.get("type") or ErrorType.request_failed(context.is_api_v1)
    else:
        message = f"Unexpected error: {_dump(body)}"
        error_type = ErrorType.request_failed(context.is_api_v1)

    return ApiError(error_type, message, context.details(error=message))


def request_failed_error(
    context: CallContext, cause: BaseException | None
) -> RequestFailedError:
    """Build the error raised once retries are exhausted."""
    if context.attempt == 1:
        message = "API request failed on the first try"
    else:
        message = f"API request failed on retry number {context.attempt - 1}"

    cause_message = None
    if cause is not None:
        cause_message = cause.message if isinstance(cause, ApiError) else str(cause)

    return RequestFailedError(
        ErrorType.request_failed(context.is_api_v1),
        message,
        context.details(error=cause_message),
        cause,
    )


def _coerce_body(body: t.Any) -> t.Any:
    """Decode raw bytes and, where possible, parse them as JSON."""
    if isinstance(body, (bytes, bytearray)):
        body = bytes(body).decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            return json.loads(body)
        except ValueError:
            return body
    return body


def _dump(body: t.Any) -> str:
    try:
        return json.dumps(body, indent=2)
    except (TypeError, ValueError):
        return str(body)
