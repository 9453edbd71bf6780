"""Call descriptor model and option normalisation.

A ``CallDescriptor`` is the fully validated description of one API
operation. Descriptors are built by ``normalize_options`` (or
``normalize_call``, which first merges per-call options over client-level
defaults) and are immutable afterwards.
"""

import json
import typing as t
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ErrorType, InvalidParameterError

RATE_LIMIT_EXCEEDED_STATUS_CODE = 429
EXP_BACKOFF_MILLIS = 500
EXP_BACKOFF_MAX_REPEATS = 8  # roughly 128s of total waiting with the default base


class HttpMethod(str, Enum):
    GET = "GET"
    DELETE = "DELETE"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"


ALLOWED_HTTP_METHODS: tuple[str, ...] = tuple(method.value for method in HttpMethod)


class CallDescriptor(BaseModel):
    """Normalised specification of a single API call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    base_url: str = Field(description="API host, without trailing slash")
    url: str = Field(default="", description="Resource path appended to base_url")
    method: HttpMethod
    auth_required: bool = False
    token: str | None = None
    params: dict[str, t.Any] = Field(default_factory=dict)
    body: t.Any = None
    json_: bool = Field(
        default=True,
        alias="json",
        description="Send the body as JSON and decode JSON responses",
    )
    headers: dict[str, str] = Field(default_factory=dict)
    resolve_with_full_response: bool = False
    is_api_v1: bool = False
    exp_backoff_millis: int = Field(default=EXP_BACKOFF_MILLIS, gt=0)
    exp_backoff_max_repeats: int = Field(default=EXP_BACKOFF_MAX_REPEATS, ge=1)
    retry_on_status_codes: frozenset[int] = Field(
        default=frozenset({RATE_LIMIT_EXCEEDED_STATUS_CODE})
    )

    @property
    def request_url(self) -> str:
        return f"{self.base_url}{self.url}"

    @property
    def has_body(self) -> bool:
        return self.body is not None and self.body != b"" and self.body != ""


CallOptions = t.Mapping[str, t.Any]


def normalize_call(
    defaults: CallOptions, overrides: CallOptions | None = None
) -> CallDescriptor:
    """Merge per-call options over client defaults and normalise the result.

    Override values of ``None`` do not mask the corresponding default.
    """
    merged = dict(defaults)
    if overrides:
        merged.update({key: value for key, value in overrides.items() if value is not None})
    return normalize_options(merged)


def normalize_options(options: CallOptions | CallDescriptor) -> CallDescriptor:
    """Validate call options and fill in defaults.

    Feeding an already-normalised descriptor back in returns an equal one.

    Raises:
        InvalidParameterError: If base_url or method is missing or invalid,
            the token is missing while auth is required, a JSON body
            cannot be encoded, or a tuning knob is out of range.
    """
    if isinstance(options, CallDescriptor):
        options = options.model_dump()

    is_api_v1 = bool(options.get("is_api_v1", False))
    error_type = ErrorType.invalid_parameter(is_api_v1)

    base_url = options.get("base_url")
    if not isinstance(base_url, str):
        raise InvalidParameterError(
            error_type, 'The "base_url" option of type string is required.'
        )
    base_url = base_url.rstrip("/")

    method = options.get("method")
    if isinstance(method, HttpMethod):
        method = method.value
    if not isinstance(method, str):
        raise InvalidParameterError(
            error_type, 'The "method" option of type string is required.'
        )
    normalized_method = method.upper()
    if normalized_method not in ALLOWED_HTTP_METHODS:
        # The API reports unknown methods with the current-version tag only.
        raise InvalidParameterError(
            ErrorType.INVALID_PARAMETER_V2,
            'The "method" option is invalid. Expected one of '
            f"{', '.join(ALLOWED_HTTP_METHODS)} but got: {method}",
        )

    token = options.get("token")
    if options.get("auth_required") and (not isinstance(token, str) or not token):
        raise InvalidParameterError(
            error_type, 'The "token" option of type string is required.'
        )

    _check_body_encodable(options, error_type)

    values = dict(options)
    values.update(
        base_url=base_url,
        method=normalized_method,
        exp_backoff_millis=_or_default(
            options.get("exp_backoff_millis"), EXP_BACKOFF_MILLIS
        ),
        exp_backoff_max_repeats=_or_default(
            options.get("exp_backoff_max_repeats"), EXP_BACKOFF_MAX_REPEATS
        ),
        retry_on_status_codes=frozenset(
            _or_default(
                options.get("retry_on_status_codes"),
                {RATE_LIMIT_EXCEEDED_STATUS_CODE},
            )
        ),
    )
    for key in ("params", "headers"):
        if values.get(key) is None:
            values.pop(key, None)

    try:
        return CallDescriptor.model_validate(values)
    except ValidationError as e:
        raise InvalidParameterError(
            error_type, f"Invalid call options: {e}", cause=e
        ) from e


def _or_default(value: t.Any, default: t.Any) -> t.Any:
    return default if value is None else value


def _check_body_encodable(options: CallOptions, error_type: ErrorType) -> None:
    body = options.get("body")
    send_json = options.get("json", options.get("json_", True))
    if not send_json or body is None or isinstance(body, (bytes, bytearray, str)):
        return
    try:
        json.dumps(body)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(
            error_type,
            f'The "body" option cannot be encoded as JSON: {e}',
            cause=e,
        ) from e
