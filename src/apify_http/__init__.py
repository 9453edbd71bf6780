"""apify-http - retrying HTTP execution layer for the Apify API."""

__version__ = "0.1.0"

from .domain.exceptions import (  # noqa: E402
    ApiError,
    ApifyClientError,
    ErrorType,
    InvalidParameterError,
    RequestFailedError,
)
from .domain.stats import CallStats  # noqa: E402
from .http import HttpClient, Response  # noqa: E402

__all__ = [
    "__version__",
    "ApiError",
    "ApifyClientError",
    "CallStats",
    "ErrorType",
    "HttpClient",
    "InvalidParameterError",
    "RequestFailedError",
    "Response",
]
