"""Single-exchange HTTP transport.

Builds the wire request for a descriptor and performs exactly one exchange.
HTTP error statuses are ordinary results here: only failures that prevent a
usable response (connection errors, timeouts, undecodable JSON) end up in
``Attempt.error``.
"""

import asyncio
import json
import platform
import typing as t
from dataclasses import dataclass, field

import aiohttp
from multidict import CIMultiDict, CIMultiDictProxy

from .. import __version__
from ..domain.call import CallDescriptor
from ..domain.retry import Attempt
from ..domain.stats import CallStats
from ..infrastructure.http import AiohttpClient
from ..infrastructure.logging import get_logger

if t.TYPE_CHECKING:
    import loguru

CONTENT_TYPE_HEADER_NAME = "Content-Type"
CONTENT_TYPE_JSON_HEADER = "application/json; charset=utf-8"
CLIENT_USER_AGENT = (
    f"ApifyClient/{__version__} "
    f"({platform.system()}; Python/{platform.python_version()})"
)

# Failures raised by aiohttp or the socket layer before a response is usable
TRANSPORT_EXCEPTIONS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


@dataclass(frozen=True)
class RequestSpec:
    """Wire-level request built from a descriptor."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, t.Any] = field(default_factory=dict)
    data: t.Any = None


@dataclass(frozen=True)
class Response:
    """Full response envelope, returned when the caller asks for metadata."""

    status_code: int
    headers: t.Mapping[str, str]
    body: t.Any
    url: str


def build_request(descriptor: CallDescriptor) -> RequestSpec:
    """Translate a descriptor into headers, query parameters and payload."""
    headers = {
        "user-agent": CLIENT_USER_AGENT,
        "accept-encoding": "gzip",
        **descriptor.headers,
    }

    params = {**descriptor.params, "token": descriptor.token}
    params = {key: _query_value(value) for key, value in params.items() if value is not None}

    data = descriptor.body
    # Raw bytes go out as-is; only structured bodies are JSON-encoded.
    if descriptor.json_ and descriptor.has_body and not _is_raw(data):
        # Downstream code may look the header up with either casing.
        headers[CONTENT_TYPE_HEADER_NAME] = CONTENT_TYPE_JSON_HEADER
        headers[CONTENT_TYPE_HEADER_NAME.lower()] = CONTENT_TYPE_JSON_HEADER
        data = json.dumps(descriptor.body)

    return RequestSpec(
        method=descriptor.method.value,
        url=descriptor.request_url,
        headers=headers,
        params=params,
        data=data,
    )


def _is_raw(body: t.Any) -> bool:
    return isinstance(body, (bytes, bytearray))


def _query_value(value: t.Any) -> t.Any:
    # yarl refuses booleans in query strings
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _wire_headers(headers: t.Mapping[str, str]) -> CIMultiDict[str]:
    """Collapse case variants into one header each; the last value wins."""
    merged: CIMultiDict[str] = CIMultiDict()
    for name, value in headers.items():
        merged[name] = value
    return merged


class Transport:
    """Executes one HTTP exchange per ``send`` over a shared session."""

    def __init__(
        self,
        client: AiohttpClient,
        stats: CallStats,
        logger: "loguru.Logger" = get_logger(__name__),
    ) -> None:
        self.client = client
        self.stats = stats
        self.logger = logger

    async def send(self, descriptor: CallDescriptor, ordinal: int) -> Attempt:
        """Perform one exchange and report it as an Attempt."""
        request = build_request(descriptor)
        self.stats.record_attempt()

        status_code: int | None = None
        headers: t.Mapping[str, str] = {}
        raw = b""
        try:
            async with self.client.request(
                request.method,
                request.url,
                headers=_wire_headers(request.headers),
                params=request.params,
                data=request.data,
            ) as response:
                status_code = response.status
                headers = CIMultiDictProxy(CIMultiDict(response.headers))
                raw = await response.read()
        except TRANSPORT_EXCEPTIONS as e:
            self.logger.debug(
                f"Attempt {ordinal} {request.method} {request.url} failed: "
                f"{type(e).__name__}: {e}"
            )
            return Attempt(
                ordinal=ordinal, status_code=status_code, headers=headers, error=e
            )

        self.logger.debug(
            f"Attempt {ordinal} {request.method} {request.url} -> {status_code}"
        )

        if not descriptor.json_:
            return Attempt(ordinal=ordinal, status_code=status_code, headers=headers, body=raw)
        if not raw:
            return Attempt(ordinal=ordinal, status_code=status_code, headers=headers)

        # A truncated body can come with a 2xx status, so a decode failure
        # is reported as an error rather than an empty payload.
        try:
            body = json.loads(raw)
        except ValueError as e:
            return Attempt(
                ordinal=ordinal,
                status_code=status_code,
                headers=headers,
                body=raw,
                error=e,
            )
        return Attempt(ordinal=ordinal, status_code=status_code, headers=headers, body=body)
