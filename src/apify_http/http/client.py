"""HTTP client facade used by the resource layer."""

import asyncio
import types
import typing as t

from ..config.settings import Settings
from ..domain.call import CallDescriptor, normalize_call
from ..domain.stats import CallStats, CallStatsSnapshot
from ..infrastructure.http import AiohttpClient
from ..infrastructure.logging import get_logger
from .classifier import ResponseClassifier
from .scheduler import BackoffScheduler
from .transport import Transport

if t.TYPE_CHECKING:
    import loguru


class HttpClient:
    """Executes API calls with validation, retries and structured errors.

    Options given to ``call`` are merged over the client's default options
    (typically base_url and token). The client keeps one keep-alive session
    for its lifetime and must be used as an async context manager, or
    opened and closed explicitly.

    Example:
        async with HttpClient({"base_url": BASE_URL, "token": token}) as client:
            acts = await client.call(url="/v2/acts", method="GET")
    """

    def __init__(
        self,
        default_options: t.Mapping[str, t.Any] | None = None,
        stats: CallStats | None = None,
        client: AiohttpClient | None = None,
        logger: "loguru.Logger" = get_logger(__name__),
        sleep: t.Callable[[float], t.Awaitable[t.Any]] = asyncio.sleep,
        jitter: bool = True,
    ) -> None:
        """
        Initialise the HTTP client.

        Args:
            default_options: Options applied to every call unless overridden
            stats: Shared counters. A fresh CallStats is created if None.
            client: Session wrapper. An AiohttpClient owning its own
                keep-alive session is created if None.
            logger: Logger passed down to transport and scheduler
            sleep: Awaitable used for backoff waits
            jitter: Randomise backoff delays
        """
        self.default_options = dict(default_options or {})
        self._stats = stats if stats is not None else CallStats()
        self._client = client if client is not None else AiohttpClient()
        self.logger = logger
        self._scheduler = BackoffScheduler(
            transport=Transport(self._client, self._stats, logger),
            classifier=ResponseClassifier(self._stats),
            logger=logger,
            sleep=sleep,
            jitter=jitter,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: t.Any) -> "HttpClient":
        return cls(settings.call_defaults(), **kwargs)

    @property
    def stats(self) -> CallStatsSnapshot:
        return self._stats.snapshot()

    def descriptor(self, **options: t.Any) -> CallDescriptor:
        """Normalise ``options`` against the defaults without sending anything."""
        return normalize_call(self.default_options, options)

    async def call(self, **options: t.Any) -> t.Any:
        """
        Execute one API call.

        Raises:
            InvalidParameterError: If the merged options are invalid
            ApiError: If the API rejected the request
            RequestFailedError: If retries were exhausted
        """
        descriptor = self.descriptor(**options)
        self._stats.record_call()
        return await self._scheduler.run(descriptor)

    async def open(self) -> None:
        await self._client.open()

    async def close(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> "HttpClient":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        await self.close()
