"""Session lifecycle wrapper around aiohttp.ClientSession."""

import types
import typing as t

import aiohttp

from ...domain.exceptions import ClientNotInitialisedError
from .factories import create_secure_connector


class AiohttpClient:
    """Owns (or borrows) one ClientSession for the lifetime of a client.

    Use as an async context manager. A session passed in by the caller is
    used as-is and never closed here.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        connector_factory: t.Callable[[], aiohttp.BaseConnector] = (
            create_secure_connector
        ),
    ) -> None:
        self._session = session
        self._owns_session = session is None
        self._connector_factory = connector_factory

    @property
    def closed(self) -> bool:
        return self._session is None or self._session.closed

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            raise ClientNotInitialisedError(
                "HTTP client not initialised: use 'async with' or call open()"
            )
        return self._session

    async def open(self) -> None:
        if self._session is not None and not self._session.closed:
            return
        self._session = aiohttp.ClientSession(connector=self._connector_factory())
        self._owns_session = True

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()

    def request(
        self, method: str, url: str, **kwargs: t.Any
    ) -> "aiohttp.client._RequestContextManager":
        return self.session.request(method, url, **kwargs)

    async def __aenter__(self) -> "AiohttpClient":
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        await self.close()
