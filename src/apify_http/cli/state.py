"""CLI state container."""

import typing as t

from ..config.settings import Settings
from ..http import HttpClient

ClientFactory = t.Callable[[Settings], HttpClient]


def _default_client_factory(settings: Settings) -> HttpClient:
    return HttpClient.from_settings(settings)


class CLIState:
    """Shared state for CLI commands.

    Holds Settings and the factory used to build an HttpClient, which tests
    replace with one returning a mock.
    """

    def __init__(
        self, settings: Settings, client_factory: ClientFactory | None = None
    ) -> None:
        self.settings = settings
        self._client_factory = client_factory or _default_client_factory

    def create_client(self) -> HttpClient:
        return self._client_factory(self.settings)
