"""Pytest configuration and fixtures for apify_http tests."""

import typing as t

import loguru
import pytest
import pytest_asyncio
from blockbuster import BlockBuster, blockbuster_ctx

from apify_http.app import create_app
from apify_http.config.settings import Environment, LogLevel, Settings
from apify_http.domain.stats import CallStats
from apify_http.http import HttpClient
from apify_http.infrastructure.logging import reset_logging

BASE_URL = "https://api.example.com"
TOKEN = "test-token"


@pytest.fixture(autouse=True)
def blockbuster() -> t.Iterator[BlockBuster]:
    """Detect blocking calls in async event loop during tests.

    Raises BlockingError if any blocking I/O is called from apify_http code
    running inside an async context.
    """
    with blockbuster_ctx(scanned_modules=["apify_http"]) as bb:
        # Third party modules use these functions, so we deactivate them
        bb.functions["os.path.abspath"].deactivate()
        yield bb


@pytest.fixture(autouse=True)
def clean_logging_state():
    """Reset logging before and after each test for isolation."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def test_settings():
    """Provide test-specific settings."""
    return Settings(
        environment=Environment.TESTING,
        log_level=LogLevel.CRITICAL,  # Minimal logging during tests
        base_url=BASE_URL,
        token=TOKEN,
    )


@pytest.fixture
def test_app(test_settings):
    """Provide a test app with clean logging state."""
    app = create_app(settings=test_settings)
    yield app


@pytest.fixture
def mock_logger(mocker):
    """Provide a mock logger for testing that captures log calls."""
    return mocker.Mock(spec=loguru.logger)


@pytest.fixture
def stats() -> CallStats:
    return CallStats()


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the delays requested by the scheduler."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    """Awaitable stand-in for asyncio.sleep that records delays and returns at once."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest_asyncio.fixture
async def http_client(stats, mock_logger, fake_sleep):
    """Provide an opened HttpClient with fast, deterministic backoff."""
    client = HttpClient(
        {"base_url": BASE_URL, "token": TOKEN},
        stats=stats,
        logger=mock_logger,
        sleep=fake_sleep,
        jitter=False,
    )
    async with client:
        yield client
