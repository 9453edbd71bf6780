"""Shared fixtures for CLI tests."""

import pytest
from typer.testing import CliRunner

from apify_http.cli.app import create_cli_app
from apify_http.cli.state import CLIState
from apify_http.domain.stats import CallStatsSnapshot
from apify_http.http import HttpClient


@pytest.fixture
def cli_runner():
    """Provide Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def mock_http_client(mocker):
    """Provide a mocked HttpClient usable as an async context manager."""
    mock = mocker.AsyncMock(spec=HttpClient)
    mock.__aenter__.return_value = mock
    mock.__aexit__.return_value = None
    mock.stats = CallStatsSnapshot(calls=1, requests=2, rate_limit_errors={1: 1})
    return mock


@pytest.fixture
def cli_state_with_mock_client(test_settings, mock_http_client):
    return CLIState(test_settings, client_factory=lambda settings: mock_http_client)


@pytest.fixture
def app_with_mock_client(cli_state_with_mock_client):
    """CLI app with mocked client factory for testing."""
    return create_cli_app(state=cli_state_with_mock_client)
