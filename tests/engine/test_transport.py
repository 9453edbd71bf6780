"""Tests for request building and single-exchange transport."""

import json
import platform
import re

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from apify_http import __version__
from apify_http.domain.call import normalize_options
from apify_http.http.transport import (
    CLIENT_USER_AGENT,
    CONTENT_TYPE_JSON_HEADER,
    Transport,
    build_request,
)
from apify_http.infrastructure.http import AiohttpClient

BASE_URL = "https://api.example.com"
TOKEN = "test-token"

ACTS_URL = re.compile(r"^https://api\.example\.com/v2/acts(\?.*)?$")


def make_descriptor(**options):
    base = {"base_url": BASE_URL, "url": "/v2/acts", "method": "GET", "token": TOKEN}
    base.update(options)
    return normalize_options(base)


@pytest_asyncio.fixture
async def transport(stats, mock_logger):
    async with AiohttpClient() as client:
        yield Transport(client, stats, mock_logger)


def sent_kwargs(mocked: aioresponses) -> dict:
    calls = [call for calls in mocked.requests.values() for call in calls]
    assert len(calls) == 1
    return calls[0].kwargs


class TestBuildRequest:
    def test_user_agent_names_client_and_runtime(self):
        assert CLIENT_USER_AGENT == (
            f"ApifyClient/{__version__} "
            f"({platform.system()}; Python/{platform.python_version()})"
        )

    def test_default_headers(self):
        request = build_request(make_descriptor())

        assert request.headers == {
            "user-agent": CLIENT_USER_AGENT,
            "accept-encoding": "gzip",
        }
        assert request.method == "GET"
        assert request.url == "https://api.example.com/v2/acts"

    def test_caller_headers_override_defaults(self):
        request = build_request(
            make_descriptor(headers={"user-agent": "custom/1.0", "x-extra": "1"})
        )

        assert request.headers["user-agent"] == "custom/1.0"
        assert request.headers["x-extra"] == "1"

    def test_token_is_sent_as_query_parameter(self):
        request = build_request(make_descriptor(params={"limit": 10}))

        assert request.params == {"limit": 10, "token": TOKEN}
        assert "authorization" not in {key.lower() for key in request.headers}

    def test_absent_token_and_none_params_are_dropped(self):
        request = build_request(
            make_descriptor(token=None, params={"offset": None, "desc": True})
        )

        assert request.params == {"desc": "true"}

    def test_json_body_is_serialised_with_both_header_casings(self):
        body = {"name": "my-act", "versions": [1, 2]}

        request = build_request(make_descriptor(method="POST", body=body))

        assert json.loads(request.data) == body
        assert request.headers["Content-Type"] == CONTENT_TYPE_JSON_HEADER
        assert request.headers["content-type"] == CONTENT_TYPE_JSON_HEADER
        assert CONTENT_TYPE_JSON_HEADER == "application/json; charset=utf-8"

    def test_raw_body_is_passed_through(self):
        request = build_request(
            make_descriptor(method="PUT", body=b"\x00\x01", json=False)
        )

        assert request.data == b"\x00\x01"
        assert "Content-Type" not in request.headers

    def test_raw_bytes_skip_json_encoding(self):
        request = build_request(make_descriptor(method="PUT", body=b"raw"))

        assert request.data == b"raw"
        assert "Content-Type" not in request.headers

    def test_no_content_type_without_body(self):
        request = build_request(make_descriptor(method="POST"))

        assert request.data is None
        assert "content-type" not in request.headers


class TestTransportSend:
    @pytest.mark.asyncio
    async def test_decodes_json_body(self, transport, stats):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, status=200, payload={"data": {"items": []}})

            attempt = await transport.send(make_descriptor(), 1)

        assert attempt.ordinal == 1
        assert attempt.status_code == 200
        assert attempt.body == {"data": {"items": []}}
        assert attempt.error is None
        assert stats.requests == 1

    @pytest.mark.asyncio
    async def test_http_errors_are_results_not_exceptions(self, transport):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, status=503, body="")

            attempt = await transport.send(make_descriptor(), 2)

        assert attempt.status_code == 503
        assert attempt.body is None
        assert attempt.error is None

    @pytest.mark.asyncio
    async def test_unparsable_json_is_an_error(self, transport):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, status=200, body='{"data": {"items": [')

            attempt = await transport.send(make_descriptor(), 1)

        assert attempt.status_code == 200
        assert isinstance(attempt.error, ValueError)
        assert attempt.body == b'{"data": {"items": ['

    @pytest.mark.asyncio
    async def test_raw_body_without_content_negotiation(self, transport):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, status=200, body=b"not json")

            attempt = await transport.send(make_descriptor(json=False), 1)

        assert attempt.body == b"not json"
        assert attempt.error is None

    @pytest.mark.asyncio
    async def test_transport_failure_is_captured(self, transport, stats):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, exception=aiohttp.ClientConnectionError("reset"))

            attempt = await transport.send(make_descriptor(), 1)

        assert attempt.status_code is None
        assert isinstance(attempt.error, aiohttp.ClientConnectionError)
        assert stats.requests == 1

    @pytest.mark.asyncio
    async def test_timeout_is_captured(self, transport):
        with aioresponses() as mocked:
            mocked.get(ACTS_URL, exception=TimeoutError())

            attempt = await transport.send(make_descriptor(), 1)

        assert isinstance(attempt.error, TimeoutError)

    @pytest.mark.asyncio
    async def test_sends_single_json_content_type(self, transport):
        with aioresponses() as mocked:
            mocked.post(ACTS_URL, status=201, payload={"data": {"id": "a"}})

            await transport.send(make_descriptor(method="POST", body={"a": 1}), 1)

            kwargs = sent_kwargs(mocked)

        assert kwargs["headers"].getall("Content-Type") == [CONTENT_TYPE_JSON_HEADER]
        assert kwargs["headers"]["accept-encoding"] == "gzip"
        assert kwargs["params"] == {"token": TOKEN}
        assert json.loads(kwargs["data"]) == {"a": 1}
