"""Factories for TLS contexts and connectors."""

import ssl
import typing as t

import aiohttp
import certifi


def create_ssl_context() -> ssl.SSLContext:
    """Create an SSL context that trusts the certifi CA bundle."""
    return ssl.create_default_context(cafile=certifi.where())


def create_secure_connector(
    ssl: ssl.SSLContext | None = None, **connector_kwargs: t.Any
) -> aiohttp.TCPConnector:
    """Create a keep-alive TCPConnector.

    The connector pools connections per (host, port, TLS) key, so plain and
    TLS traffic each keep their own persistent connections.

    Args:
        ssl: SSL context to use. Defaults to one built on certifi.
        **connector_kwargs: Passed through to ``aiohttp.TCPConnector``.
    """
    return aiohttp.TCPConnector(
        ssl=ssl if ssl is not None else create_ssl_context(),
        **connector_kwargs,
    )
