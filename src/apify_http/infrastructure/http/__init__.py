"""aiohttp wiring: TLS context, keep-alive connector and session lifecycle."""

from .client import AiohttpClient
from .factories import create_secure_connector, create_ssl_context

__all__ = ["AiohttpClient", "create_secure_connector", "create_ssl_context"]
